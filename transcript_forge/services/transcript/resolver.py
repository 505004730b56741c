"""
Transcript Forge - Entity Resolver
==================================

Resolves user, channel and role IDs to display names for mention spans.

Lookups go through the guild caches discord.py already maintains, so no
request is ever issued per mention. Resolved names are kept in a
MentionCache that is never evicted; misses are not cached so a later
render can try again once the entity shows up.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import discord

from transcript_forge.core.logger import logger


# =============================================================================
# Cache
# =============================================================================

@dataclass
class MentionCache:
    """
    ID -> name maps for the three mention kinds.

    Writes are idempotent (an ID always maps to the same name), so sharing
    one instance between concurrent transcripts needs no locking.
    """
    users: Dict[str, str] = field(default_factory=dict)
    channels: Dict[str, str] = field(default_factory=dict)
    roles: Dict[str, str] = field(default_factory=dict)

    def clear(self) -> None:
        self.users.clear()
        self.channels.clear()
        self.roles.clear()

    def __len__(self) -> int:
        return len(self.users) + len(self.channels) + len(self.roles)


# Process-wide cache shared by resolvers that are not given their own
mention_cache = MentionCache()


# =============================================================================
# Resolver
# =============================================================================

def _guild_of(ctx: Any) -> Any:
    """Accept either a guild or anything carrying one (channel, message)."""
    if ctx is None or isinstance(ctx, discord.Guild):
        return ctx
    guild = getattr(ctx, "guild", None)
    return guild if guild is not None else ctx


class EntityResolver:
    """Cache-first name lookup for mentions."""

    def __init__(self, cache: Optional[MentionCache] = None) -> None:
        self.cache = cache if cache is not None else mention_cache

    def resolve_user(self, user_id: str, ctx: Any = None) -> Optional[str]:
        """Member display name, or None when the member can't be found."""
        return self._resolve(
            self.cache.users, user_id, ctx, "get_member",
            lambda member: getattr(member, "display_name", None) or getattr(member, "name", None),
        )

    def resolve_channel(self, channel_id: str, ctx: Any = None) -> Optional[str]:
        """Channel or thread name, or None."""
        return self._resolve(
            self.cache.channels, channel_id, ctx, "get_channel_or_thread",
            lambda channel: getattr(channel, "name", None),
        )

    def resolve_role(self, role_id: str, ctx: Any = None) -> Optional[str]:
        """Role name, or None."""
        return self._resolve(
            self.cache.roles, role_id, ctx, "get_role",
            lambda role: getattr(role, "name", None),
        )

    def _resolve(
        self,
        store: Dict[str, str],
        entity_id: str,
        ctx: Any,
        accessor: str,
        name_of: Callable[[Any], Optional[str]],
    ) -> Optional[str]:
        key = str(entity_id)
        cached = store.get(key)
        if cached is not None:
            return cached

        guild = _guild_of(ctx)
        lookup = getattr(guild, accessor, None) if guild is not None else None
        if not callable(lookup):
            return None

        try:
            entity = lookup(int(key))
        except Exception as e:
            logger.debug("Mention Lookup Failed", [
                ("ID", key),
                ("Accessor", accessor),
                ("Error", str(e)[:100]),
            ])
            return None

        name = name_of(entity) if entity is not None else None
        if not name:
            return None

        store[key] = name
        return name


__all__ = [
    "MentionCache",
    "mention_cache",
    "EntityResolver",
]
