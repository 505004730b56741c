"""
Transcript Forge - Participant Collector
========================================

Best-effort participant list for the transcript sidebar.

Threads list their own members; other channels fall back to the distinct
message authors, looked up one at a time through the guild. A member that
can't be looked up still appears, built from the author data on the
message, with an offline status.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import discord

from transcript_forge.core.logger import logger
from transcript_forge.utils.discord_errors import log_http_error
from .models import TranscriptAuthor, TranscriptMessage


# =============================================================================
# Presence
# =============================================================================

STATUS_ORDER = {"online": 0, "idle": 1, "dnd": 2, "offline": 3}

THREAD_TYPES = {
    discord.ChannelType.public_thread,
    discord.ChannelType.private_thread,
    discord.ChannelType.news_thread,
}

DEFAULT_NAME_COLOR = "#DCDDDE"


def normalize_status(status: Any) -> str:
    """
    Map a presence value to online/idle/dnd/offline.

    Accepts discord.Status members or raw strings. Invisible, missing and
    anything unrecognized count as offline.
    """
    if status is None:
        return "offline"
    value = str(getattr(status, "value", status)).lower()
    return value if value in STATUS_ORDER else "offline"


@dataclass
class Participant:
    id: str
    name: str
    avatar_url: Optional[str] = None
    status: str = "offline"
    color: str = DEFAULT_NAME_COLOR
    bot: bool = False

    @classmethod
    def from_member(cls, member: Any) -> "Participant":
        colour = getattr(member, "color", None)
        colour_value = getattr(colour, "value", colour) or 0
        avatar = getattr(member, "display_avatar", None)
        return cls(
            id=str(member.id),
            name=getattr(member, "display_name", None) or member.name,
            avatar_url=str(avatar.url) if avatar is not None else None,
            status=normalize_status(getattr(member, "raw_status", None) or getattr(member, "status", None)),
            color=f"#{colour_value:06x}" if colour_value else DEFAULT_NAME_COLOR,
            bot=bool(getattr(member, "bot", False)),
        )

    @classmethod
    def from_author(cls, author: TranscriptAuthor) -> "Participant":
        return cls(
            id=author.id,
            name=author.name,
            avatar_url=author.avatar_url,
            bot=author.bot,
        )


def sort_participants(participants: List[Participant]) -> List[Participant]:
    """Order by presence (online, idle, dnd, offline) then by name."""
    return sorted(
        participants,
        key=lambda p: (STATUS_ORDER.get(p.status, STATUS_ORDER["offline"]), p.name.lower()),
    )


# =============================================================================
# Collection
# =============================================================================

async def collect_participants(
    channel: Any,
    messages: List[TranscriptMessage],
) -> List[Participant]:
    """
    Collect sidebar participants for a channel.

    Args:
        channel: Thread or guild text channel
        messages: Converted messages, used for authors and as fallback data

    Returns:
        Participants sorted by presence then name. Never raises.
    """
    authors: Dict[str, TranscriptAuthor] = {}
    for message in messages:
        authors.setdefault(message.author.id, message.author)

    guild = getattr(channel, "guild", None)
    participants: Optional[List[Participant]] = None

    if getattr(channel, "type", None) in THREAD_TYPES:
        participants = await _collect_thread_members(channel, guild, authors)

    if participants is None:
        participants = []
        for author_id, author in authors.items():
            participants.append(await _lookup_author(guild, author_id, author))

    return sort_participants(participants)


async def _collect_thread_members(
    channel: Any,
    guild: Any,
    authors: Dict[str, TranscriptAuthor],
) -> Optional[List[Participant]]:
    """Thread member list, or None when it can't be fetched."""
    try:
        thread_members = await channel.fetch_members()
    except Exception as e:
        logger.warning("Thread Members Fetch Failed", [
            ("Thread", str(getattr(channel, "id", "?"))),
            ("Error", str(e)[:100]),
        ])
        return None

    participants: List[Participant] = []
    for thread_member in thread_members:
        member_id = str(thread_member.id)
        member = guild.get_member(int(member_id)) if guild is not None else None
        if member is not None:
            participants.append(Participant.from_member(member))
        elif member_id in authors:
            participants.append(Participant.from_author(authors[member_id]))
        else:
            participants.append(Participant(id=member_id, name=f"User {member_id}"))
    return participants


async def _lookup_author(guild: Any, author_id: str, author: TranscriptAuthor) -> Participant:
    if guild is None:
        return Participant.from_author(author)

    member = guild.get_member(int(author_id))
    if member is not None:
        return Participant.from_member(member)

    try:
        member = await guild.fetch_member(int(author_id))
    except discord.NotFound:
        # Left the server
        return Participant.from_author(author)
    except discord.HTTPException as e:
        log_http_error(e, "Participant Fetch", [("User", author_id)])
        return Participant.from_author(author)
    except Exception as e:
        logger.debug("Participant Lookup Failed", [
            ("User", author_id),
            ("Error", str(e)[:100]),
        ])
        return Participant.from_author(author)

    return Participant.from_member(member)


__all__ = [
    "STATUS_ORDER",
    "Participant",
    "normalize_status",
    "sort_participants",
    "collect_participants",
]
