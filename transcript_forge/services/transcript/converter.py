"""
Transcript Forge - Content Converter
====================================

Maps raw discord.py messages into TranscriptMessage records.

DESIGN:
    Every message is converted on its own; a message that cannot be
    converted is logged and dropped without touching its siblings. Inside
    a message, each embed, attachment, reaction and component is also
    converted on its own so one malformed part only loses that part.

    Embeds and components are read through their raw payloads (to_dict()),
    which lets gateway dicts and discord.py objects share one code path.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from transcript_forge.core.logger import logger
from .models import (
    ComponentType,
    TranscriptAttachment,
    TranscriptAuthor,
    TranscriptComponent,
    TranscriptEmbed,
    TranscriptEmbedAuthor,
    TranscriptEmbedField,
    TranscriptEmbedFooter,
    TranscriptEmbedProvider,
    TranscriptEmoji,
    TranscriptMedia,
    TranscriptMentions,
    TranscriptMessage,
    TranscriptReaction,
    TranscriptSelectOption,
)


T = TypeVar("T")


# =============================================================================
# Helpers
# =============================================================================

def _payload(obj: Any) -> Dict[str, Any]:
    """Raw dict payload for a discord.py object or an already-raw dict."""
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Cannot read payload from {type(obj).__name__}")


def _enum_value(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(getattr(value, "value", value))


def _snowflake(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "", 0) else None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _convert_each(
    items: Iterable[Any],
    convert: Callable[[Any], T],
    kind: str,
    message_id: str,
) -> List[T]:
    """Convert items one by one, logging and skipping the ones that fail."""
    converted: List[T] = []
    for index, item in enumerate(items or []):
        try:
            converted.append(convert(item))
        except Exception as e:
            logger.warning(f"Transcript {kind} Skipped", [
                ("Message", message_id),
                ("Index", str(index)),
                ("Error", str(e)[:100]),
            ])
    return converted


# =============================================================================
# Messages
# =============================================================================

def convert_messages(
    messages: List[Any],
    include_reactions: bool = True,
    include_components: bool = True,
) -> List[TranscriptMessage]:
    """
    Convert raw messages, dropping any that fail.

    Args:
        messages: Raw messages in display order
        include_reactions: Convert reactions (skipped entirely when False)
        include_components: Convert components (skipped entirely when False)

    Returns:
        Converted messages in the same order.
    """
    converted: List[TranscriptMessage] = []
    dropped = 0

    for message in messages:
        try:
            converted.append(convert_message(message, include_reactions, include_components))
        except Exception as e:
            dropped += 1
            logger.error("Transcript Message Conversion Failed", [
                ("Message", str(getattr(message, "id", "?"))),
                ("Error", str(e)[:100]),
            ])

    logger.debug("Transcript Messages Converted", [
        ("Converted", str(len(converted))),
        ("Dropped", str(dropped)),
    ])
    return converted


def convert_message(
    message: Any,
    include_reactions: bool = True,
    include_components: bool = True,
) -> TranscriptMessage:
    """Convert one raw message. Raises if the message itself is unreadable."""
    message_id = str(message.id)
    reference = getattr(message, "reference", None)
    flags = getattr(message, "flags", None)

    return TranscriptMessage(
        id=message_id,
        content=message.content or "",
        author=convert_author(message.author),
        timestamp=message.created_at,
        embeds=_convert_each(message.embeds, convert_embed, "Embed", message_id),
        attachments=_convert_each(message.attachments, convert_attachment, "Attachment", message_id),
        reactions=(
            _convert_each(message.reactions, convert_reaction, "Reaction", message_id)
            if include_reactions else []
        ),
        components=(
            flatten_components(message.components, message_id)
            if include_components else []
        ),
        edited=message.edited_at is not None,
        edited_timestamp=message.edited_at,
        mention_everyone=bool(getattr(message, "mention_everyone", False)),
        mentions=TranscriptMentions(
            users={str(i) for i in getattr(message, "raw_mentions", None) or []},
            roles={str(i) for i in getattr(message, "raw_role_mentions", None) or []},
            channels={str(i) for i in getattr(message, "raw_channel_mentions", None) or []},
        ),
        referenced_message_id=_snowflake(getattr(reference, "message_id", None)),
        type=_enum_value(getattr(message, "type", 0)) or 0,
        flags=_enum_value(flags),
    )


def convert_author(user: Any) -> TranscriptAuthor:
    discriminator = getattr(user, "discriminator", None)
    avatar = getattr(user, "display_avatar", None)
    return TranscriptAuthor(
        id=str(user.id),
        username=user.name,
        display_name=getattr(user, "display_name", None),
        discriminator=discriminator if discriminator not in (None, "", "0") else None,
        avatar_url=str(avatar.url) if avatar is not None else None,
        bot=bool(getattr(user, "bot", False)),
    )


# =============================================================================
# Embeds
# =============================================================================

def _convert_media(data: Optional[Dict[str, Any]]) -> Optional[TranscriptMedia]:
    if not data or not data.get("url"):
        return None
    return TranscriptMedia(
        url=data["url"],
        proxy_url=data.get("proxy_url"),
        width=data.get("width"),
        height=data.get("height"),
    )


def convert_embed(embed: Any) -> TranscriptEmbed:
    data = _payload(embed)

    footer = data.get("footer")
    author = data.get("author")
    provider = data.get("provider")

    return TranscriptEmbed(
        title=data.get("title") or None,
        type=data.get("type") or None,
        description=data.get("description") or None,
        url=data.get("url") or None,
        timestamp=_parse_timestamp(data.get("timestamp")),
        color=data.get("color") or None,
        footer=TranscriptEmbedFooter(
            text=footer.get("text") or "",
            icon_url=footer.get("icon_url"),
        ) if footer else None,
        image=_convert_media(data.get("image")),
        thumbnail=_convert_media(data.get("thumbnail")),
        author=TranscriptEmbedAuthor(
            name=author.get("name") or "",
            url=author.get("url"),
            icon_url=author.get("icon_url"),
        ) if author else None,
        provider=TranscriptEmbedProvider(
            name=provider["name"],
            url=provider.get("url"),
        ) if provider and provider.get("name") else None,
        video=_convert_media(data.get("video")),
        fields=[
            TranscriptEmbedField(
                name=f.get("name") or "",
                value=f.get("value") or "",
                inline=bool(f.get("inline", False)),
            )
            for f in data.get("fields") or []
        ],
    )


# =============================================================================
# Attachments and Reactions
# =============================================================================

def convert_attachment(attachment: Any) -> TranscriptAttachment:
    return TranscriptAttachment(
        id=str(attachment.id),
        name=getattr(attachment, "filename", None) or "Unknown",
        size=int(getattr(attachment, "size", 0) or 0),
        url=attachment.url,
        proxy_url=getattr(attachment, "proxy_url", None),
        content_type=getattr(attachment, "content_type", None),
        width=getattr(attachment, "width", None) or None,
        height=getattr(attachment, "height", None) or None,
    )


def convert_emoji(emoji: Any) -> TranscriptEmoji:
    """Convert a unicode string, discord emoji object or raw emoji dict."""
    if isinstance(emoji, str):
        return TranscriptEmoji(name=emoji)
    if isinstance(emoji, dict):
        return TranscriptEmoji(
            name=emoji.get("name") or "",
            id=_snowflake(emoji.get("id")),
            animated=bool(emoji.get("animated", False)),
        )
    return TranscriptEmoji(
        name=getattr(emoji, "name", None) or "",
        id=_snowflake(getattr(emoji, "id", None)),
        animated=bool(getattr(emoji, "animated", False)),
    )


def convert_reaction(reaction: Any) -> TranscriptReaction:
    return TranscriptReaction(
        emoji=convert_emoji(reaction.emoji),
        count=int(reaction.count),
        me=bool(getattr(reaction, "me", False)),
    )


# =============================================================================
# Components
# =============================================================================

def flatten_components(rows: Optional[List[Any]], message_id: str = "?") -> List[TranscriptComponent]:
    """
    Flatten action rows into a single component list.

    Only action rows (type 1) are descended into; anything else at the top
    level is skipped.
    """
    components: List[TranscriptComponent] = []

    for row in rows or []:
        try:
            data = _payload(row)
        except TypeError as e:
            logger.warning("Transcript Component Row Unreadable", [
                ("Message", message_id),
                ("Error", str(e)[:100]),
            ])
            continue

        if data.get("type") != ComponentType.ACTION_ROW or not isinstance(data.get("components"), list):
            logger.debug("Transcript Component Skipped", [
                ("Message", message_id),
                ("Type", str(data.get("type"))),
            ])
            continue

        components.extend(
            _convert_each(data["components"], convert_component, "Component", message_id)
        )

    return components


def convert_component(component: Any) -> TranscriptComponent:
    data = _payload(component)
    emoji = data.get("emoji")

    return TranscriptComponent(
        type=int(data["type"]),
        style=data.get("style"),
        label=data.get("label"),
        emoji=convert_emoji(emoji) if emoji else None,
        url=data.get("url"),
        custom_id=data.get("custom_id"),
        disabled=bool(data.get("disabled", False)),
        placeholder=data.get("placeholder"),
        min_values=data.get("min_values"),
        max_values=data.get("max_values"),
        options=[
            TranscriptSelectOption(
                label=opt.get("label") or "",
                value=opt.get("value") or "",
                description=opt.get("description"),
                emoji=convert_emoji(opt["emoji"]) if opt.get("emoji") else None,
                default=bool(opt.get("default", False)),
            )
            for opt in data.get("options") or []
        ],
    )


__all__ = [
    "convert_messages",
    "convert_message",
    "convert_author",
    "convert_embed",
    "convert_attachment",
    "convert_emoji",
    "convert_reaction",
    "flatten_components",
    "convert_component",
]
