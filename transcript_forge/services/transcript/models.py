"""
Transcript Forge - Transcript Models
====================================

Data classes for normalized messages, generation options and results.

Author IDs, message IDs and other snowflakes are kept as strings so they
can go straight into HTML attributes and JSON without precision loss.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from transcript_forge.core.errors import TranscriptError


# =============================================================================
# Component Types
# =============================================================================

class ComponentType:
    """Numeric component types used by the chat platform."""
    ACTION_ROW = 1
    BUTTON = 2
    SELECT = 3
    TEXT_INPUT = 4


IMAGE_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
VIDEO_EXTENSIONS = re.compile(r"\.(mp4|webm|mov|avi)$", re.IGNORECASE)
AUDIO_EXTENSIONS = re.compile(r"\.(mp3|wav|ogg|m4a)$", re.IGNORECASE)


# =============================================================================
# Message Parts
# =============================================================================

@dataclass
class TranscriptAuthor:
    """Message author as shown in the transcript."""
    id: str
    username: str
    display_name: Optional[str] = None
    discriminator: Optional[str] = None
    avatar_url: Optional[str] = None
    bot: bool = False

    @property
    def name(self) -> str:
        return self.display_name or self.username or "Unknown User"


@dataclass
class TranscriptMedia:
    """Image, thumbnail or video reference inside an embed."""
    url: str
    proxy_url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def best_url(self) -> str:
        """Proxy URL when present (survives source deletion longer), else the URL."""
        return self.proxy_url or self.url


@dataclass
class TranscriptEmbedFooter:
    text: str
    icon_url: Optional[str] = None


@dataclass
class TranscriptEmbedAuthor:
    name: str
    url: Optional[str] = None
    icon_url: Optional[str] = None


@dataclass
class TranscriptEmbedProvider:
    name: str
    url: Optional[str] = None


@dataclass
class TranscriptEmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass
class TranscriptEmbed:
    """Rich content block attached to a message."""
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    timestamp: Optional[datetime] = None
    color: Optional[int] = None
    footer: Optional[TranscriptEmbedFooter] = None
    image: Optional[TranscriptMedia] = None
    thumbnail: Optional[TranscriptMedia] = None
    author: Optional[TranscriptEmbedAuthor] = None
    provider: Optional[TranscriptEmbedProvider] = None
    video: Optional[TranscriptMedia] = None
    fields: List[TranscriptEmbedField] = field(default_factory=list)


@dataclass
class TranscriptAttachment:
    """
    File attached to a message.

    is_image / is_video / is_audio are derived from the content type when
    it names a media family, otherwise from the filename extension.
    """
    id: str
    name: str
    size: int
    url: str
    proxy_url: Optional[str] = None
    content_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    is_image: bool = field(init=False, default=False)
    is_video: bool = field(init=False, default=False)
    is_audio: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        kind = _media_kind(self.name, self.content_type)
        self.is_image = kind == "image"
        self.is_video = kind == "video"
        self.is_audio = kind == "audio"

    @property
    def is_media(self) -> bool:
        return self.is_image or self.is_video or self.is_audio


def _media_kind(name: Optional[str], content_type: Optional[str]) -> Optional[str]:
    if content_type:
        major = content_type.split("/", 1)[0].strip().lower()
        if major in ("image", "video", "audio"):
            return major
    name = name or ""
    if IMAGE_EXTENSIONS.search(name):
        return "image"
    if VIDEO_EXTENSIONS.search(name):
        return "video"
    if AUDIO_EXTENSIONS.search(name):
        return "audio"
    return None


@dataclass
class TranscriptEmoji:
    """Unicode emoji (no id) or custom emoji (id + name)."""
    name: str
    id: Optional[str] = None
    animated: bool = False


@dataclass
class TranscriptReaction:
    emoji: TranscriptEmoji
    count: int = 1
    me: bool = False


@dataclass
class TranscriptSelectOption:
    label: str
    value: str
    description: Optional[str] = None
    emoji: Optional[TranscriptEmoji] = None
    default: bool = False


@dataclass
class TranscriptComponent:
    """Interactive element, rendered inert in the transcript."""
    type: int
    style: Optional[int] = None
    label: Optional[str] = None
    emoji: Optional[TranscriptEmoji] = None
    url: Optional[str] = None
    custom_id: Optional[str] = None
    disabled: bool = False
    placeholder: Optional[str] = None
    min_values: Optional[int] = None
    max_values: Optional[int] = None
    options: List[TranscriptSelectOption] = field(default_factory=list)


@dataclass
class TranscriptMentions:
    users: Set[str] = field(default_factory=set)
    roles: Set[str] = field(default_factory=set)
    channels: Set[str] = field(default_factory=set)


@dataclass
class TranscriptMessage:
    """A single normalized message."""
    id: str
    content: str
    author: TranscriptAuthor
    timestamp: datetime
    embeds: List[TranscriptEmbed] = field(default_factory=list)
    attachments: List[TranscriptAttachment] = field(default_factory=list)
    reactions: List[TranscriptReaction] = field(default_factory=list)
    components: List[TranscriptComponent] = field(default_factory=list)
    edited: bool = False
    edited_timestamp: Optional[datetime] = None
    mention_everyone: bool = False
    mentions: TranscriptMentions = field(default_factory=TranscriptMentions)
    referenced_message_id: Optional[str] = None
    type: int = 0
    flags: Optional[int] = None


# =============================================================================
# Generation Options
# =============================================================================

@dataclass
class TranscriptOptions:
    """
    Caller-supplied options for one transcript.

    Attributes:
        channel: Guild text channel or thread to archive.
        dark_mode: Start the document in dark mode.
        limit: Maximum messages (None uses the configured default).
        include_reactions: Convert and render reactions.
        include_components: Convert and render buttons/selects/inputs.
        custom_css: Raw CSS appended after the built-in stylesheet.
        include_search: Render the search box and its script.
        include_jump_nav: Render scroll-to-top/bottom controls.
        after: Only messages after this message id.
        before: Only messages before this message id.
        file_name: Base name for the delivered file.
    """
    channel: Any
    dark_mode: bool = True
    limit: Optional[int] = None
    include_reactions: bool = True
    include_components: bool = True
    custom_css: str = ""
    include_search: bool = True
    include_jump_nav: bool = True
    after: Optional[str] = None
    before: Optional[str] = None
    file_name: Optional[str] = None


@dataclass
class ChannelInfo:
    id: str = ""
    name: str = ""
    type: str = ""
    topic: Optional[str] = None


@dataclass
class GuildInfo:
    id: str = ""
    name: str = ""
    icon_url: Optional[str] = None


@dataclass
class HtmlGenerationOptions:
    """Everything the document assembler needs besides the messages."""
    dark_mode: bool
    include_search: bool
    include_jump_nav: bool
    channel_info: ChannelInfo
    guild_info: GuildInfo
    generated_at: datetime
    custom_css: str = ""


# =============================================================================
# Result
# =============================================================================

@dataclass
class DateRange:
    start: datetime
    end: datetime


@dataclass
class TranscriptMetadata:
    message_count: int
    date_range: DateRange
    participants: List[str]
    channel: ChannelInfo
    guild: GuildInfo

    @classmethod
    def empty(cls) -> "TranscriptMetadata":
        now = datetime.now(timezone.utc)
        return cls(
            message_count=0,
            date_range=DateRange(start=now, end=now),
            participants=[],
            channel=ChannelInfo(),
            guild=GuildInfo(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_count": self.message_count,
            "date_range": {
                "start": self.date_range.start.isoformat(),
                "end": self.date_range.end.isoformat(),
            },
            "participants": list(self.participants),
            "channel": {
                "id": self.channel.id,
                "name": self.channel.name,
                "type": self.channel.type,
            },
            "guild": {
                "id": self.guild.id,
                "name": self.guild.name,
                "icon_url": self.guild.icon_url,
            },
        }


@dataclass
class TranscriptResult:
    """Envelope returned for every transcript request."""
    html: str
    text: str
    metadata: TranscriptMetadata
    generated_at: datetime
    success: bool
    error: Optional[str] = None
    error_detail: Optional[TranscriptError] = None
    # Base name requested in TranscriptOptions.file_name
    file_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "html": self.html,
            "text": self.text,
            "metadata": self.metadata.to_dict(),
            "generated_at": self.generated_at.isoformat(),
            "success": self.success,
        }
        if self.file_name:
            data["file_name"] = self.file_name
        if not self.success:
            data["error"] = self.error
            if self.error_detail is not None:
                data["error_detail"] = self.error_detail.to_dict()
        return data


__all__ = [
    "ComponentType",
    "TranscriptAuthor",
    "TranscriptMedia",
    "TranscriptEmbedFooter",
    "TranscriptEmbedAuthor",
    "TranscriptEmbedProvider",
    "TranscriptEmbedField",
    "TranscriptEmbed",
    "TranscriptAttachment",
    "TranscriptEmoji",
    "TranscriptReaction",
    "TranscriptSelectOption",
    "TranscriptComponent",
    "TranscriptMentions",
    "TranscriptMessage",
    "TranscriptOptions",
    "ChannelInfo",
    "GuildInfo",
    "HtmlGenerationOptions",
    "DateRange",
    "TranscriptMetadata",
    "TranscriptResult",
]
