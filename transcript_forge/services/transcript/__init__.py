"""
Transcript Forge - Channel Transcript Package
=============================================

HTML and plain-text transcript generation for guild channels and threads.

Pipeline:
    fetcher -> converter -> html_generator (markdown, resolver, members)
    orchestrated by generate_transcript().
"""

from .models import (
    ChannelInfo,
    DateRange,
    GuildInfo,
    HtmlGenerationOptions,
    TranscriptAttachment,
    TranscriptAuthor,
    TranscriptComponent,
    TranscriptEmbed,
    TranscriptEmoji,
    TranscriptMessage,
    TranscriptMetadata,
    TranscriptOptions,
    TranscriptReaction,
    TranscriptResult,
)
from .fetcher import (
    fetch_messages,
    validate_channel,
)
from .converter import (
    convert_message,
    convert_messages,
)
from .resolver import (
    EntityResolver,
    MentionCache,
    mention_cache,
)
from .markdown import (
    MarkdownRenderer,
    render_markdown,
)
from .members import (
    Participant,
    collect_participants,
)
from .html_generator import (
    create_transcript_file,
    generate_html_transcript,
)
from .orchestrator import (
    generate_transcript,
)

__all__ = [
    # Models
    "ChannelInfo",
    "DateRange",
    "GuildInfo",
    "HtmlGenerationOptions",
    "TranscriptAttachment",
    "TranscriptAuthor",
    "TranscriptComponent",
    "TranscriptEmbed",
    "TranscriptEmoji",
    "TranscriptMessage",
    "TranscriptMetadata",
    "TranscriptOptions",
    "TranscriptReaction",
    "TranscriptResult",
    # Fetching
    "fetch_messages",
    "validate_channel",
    # Conversion
    "convert_message",
    "convert_messages",
    # Mentions
    "EntityResolver",
    "MentionCache",
    "mention_cache",
    # Markdown
    "MarkdownRenderer",
    "render_markdown",
    # Members
    "Participant",
    "collect_participants",
    # HTML
    "generate_html_transcript",
    "create_transcript_file",
    # Orchestration
    "generate_transcript",
]
