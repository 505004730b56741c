"""
Transcript Forge - Transcript Orchestrator
==========================================

Entry point that runs the whole pipeline for one channel.

DESIGN:
    validate -> fetch -> convert -> assemble. Stage results come back as
    StageResult values; the first failure moves the request into the
    fallback path, which lists up to `fallback_limit` recent messages as
    plain text. generate_transcript() never raises: every outcome is a
    TranscriptResult with `success` telling the two apart.
"""

import time
from datetime import datetime, timezone
from typing import Any, List, Optional

from transcript_forge.core.config import ConfigValidationError, TranscriptConfig, get_config
from transcript_forge.core.errors import (
    TranscriptError,
    TranscriptErrorCode,
    TranscriptFailure,
)
from transcript_forge.core.logger import logger
from transcript_forge.utils.formatting import format_date
from .converter import convert_messages
from .fetcher import fetch_messages, fetch_recent_messages, validate_channel
from .html_generator import generate_html_transcript
from .markdown import MarkdownRenderer
from .members import collect_participants
from .models import (
    ChannelInfo,
    DateRange,
    GuildInfo,
    HtmlGenerationOptions,
    TranscriptMessage,
    TranscriptMetadata,
    TranscriptOptions,
    TranscriptResult,
)
from .resolver import EntityResolver, MentionCache


# =============================================================================
# Descriptors
# =============================================================================

def describe_channel(channel: Any) -> ChannelInfo:
    return ChannelInfo(
        id=str(channel.id),
        name=getattr(channel, "name", None) or "Unknown Channel",
        type=str(getattr(channel, "type", "")),
        topic=getattr(channel, "topic", None) or None,
    )


def describe_guild(guild: Any) -> GuildInfo:
    icon = getattr(guild, "icon", None)
    return GuildInfo(
        id=str(guild.id),
        name=getattr(guild, "name", None) or "Unknown Server",
        icon_url=str(icon.url) if icon is not None else None,
    )


def build_plain_text(messages: List[TranscriptMessage], config: TranscriptConfig) -> str:
    """One `[date] username: content` line per message."""
    return "\n".join(
        f"[{format_date(m.timestamp, config.tz)}] {m.author.username}: {m.content or '[No text content]'}"
        for m in messages
    )


def build_metadata(
    messages: List[TranscriptMessage],
    channel_info: ChannelInfo,
    guild_info: GuildInfo,
) -> TranscriptMetadata:
    participants: List[str] = []
    for message in messages:
        if message.author.id not in participants:
            participants.append(message.author.id)

    if messages:
        timestamps = [m.timestamp for m in messages]
        date_range = DateRange(start=min(timestamps), end=max(timestamps))
    else:
        now = datetime.now(timezone.utc)
        date_range = DateRange(start=now, end=now)

    return TranscriptMetadata(
        message_count=len(messages),
        date_range=date_range,
        participants=participants,
        channel=channel_info,
        guild=guild_info,
    )


# =============================================================================
# Pipeline
# =============================================================================

async def generate_transcript(
    options: TranscriptOptions,
    config: Optional[TranscriptConfig] = None,
    cache: Optional[MentionCache] = None,
) -> TranscriptResult:
    """
    Generate an HTML and plain-text transcript of a channel.

    Args:
        options: Channel and display options. A missing or malformed value
            fails with INVALID_CHANNEL
        config: Overrides the environment config
        cache: Mention cache to use instead of the process-wide one

    Returns:
        TranscriptResult. Never raises.
    """
    started = time.monotonic()
    channel = getattr(options, "channel", None)

    if config is None:
        try:
            config = get_config()
        except ConfigValidationError as e:
            logger.error("Transcript Config Invalid", [
                ("Error", str(e)[:100]),
                ("Using", "defaults"),
            ])
            config = TranscriptConfig()

    try:
        return await _run_pipeline(options, config, cache, started)
    except TranscriptFailure as e:
        error = e.error
    except Exception as e:
        error = TranscriptError.from_exception(e)

    logger.error("Transcript Generation Failed", [
        ("Channel", str(getattr(channel, "id", "?"))),
        ("Code", error.code.value),
        ("Error", error.message[:100]),
    ])

    return TranscriptResult(
        html="",
        text=await _build_fallback_text(channel, error, config),
        metadata=TranscriptMetadata.empty(),
        generated_at=datetime.now(timezone.utc),
        success=False,
        error=error.message,
        error_detail=error,
        file_name=getattr(options, "file_name", None),
    )


async def _run_pipeline(
    options: TranscriptOptions,
    config: TranscriptConfig,
    cache: Optional[MentionCache],
    started: float,
) -> TranscriptResult:
    channel = validate_channel(getattr(options, "channel", None)).unwrap()

    raw_messages = (await fetch_messages(
        channel,
        limit=options.limit if options.limit is not None else config.default_limit,
        after=options.after,
        before=options.before,
        config=config,
    )).unwrap()

    messages = convert_messages(raw_messages, options.include_reactions, options.include_components)

    channel_info = describe_channel(channel)
    guild_info = describe_guild(channel.guild)
    generated_at = datetime.now(timezone.utc)

    html_options = HtmlGenerationOptions(
        dark_mode=options.dark_mode,
        include_search=options.include_search,
        include_jump_nav=options.include_jump_nav,
        channel_info=channel_info,
        guild_info=guild_info,
        generated_at=generated_at,
        custom_css=options.custom_css,
    )

    renderer = MarkdownRenderer(EntityResolver(cache), config)
    participants = await collect_participants(channel, messages)
    html = await generate_html_transcript(
        messages, html_options, channel, renderer, config, participants,
    )

    result = TranscriptResult(
        html=html,
        text=build_plain_text(messages, config),
        metadata=build_metadata(messages, channel_info, guild_info),
        generated_at=generated_at,
        success=True,
        file_name=options.file_name,
    )

    logger.tree("Transcript Generated", [
        ("Channel", f"#{channel_info.name} ({channel_info.id})"),
        ("Server", guild_info.name),
        ("Fetched", str(len(raw_messages))),
        ("Messages", str(len(messages))),
        ("Participants", str(len(participants))),
        ("Size", f"{len(html) / 1024:.1f} KB"),
        ("Duration", f"{(time.monotonic() - started) * 1000:.0f}ms"),
    ], emoji="📜")

    return result


# =============================================================================
# Fallback
# =============================================================================

async def _build_fallback_text(channel: Any, error: TranscriptError, config: TranscriptConfig) -> str:
    """Plain-text listing of recent messages, used when the document failed."""
    lines = [
        "** ERROR GENERATING HTML TRANSCRIPT **",
        "",
        f"Error details: {error.message}",
        "",
        "** Simple text version provided: **",
        "",
    ]

    try:
        if error.code is TranscriptErrorCode.INVALID_CHANNEL:
            raise ValueError("No channel to fetch messages from")

        messages = await fetch_recent_messages(channel, config.fallback_limit)

        lines.append(f"Channel: #{channel.name} ({channel.id})")
        lines.append(f"Server: {channel.guild.name}")
        lines.append(f"Transcript generated: {format_date(datetime.now(timezone.utc), config.tz)}")
        lines.append(f"Messages retrieved: {len(messages)}")
        lines.append("")

        for message in messages:
            lines.append(
                f"[{format_date(message.created_at, config.tz)}] "
                f"{message.author.name}: {message.content or '[No text content]'}"
            )
            for attachment in message.attachments or []:
                name = getattr(attachment, "filename", None) or "Unnamed"
                lines.append(f"  - Attachment: {name} ({attachment.url})")
            if message.embeds:
                lines.append(f"  - Message contained {len(message.embeds)} embed(s)")

    except Exception as e:
        logger.error("Transcript Fallback Failed", [
            ("Channel", str(getattr(channel, "id", "?"))),
            ("Error", str(e)[:100]),
        ])
        lines.append("** Failed to fetch messages for transcript **")
        lines.append(f"Error details: {e}")

    return "\n".join(lines)


__all__ = [
    "generate_transcript",
    "build_plain_text",
    "build_metadata",
    "describe_channel",
    "describe_guild",
]
