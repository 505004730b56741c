"""
Transcript Forge - Message Fetcher
==================================

Bounded, paginated retrieval of channel history.

DESIGN:
    History is read newest-first in sequential batches; each batch pages
    backward from the oldest message seen so far. Batches are never issued
    in parallel because every cursor depends on the previous batch.

    A batch that fails ends pagination but keeps what was already
    collected. Only a failure before anything was collected is reported
    as an error, since an empty transcript would hide it.
"""

import time
from typing import Any, Dict, List, Optional

import discord

from transcript_forge.core.config import TranscriptConfig, get_config
from transcript_forge.core.errors import StageResult, TranscriptErrorCode
from transcript_forge.core.logger import logger
from transcript_forge.utils.discord_errors import log_http_error


# Channel types that exist in a guild but have no message history of their own
UNSUPPORTED_CHANNEL_TYPES = {
    discord.ChannelType.category,
    discord.ChannelType.forum,
    discord.ChannelType.media,
}


# =============================================================================
# Validation
# =============================================================================

def validate_channel(channel: Any) -> StageResult[Any]:
    """
    Check that a channel can be archived.

    Returns:
        StageResult with the channel, or INVALID_CHANNEL when there is no
        guild channel, or UNSUPPORTED_CHANNEL_TYPE when it has no history.
    """
    if channel is None or getattr(channel, "guild", None) is None:
        return StageResult.failure(
            TranscriptErrorCode.INVALID_CHANNEL,
            "Invalid or inaccessible channel provided",
            channel_id=getattr(channel, "id", None),
        )

    if not supports_history(channel):
        return StageResult.failure(
            TranscriptErrorCode.UNSUPPORTED_CHANNEL_TYPE,
            "Channel type not supported for transcripts",
            channel_type=str(getattr(channel, "type", "unknown")),
        )

    return StageResult.success(channel)


def supports_history(channel: Any) -> bool:
    """True when the channel exposes a message history."""
    if getattr(channel, "type", None) in UNSUPPORTED_CHANNEL_TYPES:
        return False
    return callable(getattr(channel, "history", None))


def _as_snowflake(value: Optional[str]) -> Optional[discord.Object]:
    if value is None or value == "":
        return None
    return discord.Object(id=int(value))


# =============================================================================
# Fetching
# =============================================================================

async def fetch_messages(
    channel: Any,
    limit: Optional[int] = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
    config: Optional[TranscriptConfig] = None,
) -> StageResult[List[Any]]:
    """
    Fetch up to `limit` messages, oldest first.

    Args:
        channel: Channel exposing discord.py's history() iterator
        limit: Maximum messages to return (configured default if None)
        after: Only fetch messages newer than this message id
        before: Only fetch messages older than this message id; held fixed
            for every batch when given

    Returns:
        StageResult with the sorted, truncated message list.
    """
    config = config or get_config()
    limit = config.default_limit if limit is None else max(int(limit), 0)

    if not supports_history(channel):
        return StageResult.failure(
            TranscriptErrorCode.UNSUPPORTED_CHANNEL_TYPE,
            "Channel type not supported for transcripts",
            channel_type=str(getattr(channel, "type", "unknown")),
        )

    if limit == 0:
        return StageResult.success([])

    try:
        after_obj = _as_snowflake(after)
        before_obj = _as_snowflake(before)
    except (TypeError, ValueError):
        return StageResult.failure(
            TranscriptErrorCode.GENERATION_FAILED,
            "Message cursor must be a numeric message id",
            after=after,
            before=before,
        )

    started = time.monotonic()
    collected: Dict[int, Any] = {}
    cursor: Optional[int] = None
    batches = 0
    first_error: Optional[BaseException] = None

    while batches < config.max_batches:
        batches += 1
        kwargs: Dict[str, Any] = {"limit": config.batch_size, "oldest_first": False}
        if before_obj is not None:
            kwargs["before"] = before_obj
        elif cursor is not None:
            kwargs["before"] = discord.Object(id=cursor)
        if after_obj is not None:
            kwargs["after"] = after_obj

        try:
            batch = [message async for message in channel.history(**kwargs)]
        except discord.HTTPException as e:
            log_http_error(e, "Transcript Batch Fetch", [
                ("Channel", str(getattr(channel, "id", "?"))),
                ("Batch", str(batches)),
            ])
            first_error = first_error or e
            break
        except Exception as e:
            logger.error("Transcript Batch Fetch Failed", [
                ("Channel", str(getattr(channel, "id", "?"))),
                ("Batch", str(batches)),
                ("Error", str(e)[:100]),
            ])
            first_error = first_error or e
            break

        if not batch:
            break

        added = 0
        for message in batch:
            if message.id not in collected:
                collected[message.id] = message
                added += 1
        cursor = min(message.id for message in batch)

        logger.debug("Transcript Batch Fetched", [
            ("Batch", str(batches)),
            ("Received", str(len(batch))),
            ("New", str(added)),
            ("Total", str(len(collected))),
        ])

        if added == 0:
            break  # same page again, e.g. a fixed `before` cursor
        if len(batch) < config.batch_size:
            break
        if len(collected) >= limit:
            break

    if not collected and first_error is not None:
        return StageResult.failure(
            TranscriptErrorCode.GENERATION_FAILED,
            f"Could not fetch messages: {first_error}",
            channel_id=getattr(channel, "id", None),
        )

    messages = sorted(collected.values(), key=lambda m: (m.created_at, m.id))[:limit]

    logger.tree("Transcript Messages Fetched", [
        ("Channel", f"#{getattr(channel, 'name', '?')} ({getattr(channel, 'id', '?')})"),
        ("Batches", str(batches)),
        ("Messages", str(len(messages))),
        ("Partial", "Yes" if first_error else "No"),
        ("Duration", f"{(time.monotonic() - started) * 1000:.0f}ms"),
    ], emoji="📥")

    return StageResult.success(messages)


async def fetch_recent_messages(channel: Any, limit: int) -> List[Any]:
    """
    Single-request fetch of the most recent messages, oldest first.

    Used by the plain-text fallback; errors propagate to the caller.
    """
    messages = [message async for message in channel.history(limit=limit)]
    return sorted(messages, key=lambda m: (m.created_at, m.id))


__all__ = [
    "validate_channel",
    "supports_history",
    "fetch_messages",
    "fetch_recent_messages",
    "UNSUPPORTED_CHANNEL_TYPES",
]
