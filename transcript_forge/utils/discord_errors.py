"""
Transcript Forge - Discord Error Logging
=======================================

Consistent logging for Discord HTTP failures during transcript work.

Usage:
    from transcript_forge.utils.discord_errors import log_http_error

    try:
        member = await guild.fetch_member(user_id)
    except discord.HTTPException as e:
        log_http_error(e, "Participant Fetch", [("User ID", str(user_id))])
"""

from typing import List, Optional, Tuple

import discord

from transcript_forge.core.logger import logger


# HTTP status code descriptions for logging
HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[List[Tuple[str, str]]] = None,
) -> None:
    """
    Log a Discord HTTPException with status details.

    Rate limits, missing permissions and missing objects are expected
    while building transcripts and are logged as warnings; anything else
    is an error.

    Args:
        e: The HTTPException that occurred
        operation: Description of what operation failed
        context: Additional context tuples for logging [(key, value), ...]
    """
    status = getattr(e, "status", 0)
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(status, "Unknown")
    retry_after = getattr(e, "retry_after", None)

    log_items = [
        ("Status", f"{status} ({status_desc})"),
        ("Error", str(e.text) if getattr(e, "text", None) else str(e)),
    ]

    if retry_after:
        log_items.append(("Retry After", f"{retry_after:.1f}s"))

    if context:
        log_items.extend(context)

    if status == 429:
        logger.warning(f"🚦 {operation} Rate Limited", log_items)
    elif status == 403:
        logger.warning(f"🚫 {operation} Forbidden", log_items)
    elif status == 404:
        logger.warning(f"❓ {operation} Not Found", log_items)
    else:
        logger.error(f"❌ {operation} Failed", log_items)


__all__ = [
    "log_http_error",
    "HTTP_STATUS_DESCRIPTIONS",
]
