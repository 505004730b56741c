"""
Transcript Forge - Utilities Package
====================================

Formatting helpers and Discord error logging.
"""

from .formatting import (
    color_to_hex,
    escape_html,
    escape_text,
    format_date,
    format_file_size,
    get_file_icon,
)
from .discord_errors import log_http_error


__all__ = [
    "color_to_hex",
    "escape_html",
    "escape_text",
    "format_date",
    "format_file_size",
    "get_file_icon",
    "log_http_error",
]
