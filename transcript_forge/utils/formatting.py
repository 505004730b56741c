"""
Transcript Forge - Formatting Utils
===================================

Small formatting helpers shared by the renderers.

Features:
- Human-readable file sizes ("1.50 KB")
- File-type icons by extension
- Timezone-aware date strings
- HTML escaping for text and attribute contexts
"""

import html as html_lib
import math
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


# =============================================================================
# Constants
# =============================================================================

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]

DATE_FORMAT = "%b %d, %Y %I:%M %p"

FILE_ICONS = {
    "pdf": "📕",
    "doc": "📘", "docx": "📘",
    "xls": "📗", "xlsx": "📗",
    "ppt": "📙", "pptx": "📙",
    "txt": "📝", "md": "📝",
    "js": "💻", "ts": "💻", "py": "💻", "java": "💻", "c": "💻", "cpp": "💻",
    "cs": "💻", "html": "💻", "css": "💻", "php": "💻",
    "zip": "🗜️", "rar": "🗜️", "7z": "🗜️", "tar": "🗜️", "gz": "🗜️",
    "mp3": "🎵", "wav": "🎵", "ogg": "🎵", "m4a": "🎵",
    "mp4": "🎬", "webm": "🎬", "mov": "🎬", "avi": "🎬",
}
DEFAULT_FILE_ICON = "📄"


# =============================================================================
# Sizes and Icons
# =============================================================================

def format_file_size(size: Optional[float]) -> str:
    """
    Format a byte count with two decimals and a binary unit.

    Examples:
        - 0: "0 B"
        - 512: "512.00 B"
        - 1536: "1.50 KB"
        - 5 * 1024 ** 3: "5.00 GB"
    """
    if not size or math.isnan(size) or size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f} {SIZE_UNITS[index]}"


def get_file_icon(file_name: str) -> str:
    """Pick an emoji icon for a file from its extension."""
    if not file_name or "." not in file_name:
        return DEFAULT_FILE_ICON
    extension = file_name.rsplit(".", 1)[-1].lower()
    return FILE_ICONS.get(extension, DEFAULT_FILE_ICON)


# =============================================================================
# Dates
# =============================================================================

def format_date(value: datetime, tz: Optional[ZoneInfo] = None, fmt: str = DATE_FORMAT) -> str:
    """
    Format a datetime in the given timezone.

    Naive datetimes are treated as UTC, which is what discord.py hands out
    for snowflake-derived times anyway.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime(fmt)


# =============================================================================
# Escaping
# =============================================================================

def escape_html(text: Optional[str]) -> str:
    """Escape text for attribute and body contexts (quotes included)."""
    if not text:
        return ""
    return html_lib.escape(str(text), quote=True)


def escape_text(text: Optional[str]) -> str:
    """Escape only &, < and > for body text."""
    if not text:
        return ""
    return html_lib.escape(str(text), quote=False)


def color_to_hex(value: Optional[int], default: str = "#5865F2") -> str:
    """Convert an integer color to #rrggbb, or the default when unset."""
    if not value:
        return default
    return f"#{value:06x}"


__all__ = [
    "format_file_size",
    "get_file_icon",
    "format_date",
    "escape_html",
    "escape_text",
    "color_to_hex",
    "DATE_FORMAT",
]
