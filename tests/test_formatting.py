"""
Transcript Forge - Formatting Utils Tests
=========================================

Tests for sizes, icons, dates and escaping.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from transcript_forge.utils.formatting import (
    color_to_hex,
    escape_html,
    escape_text,
    format_date,
    format_file_size,
    get_file_icon,
)


class TestFormatFileSize:
    """Tests for format_file_size()."""

    def test_zero_and_missing(self):
        """Test empty sizes render as 0 B."""
        assert format_file_size(0) == "0 B"
        assert format_file_size(None) == "0 B"

    def test_units(self):
        """Test two decimals with binary units."""
        assert format_file_size(512) == "512.00 B"
        assert format_file_size(1536) == "1.50 KB"
        assert format_file_size(5 * 1024 ** 3) == "5.00 GB"


class TestGetFileIcon:
    """Tests for get_file_icon()."""

    def test_known_extensions(self):
        """Test extensions map to their icons regardless of case."""
        assert get_file_icon("report.PDF") == "📕"
        assert get_file_icon("main.py") == "💻"
        assert get_file_icon("backup.tar.gz") == "🗜️"

    def test_unknown(self):
        """Test unknown or missing extensions use the generic icon."""
        assert get_file_icon("data.xyz") == "📄"
        assert get_file_icon("README") == "📄"


class TestFormatDate:
    """Tests for format_date()."""

    def test_utc(self):
        """Test the default format in UTC."""
        value = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)
        assert format_date(value, ZoneInfo("UTC")) == "Mar 05, 2024 02:07 PM"

    def test_naive_treated_as_utc(self):
        """Test naive values are converted from UTC."""
        value = datetime(2024, 1, 1, 12, 0)
        assert format_date(value, ZoneInfo("America/New_York")) == "Jan 01, 2024 07:00 AM"


class TestEscaping:
    """Tests for escape helpers."""

    def test_escape_html_quotes(self):
        """Test attribute escaping covers quotes."""
        assert escape_html('a"b<c>') == "a&quot;b&lt;c&gt;"
        assert escape_html(None) == ""

    def test_escape_text_keeps_quotes(self):
        """Test body escaping leaves quotes alone."""
        assert escape_text("it's <b>") == "it's &lt;b&gt;"

    def test_color_to_hex(self):
        """Test integer colors and the unset default."""
        assert color_to_hex(0xFF00AA) == "#ff00aa"
        assert color_to_hex(None) == "#5865F2"
