"""
Transcript Forge - Configuration Module
=======================================

Centralized configuration loaded from environment variables.

DESIGN:
    A single TranscriptConfig instance is built on first use and shared by
    every component. Values that are out of range fall back to the nearest
    bound, values that cannot be parsed fall back to the default, and both
    cases are logged so a bad deployment is visible without breaking
    transcript generation.
"""

import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class TranscriptConfig:
    """
    Transcript generation settings.

    Attributes:
        default_limit: Messages fetched when the caller gives no limit.
        batch_size: Messages requested per history batch.
        max_batches: Hard cap on sequential history batches.
        fallback_limit: Messages fetched by the plain-text fallback.
        sidebar_member_limit: Participants listed in the sidebar.
        timezone_name: IANA timezone for rendered dates.
        emoji_cdn_url: Base URL for custom emoji images.
        default_avatar_url: Avatar used when an author has none.
        generator_name: Name written into the document meta tags.
        error_webhook_url: Discord webhook for error alerts.
    """

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    default_limit: int = 500
    batch_size: int = 100
    max_batches: int = 5
    fallback_limit: int = 100

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    sidebar_member_limit: int = 20
    timezone_name: str = "UTC"
    emoji_cdn_url: str = "https://cdn.discordapp.com/emojis"
    default_avatar_url: str = "https://cdn.discordapp.com/embed/avatars/0.png"
    generator_name: str = "Ticket Transcripts"

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None

    @property
    def tz(self) -> ZoneInfo:
        """Timezone object for rendered dates."""
        return ZoneInfo(self.timezone_name)


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when a configuration value cannot be interpreted at all."""

    pass


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    from transcript_forge.core.logger import logger
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL if it looks like http(s), otherwise None."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from transcript_forge.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


def _validate_timezone(value: Optional[str]) -> str:
    if not value:
        return "UTC"
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigValidationError(f"Unknown timezone for TRANSCRIPT_TIMEZONE: {value}")
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> TranscriptConfig:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated TranscriptConfig.

    Raises:
        ConfigValidationError: If the timezone is unknown.
    """
    defaults = TranscriptConfig()
    return TranscriptConfig(
        default_limit=_parse_int_with_default(
            os.getenv("TRANSCRIPT_DEFAULT_LIMIT"), defaults.default_limit,
            "TRANSCRIPT_DEFAULT_LIMIT", min_val=1, max_val=5000,
        ),
        batch_size=_parse_int_with_default(
            os.getenv("TRANSCRIPT_BATCH_SIZE"), defaults.batch_size,
            "TRANSCRIPT_BATCH_SIZE", min_val=1, max_val=100,
        ),
        max_batches=_parse_int_with_default(
            os.getenv("TRANSCRIPT_MAX_BATCHES"), defaults.max_batches,
            "TRANSCRIPT_MAX_BATCHES", min_val=1, max_val=50,
        ),
        fallback_limit=_parse_int_with_default(
            os.getenv("TRANSCRIPT_FALLBACK_LIMIT"), defaults.fallback_limit,
            "TRANSCRIPT_FALLBACK_LIMIT", min_val=1, max_val=100,
        ),
        sidebar_member_limit=_parse_int_with_default(
            os.getenv("TRANSCRIPT_SIDEBAR_LIMIT"), defaults.sidebar_member_limit,
            "TRANSCRIPT_SIDEBAR_LIMIT", min_val=1, max_val=200,
        ),
        timezone_name=_validate_timezone(os.getenv("TRANSCRIPT_TIMEZONE")),
        emoji_cdn_url=(
            _validate_url(os.getenv("TRANSCRIPT_EMOJI_CDN"), "TRANSCRIPT_EMOJI_CDN")
            or defaults.emoji_cdn_url
        ).rstrip("/"),
        default_avatar_url=_validate_url(
            os.getenv("TRANSCRIPT_DEFAULT_AVATAR"), "TRANSCRIPT_DEFAULT_AVATAR",
        ) or defaults.default_avatar_url,
        generator_name=os.getenv("TRANSCRIPT_GENERATOR_NAME") or defaults.generator_name,
        error_webhook_url=_validate_url(
            os.getenv("TRANSCRIPT_ERROR_WEBHOOK"), "TRANSCRIPT_ERROR_WEBHOOK",
        ),
    )


_config: Optional[TranscriptConfig] = None


def get_config() -> TranscriptConfig:
    """
    Get the shared configuration, loading it on first call.

    Also points the global logger at the error webhook, if any.
    """
    global _config
    if _config is None:
        _config = load_config()
        from transcript_forge.core.logger import logger
        logger.set_webhook(_config.error_webhook_url)
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None


__all__ = [
    "TranscriptConfig",
    "ConfigValidationError",
    "load_config",
    "get_config",
    "reset_config",
]
