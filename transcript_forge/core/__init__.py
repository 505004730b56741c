"""
Transcript Forge - Core Package
===============================

Configuration, logging and error types shared by every component.

DESIGN:
    Core modules expose shared instances so state stays consistent:
    - get_config() returns the same TranscriptConfig instance
    - logger is a global TreeLogger instance
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    TranscriptConfig,
    ConfigValidationError,
    get_config,
    load_config,
    reset_config,
)

from .errors import (
    StageResult,
    TranscriptError,
    TranscriptErrorCode,
    TranscriptFailure,
)

from .logger import logger, TreeLogger


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "TranscriptConfig",
    "ConfigValidationError",
    "get_config",
    "load_config",
    "reset_config",
    # Errors
    "StageResult",
    "TranscriptError",
    "TranscriptErrorCode",
    "TranscriptFailure",
    # Logger
    "logger",
    "TreeLogger",
]
