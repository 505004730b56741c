"""
Transcript Forge - Services Package
===================================

DESIGN:
    Services are async-compatible and handle their own error cases.
    The transcript service reports failures through result values and
    falls back to plain text instead of raising.
"""

from .transcript import (
    TranscriptOptions,
    TranscriptResult,
    create_transcript_file,
    generate_transcript,
)

__all__ = [
    "TranscriptOptions",
    "TranscriptResult",
    "create_transcript_file",
    "generate_transcript",
]
