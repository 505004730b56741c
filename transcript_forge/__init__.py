"""
Transcript Forge
================

Archives guild channel history as a standalone, searchable HTML document
with a plain-text fallback.

Usage:
    from transcript_forge import TranscriptOptions, create_transcript_file, generate_transcript

    result = await generate_transcript(TranscriptOptions(channel=channel))
    await log_channel.send(file=create_transcript_file(result))
"""

from .services.transcript import (
    TranscriptOptions,
    TranscriptResult,
    create_transcript_file,
    generate_transcript,
)

__version__ = "1.0.0"

__all__ = [
    "TranscriptOptions",
    "TranscriptResult",
    "create_transcript_file",
    "generate_transcript",
    "__version__",
]
