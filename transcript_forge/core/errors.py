"""
Transcript Forge - Error Types
==============================

Tagged error values for transcript generation.

DESIGN:
    Components report failures as TranscriptError values inside a
    StageResult instead of raising across component boundaries. Only the
    orchestrator raises (TranscriptFailure) and it catches its own raise,
    so callers never see an exception.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


T = TypeVar("T")


# =============================================================================
# Error Codes
# =============================================================================

class TranscriptErrorCode(str, Enum):
    """Failure categories reported in a TranscriptResult."""

    INVALID_CHANNEL = "INVALID_CHANNEL"
    UNSUPPORTED_CHANNEL_TYPE = "UNSUPPORTED_CHANNEL_TYPE"
    GENERATION_FAILED = "GENERATION_FAILED"


# =============================================================================
# Error Value
# =============================================================================

@dataclass
class TranscriptError:
    """A failure with its code, message, optional details and time."""

    code: TranscriptErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(cls, error: BaseException) -> "TranscriptError":
        """Wrap an unexpected exception as GENERATION_FAILED."""
        return cls(
            code=TranscriptErrorCode.GENERATION_FAILED,
            message=str(error) or type(error).__name__,
            details={"exception": type(error).__name__},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": {k: str(v) for k, v in self.details.items()},
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class TranscriptFailure(Exception):
    """Raised inside the orchestrator to jump to the fallback path."""

    def __init__(self, error: TranscriptError) -> None:
        super().__init__(error.message)
        self.error = error


# =============================================================================
# Stage Result
# =============================================================================

@dataclass
class StageResult(Generic[T]):
    """Outcome of one pipeline stage: a value, an error, or both (partial)."""

    value: Optional[T] = None
    error: Optional[TranscriptError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        code: TranscriptErrorCode,
        message: str,
        **details: Any,
    ) -> "StageResult[T]":
        return cls(error=TranscriptError(code=code, message=message, details=details))

    def unwrap(self) -> T:
        """Return the value, raising TranscriptFailure if the stage failed."""
        if self.error is not None:
            raise TranscriptFailure(self.error)
        return self.value


__all__ = [
    "TranscriptErrorCode",
    "TranscriptError",
    "TranscriptFailure",
    "StageResult",
]
