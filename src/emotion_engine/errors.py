"""Error taxonomy for emotion inference.

A single exception type carries a closed :class:`ErrorKind` tag plus a
kind-specific ``context`` payload.  Callers dispatch on ``err.kind``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure conditions raised by the inference pipeline."""

    TOO_FEW_RR = "too_few_rr"
    BAD_INPUT = "bad_input"
    MODEL_INCOMPATIBLE = "model_incompatible"
    FEATURE_EXTRACTION_FAILED = "feature_extraction_failed"


class EmotionError(Exception):
    """Raised when an inference contract is violated."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"EmotionError(kind={self.kind.value!r}, message={self.message!r})"

    # ── Factories ─────────────────────────────────────────────

    @classmethod
    def too_few_rr(cls, min_expected: int, actual: int) -> EmotionError:
        return cls(
            ErrorKind.TOO_FEW_RR,
            f"Too few RR intervals: expected at least {min_expected}, got {actual}",
            {"min_expected": min_expected, "actual": actual},
        )

    @classmethod
    def bad_input(cls, reason: str) -> EmotionError:
        return cls(ErrorKind.BAD_INPUT, f"Bad input: {reason}", {"reason": reason})

    @classmethod
    def model_incompatible(cls, expected_feats: int, actual_feats: int) -> EmotionError:
        return cls(
            ErrorKind.MODEL_INCOMPATIBLE,
            f"Model incompatible: expected {expected_feats} features, got {actual_feats}",
            {"expected_feats": expected_feats, "actual_feats": actual_feats},
        )

    @classmethod
    def feature_extraction_failed(cls, reason: str) -> EmotionError:
        return cls(
            ErrorKind.FEATURE_EXTRACTION_FAILED,
            f"Feature extraction failed: {reason}",
            {"reason": reason},
        )
