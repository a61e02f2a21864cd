"""Pydantic models shared across the inference pipeline.

These models represent:
- Samples ingested from the wearable stream
- Engine configuration
- Inference results and buffer statistics
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Ingestion ─────────────────────────────────────────────────


class Sample(BaseModel):
    """One ingestion event from the sensor: HR plus the beats behind it."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    hr: float = Field(description="Heart rate in beats per minute.")
    rr_intervals_ms: tuple[float, ...] = Field(
        description="Beat-to-beat intervals in milliseconds, in arrival order.",
    )
    motion: dict[str, float] | None = Field(
        None,
        description="Optional per-channel motion readings (e.g. accel_x).",
    )

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken to be UTC so they compare with the engine clock.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ── Configuration ─────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Immutable configuration for :class:`~emotion_engine.engine.EmotionEngine`."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = "svm_linear_wrist_sdnn_v1_0"
    window_ms: int = Field(
        60_000, gt=0,
        description="Rolling window retained for feature calculation (ms).",
    )
    step_ms: int = Field(
        5_000, ge=0,
        description="Minimum interval between two emitted results (ms).",
    )
    min_rr_count: int = Field(
        30, ge=0,
        description="Minimum RR intervals in the window required to emit.",
    )
    return_all_probas: bool = True
    hr_baseline: float | None = Field(
        None,
        description="Personal HR baseline subtracted from hr_mean; None disables it.",
    )
    priors: dict[str, float] | None = Field(
        None,
        description="Label priors; carried for calibration, not applied by the classifier.",
    )

    def __str__(self) -> str:
        return (
            f"EngineConfig(model_id={self.model_id}, window={self.window_ms // 1000}s, "
            f"step={self.step_ms // 1000}s, min_rr_count={self.min_rr_count})"
        )


# ── Outputs ───────────────────────────────────────────────────


class InferenceResult(BaseModel):
    """A single emitted classification, with the evidence it was computed from."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    emotion: str = Field(description="Top-1 label.")
    confidence: float = Field(ge=0.0, le=1.0, description="Probability of the top-1 label.")
    probabilities: dict[str, float] = Field(default_factory=dict)
    features: dict[str, float] = Field(default_factory=dict)
    model: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_inference(
        cls,
        timestamp: datetime,
        probabilities: dict[str, float],
        features: dict[str, float],
        model: dict[str, Any],
    ) -> InferenceResult:
        """Wrap a probability distribution, picking the top-1 label."""
        if probabilities:
            emotion, confidence = max(probabilities.items(), key=lambda kv: kv[1])
        else:
            emotion, confidence = "", 0.0
        return cls(
            timestamp=timestamp,
            emotion=emotion,
            confidence=confidence,
            probabilities=dict(probabilities),
            features=dict(features),
            model=dict(model),
        )

    def __str__(self) -> str:
        return (
            f"InferenceResult({self.emotion}: {self.confidence * 100:.1f}%, "
            f"features: {', '.join(self.features)})"
        )


class BufferStats(BaseModel):
    """Summary of the samples currently held in the window."""

    count: int = 0
    duration_ms: int = 0
    hr_range: list[float] = Field(default_factory=lambda: [0.0, 0.0])
    rr_count: int = 0
