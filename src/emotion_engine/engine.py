"""Windowed inference engine: sliding-window buffering → features → classifier.

The engine is a passive object.  A producer thread calls :meth:`push` for
every sensor event while a consumer polls :meth:`try_emit`; nothing here
schedules work, blocks on I/O, or spawns threads.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import structlog

from emotion_engine.buffer import LockedSampleStore, SampleStore
from emotion_engine.classifier import LinearClassifier, ModelParameters
from emotion_engine.errors import EmotionError
from emotion_engine.features import (
    CORE_FEATURES,
    MAX_VALID_HR,
    MIN_VALID_HR,
    extract_features,
)
from emotion_engine.logger import LogSink, Severity, null_sink
from emotion_engine.models import BufferStats, EngineConfig, InferenceResult, Sample

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

_STRUCTLOG_METHOD = {"debug": "debug", "info": "info", "warn": "warning", "error": "error"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class EmotionEngine:
    """Produces emotion classifications from a rolling window of HR/RR samples.

    Parameters
    ----------
    config
        Window, cadence and personalisation settings.
    model
        Classifier or bare parameter set.  Its feature names must be exactly
        ``hr_mean``, ``sdnn`` and ``rmssd``.
    on_log
        Optional notification sink ``(severity, message, context)``.
    clock
        Returns "now"; drives both eviction and emission throttling.
    store
        Sample store implementation; defaults to :class:`LockedSampleStore`.

    Raises
    ------
    EmotionError
        ``model_incompatible`` when the model's feature set differs from the
        features this engine extracts; ``bad_input`` when its weights or
        biases are not finite.
    """

    EXPECTED_FEATURE_COUNT = len(CORE_FEATURES)

    def __init__(
        self,
        config: EngineConfig,
        model: LinearClassifier | ModelParameters,
        on_log: LogSink | None = None,
        clock: Clock | None = None,
        store: SampleStore | None = None,
    ) -> None:
        classifier = model if isinstance(model, LinearClassifier) else LinearClassifier(model)

        names = classifier.feature_names
        if len(names) != self.EXPECTED_FEATURE_COUNT or set(names) != set(CORE_FEATURES):
            raise EmotionError.model_incompatible(
                expected_feats=self.EXPECTED_FEATURE_COUNT,
                actual_feats=len(names),
            )
        if not classifier.validate():
            raise EmotionError.bad_input("model parameters contain non-finite weights or biases")

        self.config = config
        self._classifier = classifier
        self._on_log: LogSink = on_log or null_sink
        self._clock: Clock = clock or _utc_now
        self._store: SampleStore = store or LockedSampleStore()
        self._last_emission: datetime | None = None
        self._emit_lock = threading.Lock()

    @classmethod
    def from_pretrained(
        cls,
        config: EngineConfig | None = None,
        model: LinearClassifier | ModelParameters | None = None,
        on_log: LogSink | None = None,
        clock: Clock | None = None,
    ) -> EmotionEngine:
        """Create an engine, falling back to the built-in placeholder model."""
        return cls(
            config=config or EngineConfig(),
            model=model if model is not None else LinearClassifier.default(),
            on_log=on_log,
            clock=clock,
        )

    @property
    def classifier(self) -> LinearClassifier:
        return self._classifier

    # ── Producer side ─────────────────────────────────────────

    def push(self, sample: Sample) -> None:
        """Append *sample* and evict everything older than the window.

        Samples with HR outside [30, 300] BPM or with no RR intervals are
        dropped with a warning; this method never raises.
        """
        try:
            if not MIN_VALID_HR <= sample.hr <= MAX_VALID_HR:
                self._log(
                    "warn",
                    "engine.sample_rejected",
                    f"Invalid HR value: {sample.hr} "
                    f"(valid range: {MIN_VALID_HR}-{MAX_VALID_HR} BPM)",
                    reason="hr_out_of_range",
                    hr=sample.hr,
                )
                return

            if not sample.rr_intervals_ms:
                self._log(
                    "warn",
                    "engine.sample_rejected",
                    "Empty RR intervals",
                    reason="empty_rr",
                    hr=sample.hr,
                )
                return

            cutoff = self._now() - timedelta(milliseconds=self.config.window_ms)
            self._store.append(sample)
            evicted = self._store.evict_before(cutoff)

            self._log(
                "debug",
                "engine.sample_pushed",
                f"Pushed data point: HR={sample.hr}, RR count={len(sample.rr_intervals_ms)}",
                hr=sample.hr,
                rr_count=len(sample.rr_intervals_ms),
                evicted=evicted,
            )
        except Exception as exc:
            self._log("error", "engine.push_failed", f"Error pushing data point: {exc}", error=str(exc))

    def _now(self) -> datetime:
        # Naive clock values are taken to be UTC, matching Sample timestamps.
        return _as_utc(self._clock())

    # ── Consumer side ─────────────────────────────────────────

    def try_emit(self) -> InferenceResult | None:
        """Classify the current window if the emission cadence has elapsed.

        Returns ``None`` when throttled or when the window holds too little
        data.  Classification errors are logged and re-raised.
        """
        with self._emit_lock:
            now = self._now()
            if self._last_emission is not None and (
                now - self._last_emission < timedelta(milliseconds=self.config.step_ms)
            ):
                return None

            samples = self._store.snapshot()
            if len(samples) < 2:
                return None

            features = self._window_features(samples)
            if features is None:
                return None

            try:
                result = self._classify(now, features)
            except EmotionError as exc:
                self._log(
                    "error",
                    "engine.inference_failed",
                    f"Error during inference: {exc}",
                    kind=exc.kind.value,
                    **exc.context,
                )
                raise
            except Exception as exc:
                self._log(
                    "error",
                    "engine.inference_failed",
                    f"Error during inference: {exc}",
                    error=str(exc),
                )
                raise

            self._last_emission = now

        self._log(
            "info",
            "engine.emitted",
            f"Emitted result: {result.emotion} ({result.confidence * 100:.1f}%)",
            emotion=result.emotion,
            confidence=round(result.confidence, 4),
            samples=len(samples),
        )
        return result

    def _classify(self, now: datetime, features: dict[str, float]) -> InferenceResult:
        result = InferenceResult.from_inference(
            timestamp=now,
            probabilities=self._classifier.predict(features),
            features=features,
            model=self._classifier.metadata(),
        )
        if not self.config.return_all_probas:
            result = result.model_copy(
                update={"probabilities": {result.emotion: result.confidence}}
            )
        return result

    def consume_ready(self) -> list[InferenceResult]:
        """List-shaped variant of :meth:`try_emit`; empty when not ready."""
        result = self.try_emit()
        return [result] if result is not None else []

    def _window_features(self, samples: list[Sample]) -> dict[str, float] | None:
        hr_values: list[float] = []
        rr_intervals: list[float] = []
        motion: dict[str, float] = {}

        for sample in samples:
            hr_values.append(sample.hr)
            rr_intervals.extend(sample.rr_intervals_ms)
            for channel, value in (sample.motion or {}).items():
                motion[channel] = motion.get(channel, 0.0) + value

        if len(rr_intervals) < self.config.min_rr_count:
            err = EmotionError.too_few_rr(self.config.min_rr_count, len(rr_intervals))
            self._log("warn", "engine.too_few_rr", err.message, **err.context)
            return None

        features = extract_features(hr_values, rr_intervals, motion or None)

        if self.config.hr_baseline is not None:
            features["hr_mean"] -= self.config.hr_baseline

        return features

    # ── Introspection ─────────────────────────────────────────

    def stats(self) -> dict[str, Any]:
        """Buffer summary: ``count``, ``duration_ms``, ``hr_range``, ``rr_count``."""
        samples = self._store.snapshot()
        if not samples:
            return BufferStats().model_dump()

        timestamps = [s.timestamp for s in samples]
        hr_values = [s.hr for s in samples]
        return BufferStats(
            count=len(samples),
            duration_ms=(max(timestamps) - min(timestamps)) // timedelta(milliseconds=1),
            hr_range=[min(hr_values), max(hr_values)],
            rr_count=sum(len(s.rr_intervals_ms) for s in samples),
        ).model_dump()

    def clear(self) -> None:
        """Drop all buffered samples and forget the last emission time."""
        with self._emit_lock:
            self._store.clear()
            self._last_emission = None
        self._log("info", "engine.cleared", "Buffer cleared")

    # ── Logging ───────────────────────────────────────────────

    def _log(self, level: Severity, event: str, message: str, **context: Any) -> None:
        getattr(logger, _STRUCTLOG_METHOD[level])(event, **context)
        try:
            self._on_log(level, message, context or None)
        except Exception as exc:
            logger.error("engine.log_sink_failed", error=str(exc))
