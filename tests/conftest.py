"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from emotion_engine.classifier import LinearClassifier
from emotion_engine.engine import EmotionEngine
from emotion_engine.models import EngineConfig, Sample

T0 = datetime(2026, 1, 10, 14, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock for deterministic window / cadence tests."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += timedelta(milliseconds=ms)


def make_sample(
    ts: datetime,
    hr: float = 72.0,
    rr: list[float] | None = None,
    motion: dict[str, float] | None = None,
) -> Sample:
    return Sample(
        timestamp=ts,
        hr=hr,
        rr_intervals_ms=rr if rr is not None else [800.0, 850.0, 820.0, 830.0, 840.0],
        motion=motion,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def classifier() -> LinearClassifier:
    return LinearClassifier.default()


@pytest.fixture
def log_events() -> list[tuple[str, str, dict | None]]:
    return []


@pytest.fixture
def engine(clock: FakeClock, log_events: list) -> EmotionEngine:
    """Engine with a short cadence and a low RR threshold."""

    def sink(level: str, message: str, context: dict | None = None) -> None:
        log_events.append((level, message, context))

    return EmotionEngine.from_pretrained(
        EngineConfig(window_ms=60_000, step_ms=5_000, min_rr_count=10),
        on_log=sink,
        clock=clock,
    )


@pytest.fixture
def sample_factory():
    return make_sample
