"""HRV feature extraction: artifact rejection, time-domain metrics, normalisation.

All functions are pure.  Mean HR is computed from the raw HR samples, whereas
SDNN and RMSSD are computed from artifact-cleaned RR intervals since a single
ectopic beat can dominate either statistic.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

# ── Physiological limits ──────────────────────────────────────

MIN_VALID_RR_MS = 300.0  # ≈ 200 BPM
MAX_VALID_RR_MS = 2000.0  # ≈ 30 BPM
MAX_RR_JUMP_MS = 250.0  # successive-beat change treated as an artifact

MIN_VALID_HR = 30.0
MAX_VALID_HR = 300.0

CORE_FEATURES = ("hr_mean", "sdnn", "rmssd")


# ── Artifact rejection ───────────────────────────────────────


def clean_rr_intervals(rr_intervals_ms: Sequence[float]) -> list[float]:
    """Drop physiologically implausible RR intervals and abrupt jumps.

    Values outside [:data:`MIN_VALID_RR_MS`, :data:`MAX_VALID_RR_MS`] are
    discarded first; each surviving value is then compared with the last
    *retained* value and dropped if it differs by more than
    :data:`MAX_RR_JUMP_MS`.  Relative order of survivors is preserved.
    """
    cleaned: list[float] = []
    for rr in rr_intervals_ms:
        if not MIN_VALID_RR_MS <= rr <= MAX_VALID_RR_MS:
            continue
        if cleaned and abs(rr - cleaned[-1]) > MAX_RR_JUMP_MS:
            continue
        cleaned.append(rr)
    return cleaned


# ── Time-domain metrics ──────────────────────────────────────


def extract_hr_mean(hr_values: Sequence[float]) -> float:
    """Arithmetic mean of raw HR values; 0.0 for an empty sequence."""
    if not hr_values:
        return 0.0
    return sum(hr_values) / len(hr_values)


def extract_sdnn(rr_intervals_ms: Sequence[float]) -> float:
    """Sample standard deviation (N-1) of the cleaned RR intervals."""
    cleaned = clean_rr_intervals(rr_intervals_ms)
    n = len(cleaned)
    if n < 2:
        return 0.0
    mean = sum(cleaned) / n
    variance = sum((rr - mean) ** 2 for rr in cleaned) / (n - 1)
    return math.sqrt(variance)


def extract_rmssd(rr_intervals_ms: Sequence[float]) -> float:
    """Root mean square of successive differences of the cleaned RR intervals."""
    cleaned = clean_rr_intervals(rr_intervals_ms)
    if len(cleaned) < 2:
        return 0.0
    squared = [(b - a) ** 2 for a, b in zip(cleaned, cleaned[1:])]
    return math.sqrt(sum(squared) / len(squared))


# ── Assembly ──────────────────────────────────────────────────


def extract_features(
    hr_values: Sequence[float],
    rr_intervals_ms: Sequence[float],
    motion: Mapping[str, float] | None = None,
) -> dict[str, float]:
    """Build the feature vector ``{hr_mean, sdnn, rmssd}``.

    Motion aggregates, when supplied, are merged in as-is; they are not
    computed here.  A motion channel sharing a core feature name is ignored.
    """
    features = {
        "hr_mean": extract_hr_mean(hr_values),
        "sdnn": extract_sdnn(rr_intervals_ms),
        "rmssd": extract_rmssd(rr_intervals_ms),
    }
    for channel, value in (motion or {}).items():
        if channel not in features:
            features[channel] = value
    return features


def normalize_features(
    features: Mapping[str, float],
    mu: Mapping[str, float],
    sigma: Mapping[str, float],
) -> dict[str, float]:
    """Z-score each feature that has training statistics.

    A zero ``sigma`` maps the feature to exactly 0.0.  Features without
    statistics pass through unchanged.
    """
    normalized: dict[str, float] = {}
    for name, value in features.items():
        if name in mu and name in sigma:
            std = sigma[name]
            normalized[name] = 0.0 if std == 0 else (value - mu[name]) / std
        else:
            normalized[name] = value
    return normalized


def validate_features(features: Mapping[str, float], required: Sequence[str]) -> bool:
    """True iff every required feature is present and finite."""
    for name in required:
        value = features.get(name)
        if value is None or not math.isfinite(value):
            return False
    return True
