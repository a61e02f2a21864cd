"""Linear classifier with softmax calibration.

The parameter set is a pluggable, externally supplied artifact; the
built-in :func:`default_parameters` carries **placeholder weights** that are
not trained on real biosignal data and must not be used clinically.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, model_validator

from emotion_engine.errors import EmotionError
from emotion_engine.features import normalize_features, validate_features

logger = structlog.get_logger(__name__)


class ModelParameters(BaseModel):
    """Immutable weights and normalisation statistics for :class:`LinearClassifier`.

    ``weights`` is C x F (one row per label, one column per feature name);
    dimension agreement is enforced at construction.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    version: str = "1.0"
    labels: tuple[str, ...]
    feature_names: tuple[str, ...]
    weights: tuple[tuple[float, ...], ...]
    biases: tuple[float, ...]
    mu: dict[str, float]
    sigma: dict[str, float]

    @model_validator(mode="after")
    def _check_dimensions(self) -> ModelParameters:
        n_labels = len(self.labels)
        if len(self.weights) != n_labels:
            raise ValueError(
                f"Weights length ({len(self.weights)}) must match labels length ({n_labels})"
            )
        if len(self.biases) != n_labels:
            raise ValueError(
                f"Biases length ({len(self.biases)}) must match labels length ({n_labels})"
            )
        for i, row in enumerate(self.weights):
            if len(row) != len(self.feature_names):
                raise ValueError(
                    f"Weight row {i} dimension ({len(row)}) must match "
                    f"feature names length ({len(self.feature_names)})"
                )
        return self


def default_parameters() -> ModelParameters:
    """Placeholder three-class model (Amused / Calm / Stressed) over HRV features."""
    return ModelParameters(
        model_id="wesad_emotion_v1_0",
        version="1.0",
        labels=("Amused", "Calm", "Stressed"),
        feature_names=("hr_mean", "sdnn", "rmssd"),
        weights=(
            (0.12, 0.5, 0.3),  # Amused: higher HR, higher HRV
            (-0.21, -0.4, -0.3),  # Calm: lower HR, lower HRV
            (0.02, 0.2, 0.1),  # Stressed
        ),
        biases=(-0.2, 0.3, 0.1),
        mu={"hr_mean": 72.5, "sdnn": 45.3, "rmssd": 32.1},
        sigma={"hr_mean": 12.0, "sdnn": 18.7, "rmssd": 12.4},
    )


def softmax(margins: list[float]) -> list[float]:
    """Numerically stable softmax (max-shifted before exponentiation)."""
    if not margins:
        return []
    top = max(margins)
    exps = [math.exp(m - top) for m in margins]
    total = sum(exps)
    return [e / total for e in exps]


class LinearClassifier:
    """Maps a feature vector to a probability distribution over labels.

    Scores are ``W·x + b`` on z-scored features, calibrated with softmax.
    """

    def __init__(self, params: ModelParameters) -> None:
        self._params = params

    # ── Construction helpers ──────────────────────────────────

    @classmethod
    def default(cls) -> LinearClassifier:
        return cls(default_parameters())

    @classmethod
    def from_json(cls, path: str | Path) -> LinearClassifier:
        """Load parameters from a JSON file and reject non-finite values."""
        params = ModelParameters.model_validate_json(Path(path).read_text(encoding="utf-8"))
        classifier = cls(params)
        if not classifier.validate():
            raise ValueError(f"Model parameters in {path} contain non-finite weights or biases")
        logger.info(
            "classifier.loaded",
            path=str(path),
            model_id=params.model_id,
            num_classes=len(params.labels),
            num_features=len(params.feature_names),
        )
        return classifier

    # ── Accessors ─────────────────────────────────────────────

    @property
    def params(self) -> ModelParameters:
        return self._params

    @property
    def labels(self) -> tuple[str, ...]:
        return self._params.labels

    @property
    def feature_names(self) -> tuple[str, ...]:
        return self._params.feature_names

    def metadata(self) -> dict[str, Any]:
        p = self._params
        return {
            "id": p.model_id,
            "version": p.version,
            "type": "linear_svm",
            "labels": list(p.labels),
            "feature_names": list(p.feature_names),
            "num_classes": len(p.labels),
            "num_features": len(p.feature_names),
        }

    # ── Inference ─────────────────────────────────────────────

    def predict(self, features: Mapping[str, float]) -> dict[str, float]:
        """Return a label → probability mapping summing to 1.

        Raises
        ------
        EmotionError
            ``bad_input`` if a required feature is missing or non-finite.
        """
        p = self._params
        if not validate_features(features, p.feature_names):
            raise EmotionError.bad_input(
                "Invalid features: missing required features or NaN values"
            )

        normalized = normalize_features(features, p.mu, p.sigma)

        vector: list[float] = []
        for name in p.feature_names:
            if name not in normalized:
                raise EmotionError.bad_input(f"Missing required feature: {name}")
            vector.append(normalized[name])

        margins = [
            bias + sum(w * x for w, x in zip(row, vector))
            for row, bias in zip(p.weights, p.biases)
        ]
        return dict(zip(p.labels, softmax(margins)))

    def validate(self) -> bool:
        """Re-check dimensions and numeric well-formedness of the parameters."""
        p = self._params
        if len(p.weights) != len(p.labels) or len(p.biases) != len(p.labels):
            return False
        if any(len(row) != len(p.feature_names) for row in p.weights):
            return False
        values = [w for row in p.weights for w in row] + list(p.biases)
        return all(math.isfinite(v) for v in values)
