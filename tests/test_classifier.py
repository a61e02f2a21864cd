"""Tests for the linear classifier and its parameter set."""

from __future__ import annotations

import json
import math

import pytest
from pydantic import ValidationError

from emotion_engine.classifier import LinearClassifier, ModelParameters, default_parameters, softmax
from emotion_engine.errors import EmotionError, ErrorKind


def _params(**overrides) -> ModelParameters:
    base = dict(
        model_id="test_model",
        labels=("A", "B", "C"),
        feature_names=("hr_mean", "sdnn", "rmssd"),
        weights=((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
        biases=(0.0, 0.0, 0.0),
        mu={},
        sigma={},
    )
    base.update(overrides)
    return ModelParameters(**base)


# ── Parameter validation ─────────────────────────────────────


class TestModelParameters:
    def test_default_parameters_shape(self):
        p = default_parameters()
        assert p.labels == ("Amused", "Calm", "Stressed")
        assert p.feature_names == ("hr_mean", "sdnn", "rmssd")
        assert len(p.weights) == 3 and all(len(row) == 3 for row in p.weights)

    def test_weight_rows_must_match_labels(self):
        with pytest.raises(ValidationError, match="Weights length"):
            _params(weights=((0.0, 0.0, 0.0),))

    def test_biases_must_match_labels(self):
        with pytest.raises(ValidationError, match="Biases length"):
            _params(biases=(0.0, 0.0))

    def test_every_row_must_match_features(self):
        with pytest.raises(ValidationError, match="Weight row 2"):
            _params(weights=((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0)))

    def test_parameters_are_frozen(self):
        p = default_parameters()
        with pytest.raises(ValidationError):
            p.model_id = "other"


# ── Prediction ───────────────────────────────────────────────


class TestPredict:
    def test_default_model_returns_all_labels(self, classifier):
        probs = classifier.predict({"hr_mean": 72.0, "sdnn": 45.0, "rmssd": 32.0})
        assert set(probs) == {"Amused", "Calm", "Stressed"}
        for value in probs.values():
            assert math.isfinite(value)
            assert 0.0 <= value <= 1.0
        assert sum(probs.values()) == pytest.approx(1.0, abs=1e-6)

    def test_equal_margins_give_uniform_distribution(self):
        probs = LinearClassifier(_params()).predict({"hr_mean": 80.0, "sdnn": 30.0, "rmssd": 20.0})
        for value in probs.values():
            assert value == pytest.approx(1 / 3)

    def test_hand_computed_distribution(self):
        params = _params(
            labels=("A", "B"),
            feature_names=("x",),
            weights=((1.0,), (0.0,)),
            biases=(0.0, 0.0),
            mu={"x": 1.0},
            sigma={"x": 2.0},
        )
        # normalised x = (1 + 2 ln 3 - 1) / 2 = ln 3 → margins (ln 3, 0)
        probs = LinearClassifier(params).predict({"x": 1.0 + 2 * math.log(3)})
        assert probs["A"] == pytest.approx(0.75)
        assert probs["B"] == pytest.approx(0.25)

    def test_large_margins_do_not_overflow(self):
        probs = LinearClassifier(_params(biases=(1000.0, 0.0, -1000.0))).predict(
            {"hr_mean": 72.0, "sdnn": 45.0, "rmssd": 32.0}
        )
        assert probs["A"] == pytest.approx(1.0)
        assert sum(probs.values()) == pytest.approx(1.0, abs=1e-6)

    def test_extra_features_are_ignored(self, classifier):
        base = {"hr_mean": 72.0, "sdnn": 45.0, "rmssd": 32.0}
        assert classifier.predict({**base, "accel_x": 3.0}) == classifier.predict(base)

    def test_missing_feature_is_bad_input(self, classifier):
        with pytest.raises(EmotionError) as excinfo:
            classifier.predict({"hr_mean": 72.0, "sdnn": 45.0})
        assert excinfo.value.kind == ErrorKind.BAD_INPUT

    def test_non_finite_feature_is_bad_input(self, classifier):
        with pytest.raises(EmotionError, match="Bad input"):
            classifier.predict({"hr_mean": float("nan"), "sdnn": 45.0, "rmssd": 32.0})

    def test_softmax_empty(self):
        assert softmax([]) == []


# ── Integrity & metadata ─────────────────────────────────────


class TestValidateAndMetadata:
    def test_default_model_is_valid(self, classifier):
        assert classifier.validate() is True

    def test_nan_weight_fails_validation(self):
        params = _params(weights=((float("nan"), 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)))
        assert LinearClassifier(params).validate() is False

    def test_infinite_bias_fails_validation(self):
        assert LinearClassifier(_params(biases=(0.0, float("inf"), 0.0))).validate() is False

    def test_metadata(self, classifier):
        meta = classifier.metadata()
        assert meta["id"] == "wesad_emotion_v1_0"
        assert meta["version"] == "1.0"
        assert meta["labels"] == ["Amused", "Calm", "Stressed"]
        assert meta["num_classes"] == 3
        assert meta["num_features"] == 3


class TestJsonLoading:
    def test_load_from_json(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(default_parameters().model_dump_json(), encoding="utf-8")
        loaded = LinearClassifier.from_json(path)
        assert loaded.params == default_parameters()

    def test_non_finite_weights_are_rejected(self, tmp_path):
        data = json.loads(default_parameters().model_dump_json())
        data["biases"][0] = float("inf")
        path = tmp_path / "model.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(ValueError):
            LinearClassifier.from_json(path)

    def test_mismatched_dimensions_are_rejected(self, tmp_path):
        data = json.loads(default_parameters().model_dump_json())
        data["biases"] = [0.0]
        path = tmp_path / "model.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(ValidationError):
            LinearClassifier.from_json(path)
