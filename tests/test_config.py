"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from emotion_engine.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults_match_engine_defaults(self, monkeypatch):
        for var in ("WINDOW_MS", "STEP_MS", "MIN_RR_COUNT", "HR_BASELINE", "MODEL_PATH"):
            monkeypatch.delenv(f"EMOTION_ENGINE_{var}", raising=False)
        config = Settings().engine_config()
        assert config.window_ms == 60_000
        assert config.step_ms == 5_000
        assert config.min_rr_count == 30
        assert config.hr_baseline is None

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("EMOTION_ENGINE_WINDOW_MS", "30000")
        monkeypatch.setenv("EMOTION_ENGINE_HR_BASELINE", "65.5")
        monkeypatch.setenv("EMOTION_ENGINE_LOG_LEVEL", "DEBUG")
        settings = get_settings()
        assert settings.log_level == "DEBUG"
        config = settings.engine_config()
        assert config.window_ms == 30_000
        assert config.hr_baseline == 65.5

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
