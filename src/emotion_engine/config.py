"""Centralised runtime settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from emotion_engine.models import EngineConfig

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Runtime configuration for the emotion engine.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in the flat
    ``EMOTION_ENGINE_`` namespace (stripped automatically by
    *pydantic-settings*).
    """

    model_config = SettingsConfigDict(
        env_prefix="EMOTION_ENGINE_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ── Inference window ──────────────────────────────────────
    window_ms: int = 60_000
    step_ms: int = 5_000
    min_rr_count: int = 30

    # ── Personalisation ───────────────────────────────────────
    hr_baseline: float | None = None

    # ── Model ─────────────────────────────────────────────────
    model_path: Path | None = None  # JSON parameter file; None → built-in model

    def engine_config(self) -> EngineConfig:
        """Build the immutable :class:`EngineConfig` for a new engine."""
        return EngineConfig(
            window_ms=self.window_ms,
            step_ms=self.step_ms,
            min_rr_count=self.min_rr_count,
            hr_baseline=self.hr_baseline,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
