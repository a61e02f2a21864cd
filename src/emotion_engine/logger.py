"""Structured logging configuration using *structlog*, plus the injectable
notification sink used by :class:`~emotion_engine.engine.EmotionEngine`."""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Literal, Optional

import structlog

Severity = Literal["debug", "info", "warn", "error"]

# (severity, message, optional structured context)
LogSink = Callable[[str, str, Optional[dict[str, Any]]], None]


def null_sink(level: str, message: str, context: dict[str, Any] | None = None) -> None:
    """Default sink: discard every notification."""
    return None


def setup_logging(level: str = "INFO") -> None:
    """Configure *structlog* processors for the CLI.

    Rendered events go to stderr so stdout carries only results.  Call once
    at application startup.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
