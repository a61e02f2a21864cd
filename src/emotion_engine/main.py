"""Command-line entrypoint: replay recorded sample streams or inspect a model."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import structlog
from pydantic import ValidationError

from emotion_engine.classifier import LinearClassifier
from emotion_engine.config import get_settings
from emotion_engine.engine import EmotionEngine
from emotion_engine.errors import EmotionError
from emotion_engine.logger import setup_logging
from emotion_engine.models import Sample

logger = structlog.get_logger(__name__)


class ReplayClock:
    """Clock that follows the timestamps of the samples being replayed."""

    def __init__(self) -> None:
        self.now = datetime.fromtimestamp(0, tz=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance_to(self, ts: datetime) -> None:
        if ts > self.now:
            self.now = ts


def _load_classifier(path: Path | None) -> LinearClassifier:
    if path is None:
        return LinearClassifier.default()
    return LinearClassifier.from_json(path)


def replay(args: argparse.Namespace) -> int:
    """Drive an engine with JSON-lines samples; print each result as JSON."""
    settings = get_settings()
    overrides = {
        key: value
        for key, value in {
            "window_ms": args.window_ms,
            "step_ms": args.step_ms,
            "min_rr_count": args.min_rr_count,
            "hr_baseline": args.hr_baseline,
        }.items()
        if value is not None
    }
    config = settings.engine_config().model_copy(update=overrides)
    clock = ReplayClock()
    engine = EmotionEngine(
        config=config,
        model=_load_classifier(args.model or settings.model_path),
        clock=clock,
    )

    emitted = 0
    with Path(args.file).open(encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                sample = Sample.model_validate_json(line)
            except ValidationError as exc:
                logger.warning("replay.invalid_line", line=lineno, errors=exc.error_count())
                continue

            clock.advance_to(sample.timestamp)
            engine.push(sample)
            result = engine.try_emit()
            if result is not None:
                print(result.model_dump_json())
                emitted += 1

    logger.info("replay.finished", emitted=emitted, **engine.stats())
    return 0


def model_info(args: argparse.Namespace) -> int:
    classifier = _load_classifier(args.model or get_settings().model_path)
    info = {**classifier.metadata(), "valid": classifier.validate()}
    print(json.dumps(info, indent=2))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="emotion-engine",
        description="On-device emotion inference from HR / RR-interval streams.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── replay ────────────────────────────────────────────────
    replay_parser = sub.add_parser("replay", help="Replay a JSON-lines sample file.")
    replay_parser.add_argument("file", type=Path)
    replay_parser.add_argument("--model", type=Path, default=None)
    replay_parser.add_argument("--window-ms", type=int, default=None)
    replay_parser.add_argument("--step-ms", type=int, default=None)
    replay_parser.add_argument("--min-rr-count", type=int, default=None)
    replay_parser.add_argument("--hr-baseline", type=float, default=None)

    # ── model-info ────────────────────────────────────────────
    info_parser = sub.add_parser("model-info", help="Print model metadata.")
    info_parser.add_argument("--model", type=Path, default=None)

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        if args.command == "replay":
            code = replay(args)
        elif args.command == "model-info":
            code = model_info(args)
        else:
            parser.print_help()
            sys.exit(1)
    except (EmotionError, ValidationError, ValueError, OSError) as exc:
        logger.error("cli.failed", command=args.command, error=str(exc))
        sys.exit(2)
    sys.exit(code)


if __name__ == "__main__":
    main()
