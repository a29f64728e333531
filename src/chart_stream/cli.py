"""Command-line interface for Chart Stream."""

from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sys
import threading
from types import TracebackType
from typing import Iterable, Optional, Tuple

from chart_stream.config import AppConfig, _config_from_mapping, load_config
from chart_stream.events import EventLogError, accumulate_text, load_event_log
from chart_stream.logging_setup import init_logging
from chart_stream.segments import parse_stream_content

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="chart-stream", description="Chart Stream")
    parser.add_argument(
        "path",
        nargs="?",
        default="",
        help="Path to a newline-delimited JSON stream event log",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the final segments as JSON instead of starting the TUI",
    )
    parser.add_argument(
        "--show-invalid",
        action="store_true",
        default=None,
        help="Show chart blocks that failed validation instead of hiding them",
    )
    parser.add_argument(
        "--min-delay",
        type=int,
        default=None,
        help="Minimum playback delay per event in milliseconds",
    )
    parser.add_argument(
        "--max-delay",
        type=int,
        default=None,
        help="Maximum playback delay per event in milliseconds",
    )
    parser.add_argument(
        "--no-autoplay",
        action="store_true",
        help="Load the log without starting playback",
    )
    return parser


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    raw = asdict(config)
    if args.show_invalid is not None:
        raw["show_invalid"] = args.show_invalid
    if args.min_delay is not None:
        raw["min_delay_ms"] = args.min_delay
    if args.max_delay is not None:
        raw["max_delay_ms"] = args.max_delay
    if args.no_autoplay:
        raw["autoplay"] = False
    return _config_from_mapping(raw)


def _dump_segments(path: str, config: AppConfig) -> int:
    if not path:
        print("error: --dump requires an event log path", file=sys.stderr)
        return 2
    try:
        events = load_event_log(Path(path).expanduser())
    except EventLogError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    segments = parse_stream_content(
        accumulate_text(events), keep_invalid=config.show_invalid
    )
    payload = [segment.to_dict() for segment in segments]
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return 0


def _run_tui(path: str, config: AppConfig) -> int:
    try:
        from chart_stream.tui import run_tui
    except (ImportError, RuntimeError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return run_tui(path, config=config)


def _install_excepthooks() -> None:
    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = excepthook

    def thread_hook(args: threading.ExceptHookArgs) -> None:
        exc_value = args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[
            type[BaseException], BaseException, Optional[TracebackType]
        ] = (
            args.exc_type,
            exc_value,
            args.exc_traceback,
        )
        thread_name = args.thread.name if args.thread else "thread"
        logger.exception("Thread exception in %s", thread_name, exc_info=exc_info)

    threading.excepthook = thread_hook


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    init_logging()
    logger.info("App start")
    _install_excepthooks()

    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    config = _apply_overrides(load_config(), args)

    if args.dump:
        exit_code = _dump_segments(args.path, config)
    else:
        exit_code = _run_tui(args.path or config.last_open_path or "", config)
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
