"""CLI entry point for json-tail.

This module handles command-line argument parsing, logging setup,
signal handling, and the main entry point.
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import signal
import sys
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .app import JsonTailApp
from .config import Config, is_valid_interval, load_config
from .exceptions import ConfigError, WatchTargetError
from .reader import validate_file

logger = logging.getLogger(__name__)

LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 2


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, event, context."""

    def format(self, record: logging.LogRecord) -> str:
        context = {"thread": record.threadName, "where": f"{record.module}:{record.lineno}"}
        context.update(getattr(record, "extra_context", {}))

        line = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "context": context,
        }
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def _setup_logging(log_file: Path, debug: bool) -> None:
    """Replace the root handlers with a single rotating JSON log file.

    Nothing is logged to the terminal; the status indicator owns that line.
    """
    level = logging.DEBUG if debug else logging.INFO
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)

    logger.debug("Log file opened", extra={"extra_context": {"log_file": str(log_file)}})


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if not is_valid_interval(number):
        raise argparse.ArgumentTypeError("interval must be a finite positive number")
    return number


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError("line count must not be negative")
    return number


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="json-tail",
        description="Watch a JSON array-of-strings file and print new entries as they appear",
    )

    parser.add_argument("filename", type=Path, help="JSON file to monitor")

    parser.add_argument(
        "-i",
        "--interval",
        type=_positive_float,
        default=None,
        help="the interval in seconds at which to check the file for changes (default: 1.0)",
    )

    parser.add_argument(
        "-n",
        "--lines",
        type=_non_negative_int,
        default=None,
        help="number of existing entries to show at startup (default: 10)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional config.json with default settings",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Log file path (default: ~/.cache/json-tail/json-tail.log)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> Config:
    """Merge config file values with command-line overrides.

    Raises:
        ConfigError: If the config file is unreadable or invalid
    """
    base = load_config(args.config.resolve()) if args.config else Config()
    return base.with_overrides(
        interval_seconds=args.interval,
        initial_entries=args.lines,
        log_file=args.log_file.resolve() if args.log_file else None,
        debug=args.debug,
    )


# Global app instance for signal handlers
_app_instance: JsonTailApp | None = None


def _signal_handler(signum: int, frame) -> None:
    """Handle shutdown signals.

    Args:
        signum: Signal number
        frame: Current stack frame
    """
    if _app_instance is None:
        sys.exit(130 if signum == signal.SIGINT else 1)

    logger.info(
        "Received shutdown signal",
        extra={"extra_context": {"signal": signal.Signals(signum).name}},
    )
    _app_instance.interrupt()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for json-tail.

    Returns:
        Exit code (0=interrupted normally, 1=startup error, 2=usage error)
    """
    global _app_instance

    args = _parse_args(argv)
    console = Console(stderr=True)

    try:
        config = _build_config(args)
    except ConfigError as err:
        console.print(f"[red]Error loading config: {escape(str(err))}[/red]")
        return 1

    _setup_logging(config.log_file, config.debug)

    try:
        path = validate_file(args.filename)
    except WatchTargetError as err:
        console.print(f"[red]Error: {escape(str(err))}[/red]")
        logger.error(
            "Cannot watch file",
            extra={"extra_context": {"path": str(args.filename), "error": str(err)}},
        )
        return 1

    logger.info(
        "json-tail starting",
        extra={
            "extra_context": {
                "path": str(path),
                "interval_seconds": config.interval_seconds,
                "initial_entries": config.initial_entries,
            }
        },
    )

    _app_instance = JsonTailApp(path, config)

    previous_handlers = {
        signum: signal.signal(signum, _signal_handler) for signum in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        exit_code = _app_instance.run()
    except Exception as err:
        logger.error(
            "json-tail crashed with unhandled exception",
            extra={"extra_context": {"error": str(err)}},
            exc_info=True,
        )
        console.print(f"[red]Fatal error: {escape(str(err))}[/red]")
        console.print(f"[dim]Check logs at: {config.log_file}[/dim]")
        return 1
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
        _app_instance = None

    logger.info("json-tail exited", extra={"extra_context": {"exit_code": exit_code}})
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
