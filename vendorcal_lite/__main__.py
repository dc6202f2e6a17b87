"""Command-line entry for vendorcal_lite.

Parses an ICS feed file (or stdin) and prints the resulting events as a JSON
array on stdout. Logs go to stderr.
"""

from __future__ import annotations

import argparse
import datetime
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from dateutil import parser as date_parser
from pydantic import ValidationError

from .calendar.lite_models import CalendarWindow
from .calendar.lite_parser import LiteICSParser
from .core.config_loader import ConfigError, load_config
from .lite_logging import configure_lite_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_READ_ERROR = 1
EXIT_USAGE_ERROR = 2


def _iso_datetime(value: str) -> datetime.datetime:
    """argparse type for ISO 8601 instants; naive values are read as UTC."""
    try:
        dt = date_parser.isoparse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO 8601 datetime: {value!r}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for vendorcal_lite CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="vendorcal_lite",
        description="Parse a vendor ICS feed into availability events (JSON)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m vendorcal_lite vendor.ics
  python -m vendorcal_lite vendor.ics --timezone Asia/Tashkent
  curl -s $FEED_URL | python -m vendorcal_lite - --window-start 2024-01-01T00:00:00Z
        """,
    )
    parser.add_argument("feed", metavar="FEED", help="Path to an .ics file, or '-' for stdin")
    parser.add_argument(
        "--include-cancelled",
        action="store_true",
        default=None,
        help="Include events with STATUS:CANCELLED",
    )
    parser.add_argument(
        "--timezone",
        metavar="TZ",
        help="Default timezone for timestamps without TZID (IANA or Windows name)",
    )
    parser.add_argument("--window-start", type=_iso_datetime, metavar="ISO")
    parser.add_argument("--window-end", type=_iso_datetime, metavar="ISO")
    parser.add_argument("--config", metavar="PATH", help="YAML config file (default: ./vendorcal.yaml)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _read_feed(feed: str) -> bytes:
    if feed == "-":
        return sys.stdin.buffer.read()
    return Path(feed).read_bytes()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the vendorcal_lite CLI.

    Returns:
        Process exit code
    """
    args = _create_parser().parse_args(argv)
    configure_lite_logging(debug_mode=args.debug)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE_ERROR

    configure_lite_logging(debug_mode=args.debug, level=config.log_level)

    if args.include_cancelled is not None:
        config.include_cancelled = args.include_cancelled
    if args.timezone:
        config.default_timezone = args.timezone

    window = None
    if args.window_start is not None or args.window_end is not None:
        window = CalendarWindow(start=args.window_start, end=args.window_end)

    try:
        options = config.to_parse_options(window=window)
    except ValidationError as exc:
        logger.error("Invalid options: %s", exc)
        return EXIT_USAGE_ERROR

    try:
        payload = _read_feed(args.feed)
    except OSError as exc:
        logger.error("Cannot read feed %s: %s", args.feed, exc)
        return EXIT_READ_ERROR

    events = LiteICSParser(options).parse(payload)
    json.dump([event.model_dump(mode="json") for event in events], sys.stdout, indent=2)
    sys.stdout.write("\n")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
