"""Command-line entry for recurrence_lite.

Reads a YAML/JSON file of stored event rows and prints the upcoming occurrences
feed as JSON, or one schedule label per recurring event with ``--summary``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import yaml

from . import _init_logging
from .core.config_loader import load_config
from .core.config_manager import ConfigManager
from .core.timezone_utils import parse_instant
from .domain.schedule_summary import describe_schedule
from .domain.upcoming import collect_upcoming
from .lite_logging import configure_lite_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 2


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for recurrence_lite CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="recurrence_lite",
        description="Recurrence Lite - expand stored events into upcoming occurrences",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m recurrence_lite events.yaml                      # Next 14 days, up to 200 occurrences
  python -m recurrence_lite events.json --days 7 --limit 20
  python -m recurrence_lite events.yaml --now 2024-03-09T00:00:00Z
  python -m recurrence_lite events.yaml --summary            # Schedule label per event
        """,
    )

    parser.add_argument("events_file", metavar="EVENTS_FILE", help="YAML or JSON list of event rows")
    parser.add_argument("--days", metavar="N", help="Window length in days (clamped to config bounds)")
    parser.add_argument("--limit", metavar="N", help="Maximum occurrences (clamped to config bounds)")
    parser.add_argument("--now", metavar="ISO", help="Window start as ISO 8601 (default: current time)")
    parser.add_argument("--config", metavar="PATH", help="Config file (default: ./recurrence_lite/config.yaml)")
    parser.add_argument("--summary", action="store_true", help="Print schedule labels instead of occurrences")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def load_event_rows(path: Path) -> list[Any]:
    """Load event rows from a YAML/JSON file.

    Accepts either a top-level list or a mapping with an ``events`` list.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML/JSON
        ValueError: If the document holds no list of events
    """
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(loaded, dict):
        loaded = loaded.get("events")
    if loaded is None:
        return []
    if not isinstance(loaded, list):
        raise ValueError(f"{path} must contain a list of events")
    return loaded


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Run the recurrence_lite CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    now = None
    if args.now:
        try:
            now = parse_instant(args.now)
        except ValueError:
            parser.error(f"--now must be an ISO 8601 datetime, got {args.now!r}")

    try:
        overrides = ConfigManager().load_full_config()
        config = load_config(args.config, overrides=overrides)
        rows = load_event_rows(Path(args.events_file))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"recurrence_lite: {exc}", file=sys.stderr)
        sys.exit(EXIT_BAD_INPUT)

    _init_logging("DEBUG" if args.debug else config.log_level)
    if args.debug or config.log_level == "DEBUG":
        configure_lite_logging(debug_mode=True)
    logger.debug("Loaded %d event rows from %s", len(rows), args.events_file)

    if args.summary:
        for row in rows:
            label = describe_schedule(row)
            if label is not None:
                title = row.get("title", "") if isinstance(row, dict) else ""
                print(f"{title}: {label}")
        sys.exit(EXIT_OK)

    result = collect_upcoming(rows, now=now, days=args.days, limit=args.limit, config=config)
    print(json.dumps(result.to_payload(), indent=2))
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
