"""CLI entry point for Calendar Grid.

Previews the scheduling core against an event file:

    python -m calendar_grid layout --events events.yaml --date 2025-01-10 --days 7
    python -m calendar_grid occurrences --start 2024-01-01T09:00:00Z --type weekly --days 1,3
    python -m calendar_grid resize --events events.yaml --id evt-1 --edge right --target 2025-01-10T12:07:00Z
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

from .config import config
from .editing.validator import build_resize_update
from .layout.positioner import all_day_events_for_day, layout_days
from .models.recurrence import RecurrenceConfig
from .readers.file_reader import FileEventReader
from .recurrence.expander import describe, next_occurrences
from .utils.date_utils import day_bounds, format_instant
from .utils.exceptions import CalendarGridError
from .utils.logging import setup_logging

logger = logging.getLogger("calendar_grid")


def english_label(key: str) -> str:
    """Fallback translator: ``calendar.recurrence.weekly`` -> ``Weekly``."""
    return key.rsplit(".", 1)[-1].capitalize()


def _parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value}. Use YYYY-MM-DD (e.g., 2025-01-10)")


def _cmd_layout(args: argparse.Namespace) -> int:
    layout_cfg = config.layout_config()
    if args.timezone:
        layout_cfg = layout_cfg.model_copy(update={"timezone": args.timezone})

    days = [args.date + timedelta(days=i) for i in range(args.days)]
    range_start, _ = day_bounds(days[0], layout_cfg.tz)
    _, range_end = day_bounds(days[-1], layout_cfg.tz)

    reader = FileEventReader(args.events)
    events = reader.read_events(start_date=range_start, end_date=range_end)
    logger.info(f"Laying out {len(events)} event(s) over {len(days)} day(s)")

    result = []
    for day, positioned in layout_days(events, days, layout_cfg).items():
        result.append(
            {
                "day": day.isoformat(),
                "allDay": [e.id for e in all_day_events_for_day(events, day, layout_cfg)],
                "events": [
                    {
                        "id": p.event.id,
                        "top": p.top,
                        "height": p.height,
                        "column": p.column,
                        "totalColumns": p.total_columns,
                    }
                    for p in positioned
                ],
            }
        )
    print(json.dumps(result, indent=2))
    return 0


def _cmd_occurrences(args: argparse.Namespace) -> int:
    rule = RecurrenceConfig(
        type=args.type,
        interval=args.interval,
        days_of_week=args.days or [],
        end_date=args.until,
    )
    limit = args.limit if args.limit is not None else config.occurrence_limit
    occurrences = next_occurrences(args.start, rule, limit)
    print(
        json.dumps(
            {
                "summary": describe(rule, english_label),
                "occurrences": [format_instant(o) for o in occurrences],
            },
            indent=2,
        )
    )
    return 0


def _cmd_resize(args: argparse.Namespace) -> int:
    reader = FileEventReader(args.events)
    try:
        event = reader.get_event(args.id)
    except KeyError:
        logger.error(f"Unknown event: {args.id}")
        return 1

    snap = args.snap if args.snap is not None else config.snap_interval
    outcome = build_resize_update(
        event,
        args.target,
        args.edge,
        preserve_time=not args.no_preserve_time,
        snap_interval_minutes=snap,
    )
    if not outcome.ok:
        print(json.dumps({"error": outcome.error.value}))
        return 1

    print(json.dumps(outcome.update.to_payload()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calendar Grid - lay out, expand and resize calendar events"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    subparsers = parser.add_subparsers(dest="command")

    layout = subparsers.add_parser("layout", help="Position timed events on the day grid")
    layout.add_argument("--events", type=Path, required=True, help="YAML/JSON event file")
    layout.add_argument("--date", type=_parse_day, required=True, help="First day (YYYY-MM-DD)")
    layout.add_argument("--days", type=int, default=1, help="Number of days (7 for a week view)")
    layout.add_argument("--timezone", type=str, default=None, help="Display timezone (overrides config)")
    layout.set_defaults(func=_cmd_layout)

    occurrences = subparsers.add_parser("occurrences", help="Preview occurrences of a recurrence rule")
    occurrences.add_argument("--start", type=str, required=True, help="First occurrence (ISO-8601)")
    occurrences.add_argument(
        "--type",
        choices=["daily", "weekly", "monthly", "yearly"],
        required=True,
        help="Recurrence type",
    )
    occurrences.add_argument("--interval", type=int, default=1, help="Repeat every N units")
    occurrences.add_argument(
        "--days",
        type=lambda v: [int(d) for d in v.split(",") if d.strip()],
        default=None,
        help="Weekdays for weekly rules, 0=Sunday (e.g., 1,3,5)",
    )
    occurrences.add_argument("--until", type=str, default=None, help="End date (inclusive)")
    occurrences.add_argument("--limit", type=int, default=None, help="Maximum occurrences (overrides config)")
    occurrences.set_defaults(func=_cmd_occurrences)

    resize = subparsers.add_parser("resize", help="Validate dragging an event edge")
    resize.add_argument("--events", type=Path, required=True, help="YAML/JSON event file")
    resize.add_argument("--id", type=str, required=True, help="Event ID")
    resize.add_argument("--edge", choices=["left", "right"], required=True, help="Edge being dragged")
    resize.add_argument("--target", type=str, required=True, help="Drop instant (ISO-8601)")
    resize.add_argument("--snap", type=int, default=None, help="Snap interval in minutes (overrides config)")
    resize.add_argument(
        "--no-preserve-time",
        action="store_true",
        help="Use the dropped time verbatim for all-day events",
    )
    resize.set_defaults(func=_cmd_resize)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.verbose else config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except CalendarGridError as e:
        logger.error(f"Calendar grid error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
