"""
Main entry point for the calendar aggregator
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from src import __version__
from src.calendar_events import EventAggregator, ListQuery
from src.config import get_settings
from src.utils import get_logger, setup_logging

if TYPE_CHECKING:
    from datetime import tzinfo

    from src.integrations.google_calendar.schemas import Event


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calendar-aggregator",
        description="List events across Google calendars for a date range.",
    )
    parser.add_argument("--start", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--end", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        help="calendar id, calendar name or color name (repeatable)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="calendar id, calendar name or color name (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="print JSON")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def render_table(events: "Sequence[Event]", tz: "tzinfo") -> Table:
    table = Table(title=f"{len(events)} events")
    table.add_column("Start")
    table.add_column("Calendar")
    table.add_column("Title")
    for event in events:
        if event.start.is_all_day:
            start = f"{event.start_day(tz).isoformat()} (all day)"
        else:
            start = event.start_instant(tz).astimezone(tz).strftime("%Y-%m-%d %H:%M")
        calendar = event.calendar.summary if event.calendar else ""
        table.add_row(start, calendar or "", event.summary)
    return table


async def run(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings)
    logger = get_logger("main")
    logger.info("Starting calendar aggregator", version=__version__)

    query = ListQuery(
        start_date=args.start,
        end_date=args.end,
        include=args.include,
        exclude=args.exclude,
    )
    async with EventAggregator.from_settings(settings) as aggregator:
        events = await aggregator.list_events(query)
        console = Console()
        if args.json:
            payload = [
                {
                    **event.model_dump(mode="json", by_alias=True),
                    "calendarId": event.calendar_id,
                }
                for event in events
            ]
            console.print_json(json.dumps(payload))
        else:
            console.print(render_table(events, aggregator.tz))
    return 0


def main() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
