"""
Multi-day event expansion
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from src.integrations.google_calendar.schemas import (
    Event,
    ExpandedOccurrence,
    SupersededOccurrence,
)


def _as_day(value: date | datetime | None, tz: tzinfo) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    return value


class MultiDayExpander:
    """Split timed events that cross midnight into one occurrence per day.

    Each slice is titled ``"<summary> (Day i/N)"`` where ``N`` is the full
    inclusive day span of the original, regardless of the requested range.
    The original is emitted once more, tagged as superseded, so callers can
    tell it was replaced.
    """

    def __init__(self, tz: tzinfo) -> None:
        self.tz = tz

    def needs_expansion(self, event: Event) -> bool:
        if event.start.date_time is None or event.end.date_time is None:
            return False
        return event.start_day(self.tz) != event.end.local_day(self.tz)

    def split(self, event: Event) -> list[Event]:
        """All per-day slices of ``event`` over its full span."""
        local_start = event.start_instant(self.tz).astimezone(self.tz)
        first_day = local_start.date()
        last_day = event.end.local_day(self.tz)
        total_days = (last_day - first_day).days + 1

        slices: list[Event] = []
        for day_index in range(1, total_days + 1):
            # same wall-clock time on each later local day
            shifted = datetime.combine(
                first_day + timedelta(days=day_index - 1),
                local_start.time(),
                tzinfo=self.tz,
            )
            slices.append(
                event.model_copy(
                    update={
                        "summary": f"{event.summary} (Day {day_index}/{total_days})",
                        "start": event.start.model_copy(update={"date_time": shifted}),
                        "occurrence": ExpandedOccurrence(
                            day_index=day_index, total_days=total_days
                        ),
                    }
                )
            )
        return slices

    def expand(
        self,
        events: Iterable[Event],
        range_start: date | datetime | None = None,
        range_end: date | datetime | None = None,
    ) -> list[Event]:
        first_allowed = _as_day(range_start, self.tz)
        last_allowed = _as_day(range_end, self.tz)

        result: list[Event] = []
        extra: list[Event] = []
        for event in events:
            if not self.needs_expansion(event):
                result.append(event)
                continue

            for occurrence in self.split(event):
                day = occurrence.start_day(self.tz)
                if first_allowed is not None and day < first_allowed:
                    continue
                if last_allowed is not None and day > last_allowed:
                    continue
                extra.append(occurrence)

            result.append(event.model_copy(update={"occurrence": SupersededOccurrence()}))

        return result + extra
