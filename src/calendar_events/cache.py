"""
Day-granular event cache
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from src.integrations.google_calendar.schemas import Calendar, Event
from src.utils.mixins import LoggerMixin

# 共有クライアント利用時のリフレッシュ間隔の下限（秒）
MIN_SHARED_REFRESH_INTERVAL = 60


def effective_refresh_interval(
    refresh_interval: float, use_custom_client: bool
) -> timedelta:
    """Freshness window actually applied to cache entries.

    Without a custom client the window is at least
    ``MIN_SHARED_REFRESH_INTERVAL`` seconds.
    """
    seconds = refresh_interval
    if not use_custom_client and seconds < MIN_SHARED_REFRESH_INTERVAL:
        seconds = MIN_SHARED_REFRESH_INTERVAL
    return timedelta(seconds=seconds)


def iter_days(start_day: date, end_day: date) -> Iterator[date]:
    """Yield every day of the inclusive range."""
    current = start_day
    while current <= end_day:
        yield current
        current += timedelta(days=1)


@dataclass(frozen=True)
class CacheEntry:
    """Events starting on one day for one calendar."""

    events: tuple[Event, ...]
    updated: datetime

    def is_fresh(self, freshness_window: timedelta, now: datetime) -> bool:
        return self.updated + freshness_window >= now


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DayCache(LoggerMixin):
    """(day, calendar) -> CacheEntry store

    Lookups are all-or-nothing: a single missing or stale day invalidates the
    whole requested range for that calendar.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}

    @staticmethod
    def _key(calendar: Calendar | str, day: date) -> tuple[str, str]:
        calendar_id = calendar if isinstance(calendar, str) else calendar.calendar_id
        return (day.isoformat(), calendar_id)

    def now(self) -> datetime:
        return self._clock()

    def lookup(
        self,
        calendar: Calendar | str,
        start_day: date,
        end_day: date,
        freshness_window: timedelta,
        now: datetime | None = None,
    ) -> list[Event] | None:
        now = now or self._clock()
        cached: list[Event] = []

        for day in iter_days(start_day, end_day):
            entry = self._entries.get(self._key(calendar, day))
            if entry is None:
                self.logger.debug("Cache miss", day=day.isoformat())
                return None
            if not entry.is_fresh(freshness_window, now):
                self.logger.debug(
                    "Cache entry stale",
                    day=day.isoformat(),
                    updated=entry.updated.isoformat(),
                )
                return None
            cached.extend(entry.events)

        return cached

    def populate(
        self,
        calendar: Calendar | str,
        day: date,
        events: Iterable[Event],
        timestamp: datetime | None = None,
    ) -> None:
        self._entries[self._key(calendar, day)] = CacheEntry(
            events=tuple(events), updated=timestamp or self._clock()
        )

    def get(self, calendar: Calendar | str, day: date) -> CacheEntry | None:
        return self._entries.get(self._key(calendar, day))

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        self.logger.info("Event cache cleared", entries=count)

    def __len__(self) -> int:
        return len(self._entries)
