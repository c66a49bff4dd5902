"""Calendar list lookup with blacklist filtering."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from src.integrations.google_calendar.schemas import Calendar
from src.utils.mixins import LoggerMixin

if TYPE_CHECKING:
    from src.calendar_events.interfaces import NotificationSink
    from src.integrations.google_calendar.service import GoogleCalendarService


class GoogleCalendarDirectory(LoggerMixin):
    """カレンダー一覧の取得とブラックリスト適用

    The unfiltered list is fetched once per process. The blacklist is applied
    on every call so that changing it takes effect without a new request.
    """

    def __init__(
        self,
        service: GoogleCalendarService,
        notifier: NotificationSink,
        blacklist: Iterable[str] | Callable[[], Iterable[str]] = (),
    ) -> None:
        self.service = service
        self.notifier = notifier
        self._blacklist = blacklist
        self._cached: list[Calendar] = []

    def _current_blacklist(self) -> set[str]:
        source = self._blacklist() if callable(self._blacklist) else self._blacklist
        return set(source)

    def filter_blacklisted(self, calendars: list[Calendar]) -> list[Calendar]:
        blacklist = self._current_blacklist()
        return [cal for cal in calendars if cal.calendar_id not in blacklist]

    async def list_calendars(self) -> list[Calendar]:
        if self._cached:
            return self.filter_blacklisted(self._cached)

        calendars = await self.service.fetch_calendar_list()
        if calendars is None:
            self.notifier.notify("Could not load google calendars")
            return []

        self._cached = calendars
        self.logger.info("Calendar list loaded", calendar_count=len(calendars))
        return self.filter_blacklisted(calendars)

    def forget(self) -> None:
        """Drop the cached calendar list so the next call refetches it."""
        self._cached = []
