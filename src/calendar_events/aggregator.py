"""
イベント集約

Resolves a date range across calendars through the day cache, fetching,
expanding and caching whatever is missing or stale.
"""

from __future__ import annotations

import asyncio
import os
from collections import defaultdict
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from pathlib import Path
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, ConfigDict, Field

from src.calendar_events.cache import DayCache, effective_refresh_interval, iter_days
from src.calendar_events.expander import MultiDayExpander
from src.calendar_events.fetcher import PagedFetcher
from src.calendar_events.filters import (
    EventFilters,
    FilterPipeline,
    filter_by_color,
    select_calendars,
)
from src.calendar_events.interfaces import CalendarDirectory, ColorDirectory
from src.calendar_events.notifications import LoggingNotificationSink
from src.integrations.google_calendar import (
    GoogleCalendarDirectory,
    GoogleCalendarService,
    GoogleColorDirectory,
)
from src.integrations.google_calendar.schemas import Calendar, Event
from src.utils.mixins import LoggerMixin

if TYPE_CHECKING:
    from src.calendar_events.interfaces import NotificationSink
    from src.config.settings import Settings

logger = structlog.get_logger(__name__)


class ListQuery(BaseModel):
    """Events between two days (inclusive), optionally narrowed by name or color."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime | date | None = None
    end_date: datetime | date | None = None
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


LOCALTIME_PATH = Path("/etc/localtime")


def resolve_timezone(name: str | None) -> tzinfo:
    """IANA zone by name; without one, the host zone from ``TZ`` or /etc/localtime.

    A fixed UTC offset is used only when neither is readable.
    """
    if name:
        return ZoneInfo(name)

    env_name = os.environ.get("TZ", "").lstrip(":")
    if env_name:
        try:
            return ZoneInfo(env_name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.warning("Ignoring unknown TZ", tz=env_name)

    try:
        with LOCALTIME_PATH.open("rb") as tzfile:
            return ZoneInfo.from_file(tzfile, key="localtime")
    except (OSError, ValueError):
        logger.warning(
            "Host time zone unavailable, using fixed offset", path=str(LOCALTIME_PATH)
        )
    return datetime.now(UTC).astimezone().tzinfo or UTC


def start_of_day(value: date | datetime, tz: tzinfo) -> datetime:
    if isinstance(value, datetime):
        value = value.astimezone(tz) if value.tzinfo else value.replace(tzinfo=tz)
        value = value.date()
    return datetime.combine(value, time.min, tzinfo=tz)


def end_of_day(value: date | datetime, tz: tzinfo) -> datetime:
    return start_of_day(value, tz).replace(hour=23, minute=59, second=59, microsecond=999999)


class EventAggregator(LoggerMixin):
    """複数カレンダーのイベントを期間指定で集約する"""

    def __init__(
        self,
        directory: CalendarDirectory,
        fetcher: PagedFetcher,
        colors: ColorDirectory,
        cache: DayCache | None = None,
        *,
        refresh_interval: float = 10,
        use_custom_client: bool = False,
        tz: tzinfo | None = None,
        parallel: bool = False,
        service: GoogleCalendarService | None = None,
    ) -> None:
        self.directory = directory
        self.fetcher = fetcher
        self.colors = colors
        self.cache = cache if cache is not None else DayCache()
        self.refresh_interval = refresh_interval
        self.use_custom_client = use_custom_client
        self.tz = tz or resolve_timezone(None)
        self.parallel = parallel
        self.service = service
        self.expander = MultiDayExpander(self.tz)
        self.pipeline = FilterPipeline(self.colors.color_name_of)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        notifier: NotificationSink | None = None,
        cache: DayCache | None = None,
    ) -> EventAggregator:
        notifier = notifier or LoggingNotificationSink()
        service = GoogleCalendarService(
            settings.google_calendar_base_url,
            access_token=settings.get_access_token(),
            api_key=settings.get_api_key(),
            timeout_seconds=settings.calendar_request_timeout,
            max_retries=settings.calendar_max_retries,
            retry_backoff=settings.calendar_retry_backoff,
        )
        directory = GoogleCalendarDirectory(
            service, notifier, blacklist=lambda: settings.calendar_blacklist
        )
        fetcher = PagedFetcher(
            service,
            notifier,
            base_url=settings.google_calendar_base_url,
            page_size=settings.calendar_page_size,
            max_pages=settings.calendar_max_pages,
        )
        return cls(
            directory,
            fetcher,
            GoogleColorDirectory(),
            cache,
            refresh_interval=settings.calendar_refresh_interval,
            use_custom_client=settings.calendar_use_custom_client,
            tz=resolve_timezone(settings.time_zone),
            parallel=settings.calendar_parallel_fetch,
            service=service,
        )

    async def close(self) -> None:
        if self.service is not None:
            await self.service.close()

    async def __aenter__(self) -> EventAggregator:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def freshness_window(self) -> timedelta:
        return effective_refresh_interval(self.refresh_interval, self.use_custom_client)

    def clear_cache(self) -> None:
        self.cache.clear()

    def resolve_range(self, query: ListQuery) -> tuple[datetime, datetime]:
        start_value = query.start_date or datetime.now(self.tz)
        start = start_of_day(start_value, self.tz)
        end = end_of_day(query.end_date or start, self.tz)
        return start, end

    async def list_events(
        self, query: ListQuery | None = None, **kwargs: Any
    ) -> list[Event]:
        """Events of every selected calendar, sorted by start instant."""
        if query is not None and kwargs:
            raise TypeError("pass either a ListQuery or keyword arguments, not both")
        query = query or ListQuery(**kwargs)
        start, end = self.resolve_range(query)
        if end < start:
            self.logger.warning(
                "End date before start date",
                start=start.isoformat(),
                end=end.isoformat(),
            )
            return []

        with structlog.contextvars.bound_contextvars(
            range_start=start.date().isoformat(), range_end=end.date().isoformat()
        ):
            return await self._list_range(query, start, end)

    async def _list_range(
        self, query: ListQuery, start: datetime, end: datetime
    ) -> list[Event]:
        calendars = await self.directory.list_calendars()
        filters = EventFilters.from_tokens(
            query.include, query.exclude, self.colors.known_color_names()
        )
        selected = select_calendars(calendars, filters)
        self.logger.debug(
            "Listing events",
            start=start.isoformat(),
            end=end.isoformat(),
            calendars=[cal.calendar_id for cal in selected],
            filters=filters.model_dump(),
        )
        if not selected:
            return []

        if self.parallel:
            results = await asyncio.gather(
                *(self._events_for_calendar(cal, start, end, filters) for cal in selected)
            )
        else:
            results = [
                await self._events_for_calendar(cal, start, end, filters)
                for cal in selected
            ]

        merged = [event for events in results for event in events]
        return sorted(merged, key=lambda event: event.start_instant(self.tz))

    async def _events_for_calendar(
        self,
        calendar: Calendar,
        start: datetime,
        end: datetime,
        filters: EventFilters,
    ) -> list[Event]:
        try:
            cached = self.cache.lookup(
                calendar, start.date(), end.date(), self.freshness_window
            )
            if cached is not None:
                self.logger.debug(
                    "Serving events from cache",
                    calendar_id=calendar.calendar_id,
                    count=len(cached),
                )
                return filter_by_color(cached, filters, self.colors.color_name_of)

            fetched, complete = await self.fetcher.fetch_with_status(
                calendar, start, end
            )
            expanded = self.expander.expand(fetched, start, end)
            live = [event for event in expanded if not event.is_superseded]
            if complete:
                self._populate(calendar, live, start.date(), end.date())
            return self.pipeline.apply(expanded, filters)
        except Exception as exc:
            self.logger.error(
                "Failed to resolve calendar events",
                calendar_id=calendar.calendar_id,
                error=str(exc),
                exc_info=True,
            )
            return []

    def _populate(
        self, calendar: Calendar, events: list[Event], first_day: date, last_day: date
    ) -> None:
        """Write one bucket per requested day; days without events cache empty."""
        buckets: dict[date, list[Event]] = defaultdict(list)
        for event in events:
            day = min(max(event.start_day(self.tz), first_day), last_day)
            buckets[day].append(event)

        updated = self.cache.now()
        for day in iter_days(first_day, last_day):
            self.cache.populate(calendar, day, buckets.get(day, []), updated)
