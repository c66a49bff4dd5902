"""
Paginated event listing for a single calendar
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from src.calendar_events.interfaces import NotificationSink, Transport
from src.integrations.google_calendar.schemas import Calendar, Event
from src.utils.mixins import LoggerMixin

DEFAULT_PAGE_SIZE = 2500
DEFAULT_MAX_PAGES = 100


class PagedFetcher(LoggerMixin):
    """Google Calendar の events.list をページ送りしながら全件取得する"""

    def __init__(
        self,
        transport: Transport,
        notifier: NotificationSink,
        *,
        base_url: str = "https://www.googleapis.com/calendar/v3",
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self.transport = transport
        self.notifier = notifier
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.max_pages = max_pages

    def events_url(self, calendar: Calendar) -> str:
        return f"{self.base_url}/calendars/{quote(calendar.calendar_id, safe='')}/events"

    def build_params(
        self,
        time_min: datetime,
        time_max: datetime,
        page_token: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "maxResults": str(self.page_size),
            "singleEvents": "true",
            "orderBy": "startTime",
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
        }
        if page_token:
            params["pageToken"] = page_token
        return params

    async def fetch(
        self, calendar: Calendar, time_min: datetime, time_max: datetime
    ) -> list[Event]:
        """Every non-cancelled event of ``calendar`` in the window.

        A failed page aborts pagination; whatever was collected before it is
        returned.
        """
        events, _ = await self.fetch_with_status(calendar, time_min, time_max)
        return events

    async def fetch_with_status(
        self, calendar: Calendar, time_min: datetime, time_max: datetime
    ) -> tuple[list[Event], bool]:
        """Like :meth:`fetch`, also reporting whether every page arrived."""
        url = self.events_url(calendar)
        events: list[Event] = []
        page_token: str | None = None
        pages = 0
        complete = True

        while True:
            payload = await self.transport.request_json(
                "GET", url, params=self.build_params(time_min, time_max, page_token)
            )
            pages += 1

            if not isinstance(payload, dict):
                self.notifier.notify("Could not list Google Events")
                self.logger.warning(
                    "Event page request failed",
                    calendar_id=calendar.calendar_id,
                    page=pages,
                    collected=len(events),
                )
                complete = False
                break

            items = payload.get("items") or []
            events.extend(self._parse_page(items, calendar))

            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            if pages >= self.max_pages:
                self.logger.warning(
                    "Pagination limit reached",
                    calendar_id=calendar.calendar_id,
                    max_pages=self.max_pages,
                )
                complete = False
                break

        self.logger.debug(
            "Events fetched",
            calendar_id=calendar.calendar_id,
            count=len(events),
            pages=pages,
        )
        return events, complete

    def _parse_page(self, items: list[Any], calendar: Calendar) -> list[Event]:
        parsed: list[Event] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            if item.get("status") == "cancelled":
                continue
            try:
                parsed.append(Event.from_api(item, calendar))
            except ValidationError as exc:
                self.logger.warning(
                    "Skipping malformed event",
                    calendar_id=calendar.calendar_id,
                    event_id=item.get("id"),
                    error=str(exc),
                )
        return parsed
