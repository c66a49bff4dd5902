"""
Collaborator interfaces consumed by the event aggregation core.
"""

from typing import Any, Protocol

from src.integrations.google_calendar.schemas import Calendar, Event


class Transport(Protocol):
    """Authenticated JSON request; failure is reported as ``None``."""

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any: ...


class CalendarDirectory(Protocol):
    """Source of the (already blacklist-filtered) calendars."""

    async def list_calendars(self) -> list[Calendar]: ...


class ColorDirectory(Protocol):
    """Color palette lookup."""

    def known_color_names(self) -> set[str]: ...

    def color_name_of(self, event: Event) -> str: ...


class NotificationSink(Protocol):
    """Fire-and-forget user-visible error surface."""

    def notify(self, message: str) -> None: ...
