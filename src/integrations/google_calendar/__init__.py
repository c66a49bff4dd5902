"""Google Calendar integration helpers."""

from src.integrations.google_calendar.calendars import GoogleCalendarDirectory
from src.integrations.google_calendar.colors import GoogleColorDirectory
from src.integrations.google_calendar.schemas import (
    Calendar,
    Event,
    EventDateTime,
    ExpandedOccurrence,
    OriginalOccurrence,
    SupersededOccurrence,
)
from src.integrations.google_calendar.service import GoogleCalendarService

__all__ = [
    "Calendar",
    "Event",
    "EventDateTime",
    "ExpandedOccurrence",
    "GoogleCalendarDirectory",
    "GoogleCalendarService",
    "GoogleColorDirectory",
    "OriginalOccurrence",
    "SupersededOccurrence",
]
