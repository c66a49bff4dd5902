"""Typed data objects for Google Calendar integration service."""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Calendar(BaseModel):
    """Metadata about a calendar returned by the list API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    calendar_id: str = Field(alias="id")
    summary: str | None = None
    color_id: str | None = Field(default=None, alias="colorId")
    background_color: str | None = Field(default=None, alias="backgroundColor")
    primary: bool = False
    access_role: str | None = Field(default=None, alias="accessRole")
    time_zone: str | None = Field(default=None, alias="timeZone")

    def matches(self, tokens: list[str]) -> bool:
        """Return True if the calendar id or display name is in ``tokens``."""
        return self.calendar_id in tokens or (
            self.summary is not None and self.summary in tokens
        )


class EventDateTime(BaseModel):
    """Start or end of an event: an all-day ``date`` or a ``dateTime``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    all_day: date | None = Field(default=None, alias="date")
    date_time: datetime | None = Field(default=None, alias="dateTime")
    time_zone: str | None = Field(default=None, alias="timeZone")

    @model_validator(mode="after")
    def _exactly_one_endpoint(self) -> EventDateTime:
        if (self.all_day is None) == (self.date_time is None):
            raise ValueError("exactly one of 'date' or 'dateTime' must be set")
        return self

    @property
    def is_all_day(self) -> bool:
        return self.date_time is None

    def instant(self, tz: tzinfo) -> datetime:
        """Timezone-aware instant; all-day dates resolve to midnight in ``tz``."""
        if self.all_day is not None:
            return datetime.combine(self.all_day, time.min, tzinfo=tz)
        if self.date_time is None:
            raise ValueError("event endpoint has neither 'date' nor 'dateTime'")
        if self.date_time.tzinfo is None:
            return self.date_time.replace(tzinfo=tz)
        return self.date_time

    def local_day(self, tz: tzinfo) -> date:
        """Calendar day of this endpoint as seen from ``tz``."""
        if self.all_day is not None:
            return self.all_day
        return self.instant(tz).astimezone(tz).date()


class OriginalOccurrence(BaseModel):
    """The event exactly as the remote API returned it."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["original"] = "original"


class ExpandedOccurrence(BaseModel):
    """One synthetic per-day slice of a multi-day event."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["multiDay"] = "multiDay"
    day_index: int = Field(ge=1)
    total_days: int = Field(ge=2)


class SupersededOccurrence(BaseModel):
    """A multi-day original replaced by its per-day slices."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["delete"] = "delete"


Occurrence = Annotated[
    OriginalOccurrence | ExpandedOccurrence | SupersededOccurrence,
    Field(discriminator="kind"),
]


class Event(BaseModel):
    """Google Calendar event as consumed by the aggregator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    event_id: str = Field(alias="id")
    summary: str = ""
    description: str | None = None
    location: str | None = None
    html_link: str | None = Field(default=None, alias="htmlLink")

    start: EventDateTime
    end: EventDateTime

    status: str = "confirmed"  # confirmed, tentative, cancelled
    color_id: str | None = Field(default=None, alias="colorId")
    event_type: str | None = Field(default=None, alias="eventType")

    calendar: Calendar | None = Field(default=None, exclude=True)
    occurrence: Occurrence = Field(default_factory=OriginalOccurrence)

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def is_superseded(self) -> bool:
        return isinstance(self.occurrence, SupersededOccurrence)

    @property
    def is_multi_day_slice(self) -> bool:
        return isinstance(self.occurrence, ExpandedOccurrence)

    @property
    def calendar_id(self) -> str | None:
        return self.calendar.calendar_id if self.calendar else None

    def start_instant(self, tz: tzinfo) -> datetime:
        return self.start.instant(tz)

    def start_day(self, tz: tzinfo) -> date:
        return self.start.local_day(tz)

    @classmethod
    def from_api(cls, payload: dict[str, Any], calendar: Calendar) -> Event:
        """Validate a raw ``items[]`` entry and stamp its owning calendar."""
        return cls.model_validate({**payload, "calendar": calendar})
