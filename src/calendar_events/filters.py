"""
Calendar and color filtering
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from pydantic import BaseModel, ConfigDict, Field

from src.integrations.google_calendar.schemas import Calendar, Event


def split_filter_tokens(
    tokens: Iterable[str] | None, known_colors: Iterable[str]
) -> tuple[list[str], list[str]]:
    """Partition tokens into (calendar tokens, color tokens).

    Color matching ignores case; color tokens are returned lower-cased.
    """
    palette = {name.lower() for name in known_colors}
    calendars: list[str] = []
    colors: list[str] = []
    for token in tokens or []:
        if token.lower() in palette:
            colors.append(token.lower())
        else:
            calendars.append(token)
    return calendars, colors


class EventFilters(BaseModel):
    """Query filters after the one-time calendar/color classification."""

    model_config = ConfigDict(frozen=True)

    include_calendars: list[str] = Field(default_factory=list)
    exclude_calendars: list[str] = Field(default_factory=list)
    include_colors: list[str] = Field(default_factory=list)
    exclude_colors: list[str] = Field(default_factory=list)

    @classmethod
    def from_tokens(
        cls,
        include: Iterable[str] | None,
        exclude: Iterable[str] | None,
        known_colors: Iterable[str],
    ) -> EventFilters:
        known = list(known_colors)
        include_calendars, include_colors = split_filter_tokens(include, known)
        exclude_calendars, exclude_colors = split_filter_tokens(exclude, known)
        return cls(
            include_calendars=include_calendars,
            exclude_calendars=exclude_calendars,
            include_colors=include_colors,
            exclude_colors=exclude_colors,
        )

    def calendar_allowed(self, calendar: Calendar | None) -> bool:
        if self.include_calendars:
            return calendar is not None and calendar.matches(self.include_calendars)
        if self.exclude_calendars:
            return calendar is None or not calendar.matches(self.exclude_calendars)
        return True

    def color_allowed(self, color_name: str) -> bool:
        if self.include_colors:
            return color_name in self.include_colors
        if self.exclude_colors:
            return color_name not in self.exclude_colors
        return True


def select_calendars(
    calendars: Iterable[Calendar], filters: EventFilters
) -> list[Calendar]:
    return [calendar for calendar in calendars if filters.calendar_allowed(calendar)]


def filter_by_color(
    events: Iterable[Event],
    filters: EventFilters,
    color_name_of: Callable[[Event], str],
) -> list[Event]:
    if not filters.include_colors and not filters.exclude_colors:
        return list(events)
    return [
        event for event in events if filters.color_allowed(color_name_of(event).lower())
    ]


class FilterPipeline:
    """Superseded removal, then calendar predicate, then color predicate."""

    def __init__(self, color_name_of: Callable[[Event], str]) -> None:
        self.color_name_of = color_name_of

    def apply(self, events: Iterable[Event], filters: EventFilters) -> list[Event]:
        live = [event for event in events if not event.is_superseded]
        in_calendars = [
            event for event in live if filters.calendar_allowed(event.calendar)
        ]
        return filter_by_color(in_calendars, filters, self.color_name_of)
