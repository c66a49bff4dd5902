"""Multi-calendar event aggregation."""

from src.calendar_events.aggregator import EventAggregator, ListQuery
from src.calendar_events.cache import (
    CacheEntry,
    DayCache,
    effective_refresh_interval,
)
from src.calendar_events.expander import MultiDayExpander
from src.calendar_events.fetcher import PagedFetcher
from src.calendar_events.filters import (
    EventFilters,
    FilterPipeline,
    filter_by_color,
    select_calendars,
    split_filter_tokens,
)
from src.calendar_events.notifications import LoggingNotificationSink

__all__ = [
    "CacheEntry",
    "DayCache",
    "EventAggregator",
    "EventFilters",
    "FilterPipeline",
    "ListQuery",
    "LoggingNotificationSink",
    "MultiDayExpander",
    "PagedFetcher",
    "effective_refresh_interval",
    "filter_by_color",
    "select_calendars",
    "split_filter_tokens",
]
