"""Tests for calendar list lookup and color resolution"""

from unittest.mock import AsyncMock, Mock

import pytest
from calendar_fakes import RecordingSink, timed_event

from src.integrations.google_calendar import (
    Calendar,
    Event,
    GoogleCalendarDirectory,
    GoogleColorDirectory,
)
from src.integrations.google_calendar.colors import EVENT_COLOR_NAMES


@pytest.fixture
def calendars() -> list[Calendar]:
    return [
        Calendar(id="work@example.com", summary="Work"),
        Calendar(id="holidays@group.v.calendar.google.com", summary="Holidays"),
    ]


@pytest.mark.asyncio
async def test_list_is_fetched_once(calendars) -> None:
    service = Mock()
    service.fetch_calendar_list = AsyncMock(return_value=calendars)
    directory = GoogleCalendarDirectory(service, RecordingSink())

    first = await directory.list_calendars()
    second = await directory.list_calendars()

    assert first == calendars
    assert second == calendars
    service.fetch_calendar_list.assert_awaited_once()


@pytest.mark.asyncio
async def test_blacklist_changes_apply_without_refetch(calendars) -> None:
    service = Mock()
    service.fetch_calendar_list = AsyncMock(return_value=calendars)
    blacklist: list[str] = []
    directory = GoogleCalendarDirectory(
        service, RecordingSink(), blacklist=lambda: blacklist
    )

    assert len(await directory.list_calendars()) == 2

    blacklist.append("holidays@group.v.calendar.google.com")
    remaining = await directory.list_calendars()

    assert [cal.calendar_id for cal in remaining] == ["work@example.com"]
    service.fetch_calendar_list.assert_awaited_once()


@pytest.mark.asyncio
async def test_static_blacklist(calendars) -> None:
    service = Mock()
    service.fetch_calendar_list = AsyncMock(return_value=calendars)
    directory = GoogleCalendarDirectory(
        service, RecordingSink(), blacklist=["work@example.com"]
    )

    remaining = await directory.list_calendars()

    assert [cal.summary for cal in remaining] == ["Holidays"]


@pytest.mark.asyncio
async def test_failure_notifies_and_retries_next_time(calendars) -> None:
    service = Mock()
    service.fetch_calendar_list = AsyncMock(side_effect=[None, calendars])
    sink = RecordingSink()
    directory = GoogleCalendarDirectory(service, sink)

    assert await directory.list_calendars() == []
    assert sink.messages == ["Could not load google calendars"]

    assert await directory.list_calendars() == calendars
    assert service.fetch_calendar_list.await_count == 2


@pytest.mark.asyncio
async def test_forget_drops_cached_list(calendars) -> None:
    service = Mock()
    service.fetch_calendar_list = AsyncMock(return_value=calendars)
    directory = GoogleCalendarDirectory(service, RecordingSink())

    await directory.list_calendars()
    directory.forget()
    await directory.list_calendars()

    assert service.fetch_calendar_list.await_count == 2


class TestColorDirectory:
    def test_known_names_include_palette_and_default(self) -> None:
        names = GoogleColorDirectory().known_color_names()

        assert set(EVENT_COLOR_NAMES.values()) <= names
        assert "default" in names
        assert len(names) == len(EVENT_COLOR_NAMES) + 1

    def test_color_name_of_event(self, calendars) -> None:
        colors = GoogleColorDirectory()
        red = Event.from_api(
            timed_event("a", "2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z", color_id="11"),
            calendars[0],
        )
        unknown = Event.from_api(
            timed_event("b", "2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z", color_id="99"),
            calendars[0],
        )

        assert colors.color_name_of(red) == "tomato"
        assert colors.color_name_of(unknown) == "default"

    def test_custom_palette_is_lowercased(self, calendars) -> None:
        colors = GoogleColorDirectory({"1": "Ocean"})
        event = Event.from_api(
            timed_event("a", "2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z", color_id="1"),
            calendars[0],
        )

        assert colors.known_color_names() == {"ocean", "default"}
        assert colors.color_name_of(event) == "ocean"
