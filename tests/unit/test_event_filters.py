"""Tests for calendar and color filtering"""

from calendar_fakes import timed_event

from src.calendar_events.filters import (
    EventFilters,
    FilterPipeline,
    filter_by_color,
    select_calendars,
    split_filter_tokens,
)
from src.integrations.google_calendar import GoogleColorDirectory
from src.integrations.google_calendar.schemas import Event, SupersededOccurrence

COLORS = GoogleColorDirectory()


def _event(calendar, event_id: str, color_id: str | None = None) -> Event:
    return Event.from_api(
        timed_event(
            event_id,
            "2024-01-01T09:00:00+00:00",
            "2024-01-01T10:00:00+00:00",
            color_id=color_id,
        ),
        calendar,
    )


class TestTokenClassification:
    def test_color_names_are_routed_to_color_list(self) -> None:
        calendars, colors = split_filter_tokens(
            ["Work", "Tomato", "home@example.com", "sage"], COLORS.known_color_names()
        )

        assert calendars == ["Work", "home@example.com"]
        assert colors == ["tomato", "sage"]

    def test_empty_or_missing_tokens(self) -> None:
        assert split_filter_tokens(None, COLORS.known_color_names()) == ([], [])
        assert split_filter_tokens([], COLORS.known_color_names()) == ([], [])

    def test_from_tokens_builds_disjoint_lists(self) -> None:
        filters = EventFilters.from_tokens(
            ["Work", "tomato"], ["Home", "banana"], COLORS.known_color_names()
        )

        assert filters.include_calendars == ["Work"]
        assert filters.include_colors == ["tomato"]
        assert filters.exclude_calendars == ["Home"]
        assert filters.exclude_colors == ["banana"]


class TestCalendarSelection:
    def test_include_matches_id_or_name(self, work_calendar, home_calendar) -> None:
        by_name = EventFilters(include_calendars=["Work"])
        by_id = EventFilters(include_calendars=["home@example.com"])

        assert select_calendars([work_calendar, home_calendar], by_name) == [
            work_calendar
        ]
        assert select_calendars([work_calendar, home_calendar], by_id) == [
            home_calendar
        ]

    def test_include_wins_over_exclude(self, work_calendar, home_calendar) -> None:
        filters = EventFilters(include_calendars=["Work"], exclude_calendars=["Home"])

        assert select_calendars([work_calendar, home_calendar], filters) == [
            work_calendar
        ]

        filters = EventFilters(include_calendars=["Work"], exclude_calendars=["Work"])
        assert select_calendars([work_calendar, home_calendar], filters) == [
            work_calendar
        ]

    def test_exclude_drops_matches(self, work_calendar, home_calendar) -> None:
        filters = EventFilters(exclude_calendars=["Work"])

        assert select_calendars([work_calendar, home_calendar], filters) == [
            home_calendar
        ]

    def test_no_lists_keeps_everything(self, work_calendar, home_calendar) -> None:
        assert select_calendars([work_calendar, home_calendar], EventFilters()) == [
            work_calendar,
            home_calendar,
        ]


class TestColorFilter:
    def test_include_colors(self, work_calendar) -> None:
        red = _event(work_calendar, "red", "11")
        green = _event(work_calendar, "green", "10")
        plain = _event(work_calendar, "plain")

        result = filter_by_color(
            [red, green, plain],
            EventFilters(include_colors=["tomato"]),
            COLORS.color_name_of,
        )

        assert result == [red]

    def test_exclude_colors(self, work_calendar) -> None:
        red = _event(work_calendar, "red", "11")
        plain = _event(work_calendar, "plain")

        result = filter_by_color(
            [red, plain],
            EventFilters(exclude_colors=["tomato"]),
            COLORS.color_name_of,
        )

        assert result == [plain]

    def test_events_without_color_resolve_to_default(self, work_calendar) -> None:
        plain = _event(work_calendar, "plain")

        assert COLORS.color_name_of(plain) == "default"
        assert filter_by_color(
            [plain], EventFilters(include_colors=["default"]), COLORS.color_name_of
        ) == [plain]


class TestFilterPipeline:
    def test_applies_every_stage(self, work_calendar, home_calendar) -> None:
        keep = _event(work_calendar, "keep", "11")
        wrong_color = _event(work_calendar, "wrong", "1")
        wrong_calendar = _event(home_calendar, "other", "11")
        superseded = keep.model_copy(update={"occurrence": SupersededOccurrence()})

        result = FilterPipeline(COLORS.color_name_of).apply(
            [keep, wrong_color, wrong_calendar, superseded],
            EventFilters(include_calendars=["Work"], include_colors=["tomato"]),
        )

        assert result == [keep]

    def test_color_include_applies_regardless_of_calendar_filters(
        self, work_calendar, home_calendar
    ) -> None:
        red_work = _event(work_calendar, "a", "11")
        red_home = _event(home_calendar, "b", "11")
        blue_home = _event(home_calendar, "c", "9")

        result = FilterPipeline(COLORS.color_name_of).apply(
            [red_work, red_home, blue_home],
            EventFilters(exclude_calendars=["Work"], include_colors=["tomato"]),
        )

        assert result == [red_home]
