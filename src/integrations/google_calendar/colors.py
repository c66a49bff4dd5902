"""Google Calendar event color palette."""

from __future__ import annotations

from src.integrations.google_calendar.schemas import Event

# Google の固定イベントカラー (colorId -> 表示名)
EVENT_COLOR_NAMES: dict[str, str] = {
    "1": "lavender",
    "2": "sage",
    "3": "grape",
    "4": "flamingo",
    "5": "banana",
    "6": "tangerine",
    "7": "peacock",
    "8": "graphite",
    "9": "blueberry",
    "10": "basil",
    "11": "tomato",
}

# colorId を持たないイベントはカレンダーの色を継承する
CALENDAR_COLOR_NAME = "default"


class GoogleColorDirectory:
    """Resolve human color names for events."""

    def __init__(self, event_colors: dict[str, str] | None = None) -> None:
        palette = EVENT_COLOR_NAMES if event_colors is None else event_colors
        self.event_colors = {
            color_id: name.lower() for color_id, name in palette.items()
        }

    def known_color_names(self) -> set[str]:
        return set(self.event_colors.values()) | {CALENDAR_COLOR_NAME}

    def color_name_of(self, event: Event) -> str:
        if event.color_id and event.color_id in self.event_colors:
            return self.event_colors[event.color_id]
        return CALENDAR_COLOR_NAME
