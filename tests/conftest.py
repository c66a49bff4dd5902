"""
共通フィクスチャ

- テスト向けの環境変数を毎テスト自動設定（autouse）
- ルートを `sys.path` に追加して `import src.*` を解決
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# プロジェクトルートと tests ディレクトリをパスに追加
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_TESTS_DIR = Path(__file__).resolve().parent
for _path in (_PROJECT_ROOT, _TESTS_DIR):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from src.calendar_events import DayCache, EventAggregator, PagedFetcher  # noqa: E402
from src.config import clear_settings_cache  # noqa: E402
from src.integrations.google_calendar import (  # noqa: E402
    Calendar,
    GoogleColorDirectory,
)
from calendar_fakes import (  # noqa: E402
    FakeTransport,
    ManualClock,
    RecordingSink,
    StaticDirectory,
)


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """テスト用の環境変数を毎テストで設定。

    実際の認証情報は使用せず、最小限のダミー値を設定します。
    """

    env: dict[str, str] = {
        "GOOGLE_ACCESS_TOKEN": "test_token",
        "GOOGLE_API_KEY": "test_api_key",
        "TIME_ZONE": "UTC",
        "ENVIRONMENT": "testing",
    }

    for k, v in env.items():
        monkeypatch.setenv(k, v)

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def utc() -> ZoneInfo:
    return ZoneInfo("UTC")


@pytest.fixture
def work_calendar() -> Calendar:
    return Calendar(id="work@example.com", summary="Work", colorId="9")


@pytest.fixture
def home_calendar() -> Calendar:
    return Calendar(id="home@example.com", summary="Home", colorId="2")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 1, 1, 8, 0, tzinfo=UTC))


@pytest.fixture
def make_aggregator(transport, sink, clock, utc, work_calendar, home_calendar):
    """EventAggregator wired to in-memory fakes."""

    def factory(
        calendars: list[Calendar] | None = None,
        *,
        refresh_interval: float = 60,
        use_custom_client: bool = False,
        parallel: bool = False,
        page_size: int = 2500,
        tz=None,
    ) -> EventAggregator:
        transport.page_size = page_size
        fetcher = PagedFetcher(transport, sink, page_size=page_size)
        return EventAggregator(
            StaticDirectory(
                calendars if calendars is not None else [work_calendar, home_calendar]
            ),
            fetcher,
            GoogleColorDirectory(),
            DayCache(clock=clock),
            refresh_interval=refresh_interval,
            use_custom_client=use_custom_client,
            tz=tz or utc,
            parallel=parallel,
        )

    return factory
