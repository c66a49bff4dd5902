"""Configuration settings for the calendar aggregator with caching utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock
from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Calendar aggregator settings"""

    model_config = SettingsConfigDict(
        env_file=[".env.test", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google API Configuration
    google_api_key: SecretStr | None = None
    google_access_token: SecretStr | None = None
    google_calendar_base_url: str = "https://www.googleapis.com/calendar/v3"

    # Event cache
    calendar_refresh_interval: int = Field(default=10, ge=0)  # 秒
    calendar_use_custom_client: bool = False  # 共有クライアントの場合は 60 秒が下限

    # Calendar selection
    calendar_blacklist: list[str] = Field(default_factory=list)

    # Remote event listing
    calendar_page_size: int = Field(default=2500, gt=0, le=2500)
    calendar_max_pages: int = Field(default=100, gt=0)
    calendar_request_timeout: float = Field(default=30.0, gt=0)
    calendar_max_retries: int = Field(default=2, ge=0)
    calendar_retry_backoff: float = Field(default=0.5, ge=0)
    calendar_parallel_fetch: bool = False

    # Day boundaries (IANA name, None = local time)
    time_zone: str | None = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Environment
    environment: str = "personal"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment.lower() in ["development", "dev"]

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment.lower() in ["testing", "test"]

    def get_api_key(self) -> str | None:
        if self.google_api_key is None:
            return None
        return self.google_api_key.get_secret_value() or None

    def get_access_token(self) -> str | None:
        if self.google_access_token is None:
            return None
        return self.google_access_token.get_secret_value() or None


_lock = RLock()
_cached: Settings | None = None


def get_settings(*, refresh: bool = False) -> Settings:
    """Process-wide settings, built from the environment on first use.

    ``refresh=True`` rebuilds them.
    """

    global _cached

    with _lock:
        if _cached is None or refresh:
            _cached = Settings()
        return _cached


def clear_settings_cache() -> None:
    """Forget the process-wide settings; the next ``get_settings`` rebuilds them."""

    global _cached

    with _lock:
        _cached = None


get_settings.cache_clear = clear_settings_cache  # type: ignore[attr-defined]


@contextmanager
def override_settings(**overrides: Any) -> Iterator[Settings]:
    """Serve a patched copy from ``get_settings`` until the block exits."""

    global _cached

    with _lock:
        saved = _cached
        patched = (saved or Settings()).model_copy(update=overrides)
        _cached = patched

    try:
        yield patched
    finally:
        with _lock:
            _cached = saved
