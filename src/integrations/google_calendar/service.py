"""HTTP helpers for Google Calendar integration."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.integrations.google_calendar.schemas import Calendar
from src.utils.mixins import LoggerMixin

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class RetryableAPIError(Exception):
    """Transient API failure worth another attempt"""


class GoogleCalendarService(LoggerMixin):
    """Wrapper around Google Calendar REST API.

    Every request resolves to the decoded JSON payload or ``None``; transport
    failures are logged and never raised to the caller.
    """

    def __init__(
        self,
        base_url: str = "https://www.googleapis.com/calendar/v3",
        *,
        access_token: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.request_count = 0
        self._session: aiohttp.ClientSession | None = None

    def _log_context(self) -> dict[str, Any]:
        return {"base_url": self.base_url}

    async def get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = {"Content-Type": "application/json"}
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers=headers,
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> GoogleCalendarService:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch_calendar_list(self) -> list[Calendar] | None:
        """Return the user's calendars, or ``None`` when the request failed."""
        url = f"{self.base_url}/users/me/calendarList"
        payload = await self.request_json("GET", url)
        if not isinstance(payload, dict):
            return None
        records: list[Calendar] = []
        for item in payload.get("items", []):
            try:
                records.append(Calendar.model_validate(item))
            except ValidationError as exc:
                self.logger.debug(
                    "Failed to parse calendar entry", error=str(exc), raw=item
                )
        return records

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        query = dict(params or {})
        if self.api_key:
            query.setdefault("key", self.api_key)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_backoff),
            retry=retry_if_exception_type(RetryableAPIError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._request_once(method, url, query, body)
        except RetryableAPIError as exc:
            self.logger.debug(
                "Google Calendar API request gave up",
                url=url,
                attempts=self.max_retries + 1,
                reason=str(exc),
            )
        return None

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        self.logger.debug(
            "Retrying Google Calendar API request",
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            reason=str(outcome.exception()) if outcome else None,
        )

    async def _request_once(
        self,
        method: str,
        url: str,
        params: dict[str, Any],
        body: Any,
    ) -> Any:
        session = await self.get_session()
        self.request_count += 1
        try:
            async with session.request(
                method, url, params=params or None, json=body
            ) as resp:
                if resp.status in RETRYABLE_STATUSES:
                    raise RetryableAPIError(f"HTTP {resp.status}")
                if resp.status != 200:
                    self.logger.debug(
                        "Google Calendar API request failed",
                        url=url,
                        status=resp.status,
                        params=_redact(params),
                    )
                    return None
                try:
                    return await resp.json()
                except (aiohttp.ContentTypeError, ValueError):
                    self.logger.debug(
                        "Google Calendar API returned non-JSON response", url=url
                    )
                    return None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RetryableAPIError(f"{type(exc).__name__}: {exc}") from exc


def _redact(params: dict[str, Any]) -> dict[str, Any]:
    return {k: ("***" if k == "key" else v) for k, v in params.items()}
