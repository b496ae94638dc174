"""Wrapper around the Google Sheets values API with retry behaviour."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from .config import Settings
from .errors import FetchError, MalformedResponseError
from .models import RawCellBatch

LOGGER = structlog.get_logger(__name__)

RETRYABLE_ERRORS = (httpx.HTTPError, asyncio.TimeoutError)

SleepFn = Callable[[float], Awaitable[Any]]


def build_range_expression(tab_name: str, cell_range: str) -> str:
    """Combine a tab title and a cell range, e.g. ``'MAY 2025'!B4:B33``."""
    return f"'{tab_name}'!{cell_range}"


class RangeFetcher:
    """Fetches a single cell range, retrying transient failures."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        *,
        sleep: Optional[SleepFn] = None,
    ):
        self._settings = settings
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep or asyncio.sleep

    async def __aenter__(self) -> "RangeFetcher":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout_seconds)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def max_attempts(self) -> int:
        return self._settings.max_retries + 1

    async def fetch_range(self, sheet_id: str, range_expression: str) -> RawCellBatch:
        """Return the rows of ``range_expression`` or raise :class:`FetchError`."""
        if self._client is None:
            raise RuntimeError("RangeFetcher must be used as an async context manager")

        url = self._settings.sheet_url(sheet_id, range_expression)
        LOGGER.debug("fetch.request.start", url=url, range=range_expression)

        try:
            response = await self._get_with_retry(url)
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            LOGGER.error(
                "fetch.retries_exhausted",
                url=url,
                attempts=exc.last_attempt.attempt_number,
                error=repr(last_error),
            )
            raise FetchError(
                f"Failed to fetch {range_expression} after {exc.last_attempt.attempt_number} attempts: {last_error}",
                url=url,
                attempts=exc.last_attempt.attempt_number,
                last_error=last_error,
            ) from last_error

        batch = self._parse(response, url)
        LOGGER.debug("fetch.request.complete", url=url, rows=len(batch.values))
        return batch

    async def _get_with_retry(self, url: str) -> httpx.Response:
        """Execute the GET with exponential backoff plus jitter."""
        settings = self._settings
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=settings.backoff_base_seconds,
                max=settings.backoff_max_seconds,
            )
            + wait_random(0, settings.backoff_jitter_seconds),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=self._log_retry(url),
            sleep=self._sleep,
        ):
            with attempt:
                response = await asyncio.wait_for(
                    self._client.get(url, params={"key": settings.api_key_value, "alt": "json"}),
                    timeout=settings.timeout_seconds,
                )
                response.raise_for_status()
                return response
        raise FetchError("Sheets fetch loop exited without a response", url=url)  # safety net

    @staticmethod
    def _log_retry(url: str) -> Callable[[RetryCallState], None]:
        def log(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            LOGGER.warning(
                "fetch.attempt.failed",
                url=url,
                attempt=retry_state.attempt_number,
                error=repr(error),
                retry_in=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
            )

        return log

    @staticmethod
    def _parse(response: httpx.Response, url: str) -> RawCellBatch:
        """Validate the values payload. Malformed bodies are not retried."""
        try:
            return RawCellBatch.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            LOGGER.error("fetch.response.malformed", url=url, error=str(exc))
            raise MalformedResponseError(
                f"Malformed values payload from {url}: {exc}",
                url=url,
                attempts=1,
                last_error=exc,
            ) from exc
