"""Exception types raised by the hall availability pipeline."""

from __future__ import annotations

from typing import Optional


class HallAvailabilityError(RuntimeError):
    """Base class for errors raised by this package."""


class FetchError(HallAvailabilityError):
    """Raised when a range could not be fetched after all retry attempts."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        attempts: int = 0,
        last_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class MalformedResponseError(FetchError):
    """Raised when a successful response body is not a values payload. Never retried."""


class ConfigurationError(HallAvailabilityError):
    """Raised when the location configuration cannot be loaded."""
