"""Configuration objects and helpers for the hall availability service."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional
from urllib.parse import quote

import structlog
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOGGER = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    api_key: Optional[SecretStr] = Field(default=None, alias="HALL_SHEETS_API_KEY")
    base_url: str = Field(
        "https://sheets.googleapis.com/v4/spreadsheets",
        alias="HALL_SHEETS_BASE_URL",
    )
    timeout_seconds: float = Field(15.0, alias="HALL_TIMEOUT_SECONDS", gt=0)
    max_retries: int = Field(3, alias="HALL_MAX_RETRIES", ge=0)
    backoff_base_seconds: float = Field(2.0, alias="HALL_BACKOFF_BASE_SECONDS", ge=0)
    backoff_max_seconds: float = Field(10.0, alias="HALL_BACKOFF_MAX_SECONDS", ge=0)
    backoff_jitter_seconds: float = Field(1.0, alias="HALL_BACKOFF_JITTER_SECONDS", ge=0)
    deadline_seconds: Optional[float] = Field(90.0, alias="HALL_DEADLINE_SECONDS")
    cache_dir: Optional[Path] = Field(None, alias="HALL_CACHE_DIR")
    connectivity_probe: Literal["always", "http"] = Field("always", alias="HALL_CONNECTIVITY_PROBE")
    locations_file: Optional[Path] = Field(None, alias="HALL_LOCATIONS_FILE")
    log_level: str = Field("INFO", alias="HALL_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, value: Optional[str]) -> Optional[str]:
        """Treat an empty or whitespace-only key the same as an unset one."""
        if value is None:
            return None
        raw = value.get_secret_value() if isinstance(value, SecretStr) else str(value)
        return raw.strip() or None

    @field_validator("deadline_seconds")
    @classmethod
    def non_positive_deadline_disables(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            return None
        return value

    @property
    def api_key_value(self) -> str:
        return self.api_key.get_secret_value() if self.api_key else ""

    def sheet_url(self, sheet_id: str, range_expression: str) -> str:
        """Construct the values endpoint for a sheet and an encoded range expression."""
        return f"{self.base_url.rstrip('/')}/{sheet_id}/values/{quote(range_expression, safe='')}"

    def check_credentials(self) -> bool:
        """Log a configuration error when the API key is missing. Returns True when present."""
        if self.api_key is None:
            LOGGER.error(
                "config.api_key_missing",
                hint="Set HALL_SHEETS_API_KEY in the environment or .env file.",
            )
            return False
        LOGGER.info("config.api_key_present", length=len(self.api_key_value))
        return True
