"""Shared fakes and utilities for unit tests."""

from __future__ import annotations

from typing import Dict, List, Optional, Set

import httpx

from hall_availability.config import Settings
from hall_availability.models import HallRangeConfig, LocationConfig

ROWS_IN_RANGE = 30


def column(default: str = "occ", **days: str) -> List[List[str]]:
    """A 30-row single-column range; ``days`` maps ``d<N>`` to the cell for day N."""
    rows = [[default] for _ in range(ROWS_IN_RANGE)]
    for key, value in days.items():
        rows[int(key[1:]) - 1] = [value]
    return rows


class SheetsStub:
    """In-memory stand-in for the Sheets values endpoint."""

    def __init__(self, columns: Optional[Dict[str, List[List[str]]]] = None, default: str = "occ"):
        self.columns = columns or {}
        self.default = default
        self.failing: Set[str] = set()
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        expression = request.url.path.rsplit("/values/", 1)[1]
        _, cell_range = expression.split("!", 1)
        if cell_range in self.failing:
            return httpx.Response(503, json={"error": {"code": 503, "message": "unavailable"}})
        values = self.columns.get(cell_range, column(self.default))
        return httpx.Response(200, json={"range": expression, "majorDimension": "ROWS", "values": values})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requested_ranges(self) -> List[str]:
        return [request.url.path.rsplit("!", 1)[1] for request in self.requests]


class SleepRecorder:
    """Replaces asyncio.sleep in the retry loop so tests never wait."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_settings(**overrides) -> Settings:
    values = {
        "api_key": "test-key",
        "base_url": "https://sheets.test/v4/spreadsheets",
        "backoff_base_seconds": 2.0,
        "backoff_max_seconds": 10.0,
        "backoff_jitter_seconds": 0.0,
        "deadline_seconds": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


TEST_LOCATIONS = (
    LocationConfig(
        name="GMK Banquets Tathawade",
        sheet_id="sheet-tathawade",
        halls=(
            HallRangeConfig(name="Aster", morning_range="B4:B33", evening_range="C4:C33"),
            HallRangeConfig(name="Lotus", morning_range="H4:H33", evening_range="I4:I33"),
        ),
    ),
    LocationConfig(
        name="GMK Banquets Ravet",
        sheet_id="sheet-ravet",
        halls=(
            HallRangeConfig(name="Vyas", morning_range="N4:N33", evening_range="O4:O33"),
            HallRangeConfig(
                name="Agastya",
                morning_range="L3:L33",
                evening_range="M3:M33",
                morning_header_offset=1,
                evening_header_offset=1,
            ),
        ),
    ),
)
