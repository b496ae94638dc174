"""Static venue layout: which spreadsheet columns hold which hall."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from .errors import ConfigurationError
from .models import HallRangeConfig, LocationConfig

LOGGER = structlog.get_logger(__name__)

BOOKING_SPREADSHEET_ID = "1pMiOb9hvvUdvuK0Hxt0Pa1lBF2JdYCvPZ6WdHxZPegk"

DEFAULT_LOCATIONS: tuple[LocationConfig, ...] = (
    LocationConfig(
        name="GMK Banquets Tathawade",
        sheet_id=BOOKING_SPREADSHEET_ID,
        halls=(
            HallRangeConfig(name="Aster", morning_range="B4:B33", evening_range="C4:C33"),
            HallRangeConfig(name="Grand", morning_range="D4:D33", evening_range="E4:E33"),
            HallRangeConfig(name="Tulip", morning_range="F4:F33", evening_range="G4:G33"),
            HallRangeConfig(name="Lotus", morning_range="H4:H33", evening_range="I4:I33"),
        ),
    ),
    LocationConfig(
        name="GMK Banquets Ravet",
        sheet_id=BOOKING_SPREADSHEET_ID,
        halls=(
            HallRangeConfig(name="Agastya", morning_range="L4:L33", evening_range="M4:M33"),
            HallRangeConfig(name="Vyas", morning_range="N4:N33", evening_range="O4:O33"),
            HallRangeConfig(name="Lawn", morning_range="P4:P33", evening_range="Q4:Q33"),
        ),
    ),
)

_LOCATIONS_ADAPTER = TypeAdapter(tuple[LocationConfig, ...])


def load_locations(path: Optional[Path] = None) -> tuple[LocationConfig, ...]:
    """
    Return the venue layout.

    With no ``path`` the built-in layout is used. Otherwise ``path`` must hold a
    JSON list of objects shaped like :class:`LocationConfig`.
    """
    if path is None:
        return DEFAULT_LOCATIONS

    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        locations = _LOCATIONS_ADAPTER.validate_python(payload)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ConfigurationError(f"Could not load locations from {path}: {exc}") from exc

    names = [location.name for location in locations]
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate location names in {path}: {names}")
    for location in locations:
        hall_names = [hall.name for hall in location.halls]
        if "" in hall_names or len(set(hall_names)) != len(hall_names):
            raise ConfigurationError(f"Hall names under {location.name} must be unique and non-empty")

    LOGGER.info("config.locations_loaded", path=str(path), locations=names)
    return locations


def total_halls(locations: tuple[LocationConfig, ...]) -> int:
    return sum(len(location.halls) for location in locations)
