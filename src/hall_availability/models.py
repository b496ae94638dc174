"""Shared data models used across the hall availability pipeline."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Status(str, Enum):
    """Availability of a single hall slot."""

    AVAILABLE = "Available"
    BOOKED = "Booked"


class TimeSlot(str, Enum):
    """Bookable part of the day."""

    MORNING = "Morning"
    EVENING = "Evening"

    @property
    def sort_order(self) -> int:
        return 0 if self is TimeSlot.MORNING else 1


def normalise_location(name: str) -> str:
    """Location keys are compared upper-cased and trimmed."""
    return name.strip().upper()


class AvailabilityRecord(BaseModel):
    """One (date, location, hall, time slot) status entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str
    location: str
    hall_name: str = Field(alias="hallName")
    time_slot: TimeSlot = Field(alias="timeSlot")
    status: Status

    @property
    def is_section_header(self) -> bool:
        return self.hall_name == ""

    def sort_key(self) -> tuple[str, str, int]:
        return (self.location, self.hall_name, self.time_slot.sort_order)


def sort_records(records: List[AvailabilityRecord]) -> List[AvailabilityRecord]:
    """Order by location, hall name, then Morning before Evening."""
    return sorted(records, key=AvailabilityRecord.sort_key)


class HallRangeConfig(BaseModel):
    """Cell ranges holding one hall's morning and evening columns."""

    model_config = ConfigDict(frozen=True)

    name: str
    morning_range: str
    evening_range: str
    morning_header_offset: int = Field(default=0, ge=0)
    evening_header_offset: int = Field(default=0, ge=0)

    def range_for(self, slot: TimeSlot) -> str:
        return self.morning_range if slot is TimeSlot.MORNING else self.evening_range

    def offset_for(self, slot: TimeSlot) -> int:
        if slot is TimeSlot.MORNING:
            return self.morning_header_offset
        return self.evening_header_offset


class LocationConfig(BaseModel):
    """A venue and the spreadsheet holding its halls."""

    model_config = ConfigDict(frozen=True)

    name: str
    sheet_id: str
    halls: tuple[HallRangeConfig, ...]

    @field_validator("name")
    @classmethod
    def upper_case_name(cls, value: str) -> str:
        return normalise_location(value)


class RawCellBatch(BaseModel):
    """Values payload returned by the Sheets API for one range."""

    range: Optional[str] = None
    major_dimension: Optional[str] = Field(default=None, alias="majorDimension")
    values: List[List[str]] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def default_values(cls, value: object) -> object:
        # The API omits "values" entirely when every cell in the range is empty.
        return [] if value is None else value

    def first_column(self, index: int) -> Optional[str]:
        """Return the first cell of row ``index`` or None when it does not exist."""
        if index < 0 or index >= len(self.values):
            return None
        row = self.values[index]
        return row[0] if row else None
