"""Utilities for mapping calendar dates onto monthly sheet tabs."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

MONTH_ABBREVIATIONS = {
    1: "JAN",
    2: "FEB",
    3: "MAR",
    4: "APR",
    5: "MAY",
    6: "JUN",
    7: "JUL",
    8: "AUG",
    9: "SEP",
    10: "OCT",
    11: "NOV",
    12: "DEC",
}

DayInput = Union[date, datetime, str]


@dataclass(frozen=True)
class SheetDate:
    """A calendar date and the monthly tab that holds its bookings."""

    value: date

    @property
    def iso(self) -> str:
        return self.value.isoformat()

    @property
    def tab_name(self) -> str:
        """Tab title such as ``MAY 2025``."""
        return f"{MONTH_ABBREVIATIONS[self.value.month]} {self.value.year}"

    @property
    def day_of_month(self) -> int:
        return self.value.day

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.value.year, self.value.month)[1]

    @property
    def is_valid_day(self) -> bool:
        return 1 <= self.day_of_month <= self.days_in_month

    def row_index(self, header_offset: int = 0) -> int:
        """Zero-based row inside a range whose first data row is day 1."""
        return (self.day_of_month - 1) + header_offset


def parse_day(value: DayInput) -> Optional[SheetDate]:
    """
    Coerce user input into a :class:`SheetDate`.

    Strings must be ISO ``YYYY-MM-DD``; anything unparseable (including
    impossible dates such as ``2025-04-31``) returns ``None``.
    """
    if isinstance(value, datetime):
        return SheetDate(value.date())
    if isinstance(value, date):
        return SheetDate(value)
    try:
        return SheetDate(date.fromisoformat(str(value).strip()))
    except ValueError:
        return None
