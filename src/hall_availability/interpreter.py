"""Mapping from raw booking-register cell text to a slot status."""

from __future__ import annotations

from typing import Optional

import structlog

from .diagnostics import DataWarning, Diagnostics
from .models import Status, TimeSlot

LOGGER = structlog.get_logger(__name__)

VACANT_WORDS = frozenset({"", "vac", "vacc", "vacant", "available"})
OCCUPIED_WORDS = frozenset({"occ", "occupied", "booked"})


def interpret(
    raw: Optional[str],
    *,
    diagnostics: Optional[Diagnostics] = None,
    location: Optional[str] = None,
    hall_name: Optional[str] = None,
    time_slot: Optional[TimeSlot] = None,
) -> Status:
    """
    Return the status encoded by a cell.

    A missing cell is Booked, and so is any text we do not recognise: an
    unknown value is never shown as available. Unrecognised text is logged as a
    data-quality warning.
    """
    if raw is None:
        return Status.BOOKED

    cleaned = raw.strip().lower()
    if cleaned in VACANT_WORDS:
        return Status.AVAILABLE
    if cleaned in OCCUPIED_WORDS:
        return Status.BOOKED

    LOGGER.warning(
        "interpreter.unrecognised_value",
        raw_value=raw,
        location=location,
        hall_name=hall_name,
        time_slot=time_slot.value if time_slot else None,
    )
    if diagnostics is not None:
        diagnostics.data_warnings.append(
            DataWarning(raw_value=raw, location=location, hall_name=hall_name, time_slot=time_slot)
        )
    return Status.BOOKED
