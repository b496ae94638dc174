"""Grouping and formatting helpers for callers that display availability."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

import structlog

from .models import AvailabilityRecord, LocationConfig, Status, TimeSlot, normalise_location

LOGGER = structlog.get_logger(__name__)

STATUS_MARKERS = {
    Status.AVAILABLE: "available",
    Status.BOOKED: "booked",
}


def organize(
    records: Iterable[AvailabilityRecord],
    locations: Iterable[LocationConfig],
) -> List[AvailabilityRecord]:
    """
    Arrange records for display in configured venue order.

    Each location present in ``records`` starts with a header row whose hall
    name is empty and whose status is Booked, so a caller that ignores
    ``is_section_header`` never shows a venue as free. A Morning/Evening pair
    follows for every configured hall that appears in the data. A missing slot
    inside a present hall is shown as Booked.
    """
    grouped: Dict[str, Dict[str, Dict[TimeSlot, Status]]] = defaultdict(lambda: defaultdict(dict))
    record_date: Optional[str] = None
    for record in records:
        if record.is_section_header:
            continue
        record_date = record_date or record.date
        grouped[normalise_location(record.location)][record.hall_name][record.time_slot] = record.status

    rows: List[AvailabilityRecord] = []
    if record_date is None:
        return rows

    for location in locations:
        halls = grouped.get(location.name)
        if not halls:
            LOGGER.warning("organizer.location_missing", location=location.name)
            continue
        rows.append(
            AvailabilityRecord(
                date=record_date,
                location=location.name,
                hall_name="",
                time_slot=TimeSlot.MORNING,
                status=Status.BOOKED,
            )
        )
        for hall in location.halls:
            slots = halls.get(hall.name)
            if slots is None:
                LOGGER.warning("organizer.hall_missing", location=location.name, hall_name=hall.name)
                continue
            for slot in (TimeSlot.MORNING, TimeSlot.EVENING):
                rows.append(
                    AvailabilityRecord(
                        date=record_date,
                        location=location.name,
                        hall_name=hall.name,
                        time_slot=slot,
                        status=slots.get(slot, Status.BOOKED),
                    )
                )
    return rows


def format_summary(rows: Iterable[AvailabilityRecord], *, degraded: bool = False) -> str:
    """Build a plain-text listing from organised rows."""
    lines: List[str] = []
    pending: Dict[TimeSlot, Status] = {}
    for row in rows:
        if row.is_section_header:
            if lines:
                lines.append("")
            lines.append(f"{row.location} ({row.date})")
            continue
        pending[row.time_slot] = row.status
        if row.time_slot is TimeSlot.EVENING:
            morning = STATUS_MARKERS[pending.get(TimeSlot.MORNING, Status.BOOKED)]
            evening = STATUS_MARKERS[row.status]
            lines.append(f"- {row.hall_name}: morning {morning}, evening {evening}")
            pending.clear()

    if not lines:
        lines.append("No availability data for this date.")
    if degraded:
        lines.append("")
        lines.append("Warning: some halls could not be read and are shown as booked.")
    return "\n".join(lines).strip()
