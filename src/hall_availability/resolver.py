"""Resolves the morning and evening status of a single hall for one date."""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol

import structlog

from .diagnostics import Diagnostics
from .fetcher import build_range_expression
from .interpreter import interpret
from .models import (
    AvailabilityRecord,
    HallRangeConfig,
    LocationConfig,
    RawCellBatch,
    Status,
    TimeSlot,
)
from .sheet_calendar import SheetDate

LOGGER = structlog.get_logger(__name__)

SLOTS = (TimeSlot.MORNING, TimeSlot.EVENING)


class RangeSource(Protocol):
    """Anything that can return the rows of a sheet range."""

    async def fetch_range(self, sheet_id: str, range_expression: str) -> RawCellBatch: ...


def fallback_record(location: LocationConfig, hall: HallRangeConfig, day: SheetDate, slot: TimeSlot) -> AvailabilityRecord:
    """Fail-safe record used whenever a slot's data could not be read."""
    return AvailabilityRecord(
        date=day.iso,
        location=location.name,
        hall_name=hall.name,
        time_slot=slot,
        status=Status.BOOKED,
    )


class HallResolver:
    """Turns one hall's morning/evening ranges into two availability records."""

    def __init__(self, fetcher: RangeSource):
        self._fetcher = fetcher

    async def resolve(
        self,
        location: LocationConfig,
        hall: HallRangeConfig,
        day: SheetDate,
        diagnostics: Optional[Diagnostics] = None,
    ) -> tuple[AvailabilityRecord, AvailabilityRecord]:
        """
        Return the (Morning, Evening) records for ``hall``.

        Both ranges are fetched concurrently. A slot whose fetch fails is
        reported Booked; a slot that resolved keeps its real status.
        """
        outcomes = await asyncio.gather(
            *(self._resolve_slot(location, hall, day, slot, diagnostics) for slot in SLOTS),
            return_exceptions=True,
        )

        records: list[AvailabilityRecord] = []
        for slot, outcome in zip(SLOTS, outcomes):
            if isinstance(outcome, AvailabilityRecord):
                records.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                # Cancellation and other BaseExceptions are not ours to absorb.
                raise outcome
            LOGGER.error(
                "resolver.slot.fallback",
                location=location.name,
                hall_name=hall.name,
                time_slot=slot.value,
                date=day.iso,
                error=str(outcome),
            )
            if diagnostics is not None:
                diagnostics.fetch_failures.append(f"{location.name} / {hall.name} / {slot.value}: {outcome}")
                diagnostics.record_fallback(location.name, hall.name, slot, reason=str(outcome))
            records.append(fallback_record(location, hall, day, slot))

        return records[0], records[1]

    async def _resolve_slot(
        self,
        location: LocationConfig,
        hall: HallRangeConfig,
        day: SheetDate,
        slot: TimeSlot,
        diagnostics: Optional[Diagnostics],
    ) -> AvailabilityRecord:
        range_expression = build_range_expression(day.tab_name, hall.range_for(slot))
        header_offset = hall.offset_for(slot)
        row_index = day.row_index(header_offset)

        batch = await self._fetcher.fetch_range(location.sheet_id, range_expression)
        raw_value = batch.first_column(row_index)

        LOGGER.debug(
            "resolver.slot.cell",
            location=location.name,
            hall_name=hall.name,
            time_slot=slot.value,
            date=day.iso,
            range=range_expression,
            header_offset=header_offset,
            row_index=row_index,
            rows_received=len(batch.values),
            raw_value=raw_value,
        )

        status = interpret(
            raw_value,
            diagnostics=diagnostics,
            location=location.name,
            hall_name=hall.name,
            time_slot=slot,
        )
        LOGGER.debug(
            "resolver.slot.status",
            location=location.name,
            hall_name=hall.name,
            time_slot=slot.value,
            raw_value=raw_value,
            status=status.value,
        )
        return AvailabilityRecord(
            date=day.iso,
            location=location.name,
            hall_name=hall.name,
            time_slot=slot,
            status=status,
        )
