"""Collects availability for every configured hall on a given date."""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional

import structlog

from .diagnostics import Diagnostics
from .models import AvailabilityRecord, LocationConfig, sort_records
from .resolver import SLOTS, HallResolver, RangeSource, fallback_record
from .sheet_calendar import DayInput, SheetDate, parse_day

LOGGER = structlog.get_logger(__name__)


def location_fallback(location: LocationConfig, day: SheetDate) -> List[AvailabilityRecord]:
    """Booked records for every hall and slot under ``location``."""
    return [fallback_record(location, hall, day, slot) for hall in location.halls for slot in SLOTS]


class AvailabilityAggregator:
    """Resolves all (location, hall) pairs concurrently and returns a sorted grid."""

    def __init__(
        self,
        fetcher: RangeSource,
        locations: Iterable[LocationConfig],
        *,
        deadline_seconds: Optional[float] = None,
    ):
        self._resolver = HallResolver(fetcher)
        self._locations = tuple(locations)
        self._deadline_seconds = deadline_seconds

    @property
    def locations(self) -> tuple[LocationConfig, ...]:
        return self._locations

    async def get_availability(
        self,
        day: DayInput,
        diagnostics: Optional[Diagnostics] = None,
    ) -> List[AvailabilityRecord]:
        """
        Return two records per configured hall, sorted by location, hall and slot.

        Never raises. Dates outside their month (or unparseable input) return an
        empty list; network failures degrade to Booked records.
        """
        diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        target = parse_day(day)
        if target is None or not target.is_valid_day:
            LOGGER.warning("aggregator.invalid_date", date=str(day))
            return []

        LOGGER.info(
            "aggregator.start",
            date=target.iso,
            tab=target.tab_name,
            days_in_month=target.days_in_month,
            locations=[location.name for location in self._locations],
        )

        tasks = {
            asyncio.ensure_future(self._process_location(location, target, diagnostics)): location
            for location in self._locations
        }
        if not tasks:
            return []

        _, pending = await asyncio.wait(list(tasks), timeout=self._deadline_seconds)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        results: List[AvailabilityRecord] = []
        for task, location in tasks.items():
            if task in pending:
                LOGGER.error(
                    "aggregator.location.deadline_exceeded",
                    location=location.name,
                    deadline_seconds=self._deadline_seconds,
                )
                results.extend(self._fallback_location(location, target, diagnostics, "deadline exceeded"))
                continue
            error = task.exception()
            if error is not None:
                LOGGER.error(
                    "aggregator.location.failed",
                    location=location.name,
                    error=repr(error),
                )
                results.extend(self._fallback_location(location, target, diagnostics, str(error)))
                continue
            results.extend(task.result())

        ordered = sort_records(results)
        LOGGER.info(
            "aggregator.complete",
            date=target.iso,
            records=len(ordered),
            degraded=diagnostics.degraded,
        )
        return ordered

    async def _process_location(
        self,
        location: LocationConfig,
        day: SheetDate,
        diagnostics: Diagnostics,
    ) -> List[AvailabilityRecord]:
        outcomes = await asyncio.gather(
            *(self._resolver.resolve(location, hall, day, diagnostics) for hall in location.halls),
            return_exceptions=True,
        )
        records: List[AvailabilityRecord] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
            records.extend(outcome)
        return records

    @staticmethod
    def _fallback_location(
        location: LocationConfig,
        day: SheetDate,
        diagnostics: Diagnostics,
        reason: str,
    ) -> List[AvailabilityRecord]:
        diagnostics.location_errors.append(f"{location.name}: {reason}")
        for hall in location.halls:
            for slot in SLOTS:
                diagnostics.record_fallback(location.name, hall.name, slot, reason=reason)
        return location_fallback(location, day)
