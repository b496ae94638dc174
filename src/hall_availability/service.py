"""Composition root: wires settings, fetcher, cache and connectivity probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional

import httpx
import structlog

from .aggregator import AvailabilityAggregator, location_fallback
from .cache import AvailabilityCache, JsonAvailabilityCache, NullCache
from .config import Settings
from .connectivity import AlwaysOnlineProbe, ConnectivityProbe, HttpConnectivityProbe
from .diagnostics import Diagnostics
from .fetcher import RangeFetcher, SleepFn
from .locations import load_locations
from .models import AvailabilityRecord, LocationConfig, sort_records
from .resolver import SLOTS
from .sheet_calendar import DayInput, parse_day

LOGGER = structlog.get_logger(__name__)

ResultSource = Literal["remote", "cache", "fallback", "invalid"]


@dataclass
class AvailabilityResult:
    """Records for one date together with how they were obtained."""

    records: List[AvailabilityRecord]
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    source: ResultSource = "remote"

    @property
    def degraded(self) -> bool:
        return self.diagnostics.degraded


class AvailabilityService:
    """Entry point used by presentation layers."""

    def __init__(
        self,
        settings: Settings,
        locations: Iterable[LocationConfig],
        *,
        cache: Optional[AvailabilityCache] = None,
        probe: Optional[ConnectivityProbe] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
    ):
        self._settings = settings
        self._locations = tuple(locations)
        self._cache = cache or NullCache()
        self._probe = probe or AlwaysOnlineProbe()
        self._transport = transport
        self._sleep = sleep
        settings.check_credentials()

    @property
    def locations(self) -> tuple[LocationConfig, ...]:
        return self._locations

    async def get_availability(self, day: DayInput) -> AvailabilityResult:
        diagnostics = Diagnostics()
        target = parse_day(day)
        if target is None or not target.is_valid_day:
            LOGGER.warning("service.invalid_date", date=str(day))
            return AvailabilityResult(records=[], diagnostics=diagnostics, source="invalid")

        if not await self._probe.is_online():
            diagnostics.offline = True
            cached = self._cache.load(target.iso)
            if cached is not None:
                LOGGER.info("service.offline_cache_served", date=target.iso)
                return AvailabilityResult(records=sort_records(cached), diagnostics=diagnostics, source="cache")
            LOGGER.warning("service.offline_no_cache", date=target.iso)
            records: List[AvailabilityRecord] = []
            for location in self._locations:
                records.extend(location_fallback(location, target))
                for hall in location.halls:
                    for slot in SLOTS:
                        diagnostics.record_fallback(location.name, hall.name, slot, reason="offline")
            return AvailabilityResult(records=sort_records(records), diagnostics=diagnostics, source="fallback")

        async with httpx.AsyncClient(
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        ) as client:
            fetcher = RangeFetcher(self._settings, client, sleep=self._sleep)
            aggregator = AvailabilityAggregator(
                fetcher,
                self._locations,
                deadline_seconds=self._settings.deadline_seconds,
            )
            records = await aggregator.get_availability(target.value, diagnostics)

        if not diagnostics.degraded:
            self._cache.store(target.iso, records)
        return AvailabilityResult(records=records, diagnostics=diagnostics, source="remote")


def build_probe(settings: Settings) -> ConnectivityProbe:
    if settings.connectivity_probe == "http":
        return HttpConnectivityProbe(settings.base_url, timeout_seconds=min(settings.timeout_seconds, 5.0))
    return AlwaysOnlineProbe()


def build_cache(settings: Settings) -> AvailabilityCache:
    if settings.cache_dir is None:
        return NullCache()
    return JsonAvailabilityCache(settings.cache_dir)


def build_service(settings: Optional[Settings] = None) -> AvailabilityService:
    """Assemble the service from environment configuration."""
    settings = settings or Settings()
    return AvailabilityService(
        settings,
        load_locations(settings.locations_file),
        cache=build_cache(settings),
        probe=build_probe(settings),
    )
