"""Write-through JSON cache of availability results, keyed by date."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Protocol

import structlog
from pydantic import TypeAdapter, ValidationError

from .models import AvailabilityRecord

LOGGER = structlog.get_logger(__name__)

CACHE_KEY_PREFIX = "hall-data"

_RECORDS_ADAPTER = TypeAdapter(List[AvailabilityRecord])


class AvailabilityCache(Protocol):
    def load(self, iso_date: str) -> Optional[List[AvailabilityRecord]]: ...

    def store(self, iso_date: str, records: List[AvailabilityRecord]) -> None: ...


class NullCache:
    """Cache used when no cache directory is configured."""

    def load(self, iso_date: str) -> Optional[List[AvailabilityRecord]]:
        return None

    def store(self, iso_date: str, records: List[AvailabilityRecord]) -> None:
        return None


class JsonAvailabilityCache:
    """One JSON file per date. Failures are logged; the cache is never authoritative."""

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    def path_for(self, iso_date: str) -> Path:
        return self._directory / f"{CACHE_KEY_PREFIX}-{iso_date}.json"

    def load(self, iso_date: str) -> Optional[List[AvailabilityRecord]]:
        path = self.path_for(iso_date)
        if not path.exists():
            return None
        try:
            records = _RECORDS_ADAPTER.validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            LOGGER.warning("cache.load_failed", path=str(path), error=str(exc))
            return None
        LOGGER.info("cache.hit", date=iso_date, records=len(records))
        return records

    def store(self, iso_date: str, records: List[AvailabilityRecord]) -> None:
        path = self.path_for(iso_date)
        temp_path = path.with_suffix(".json.tmp")
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            temp_path.replace(path)
        except OSError as exc:
            LOGGER.warning("cache.store_failed", path=str(path), error=str(exc))
            return
        LOGGER.info("cache.stored", date=iso_date, records=len(records))
