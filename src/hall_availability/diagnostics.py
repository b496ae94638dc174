"""Per-call diagnostics collected alongside availability results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .models import TimeSlot


@dataclass
class SlotFallback:
    """A slot that was reported Booked because its data could not be read."""

    location: str
    hall_name: str
    time_slot: TimeSlot
    reason: str


@dataclass
class DataWarning:
    """A cell whose text did not match any known status word."""

    raw_value: str
    location: Optional[str] = None
    hall_name: Optional[str] = None
    time_slot: Optional[TimeSlot] = None


@dataclass
class Diagnostics:
    """
    Observability channel for one availability lookup.

    Fallback records look identical to genuinely booked slots in the returned
    data; ``degraded`` is how a caller tells the two apart.
    """

    fetch_failures: List[str] = field(default_factory=list)
    fallbacks: List[SlotFallback] = field(default_factory=list)
    data_warnings: List[DataWarning] = field(default_factory=list)
    location_errors: List[str] = field(default_factory=list)
    offline: bool = False

    @property
    def degraded(self) -> bool:
        return bool(self.fallbacks)

    def record_fallback(self, location: str, hall_name: str, time_slot: TimeSlot, reason: str) -> None:
        self.fallbacks.append(SlotFallback(location, hall_name, time_slot, reason))

    def as_dict(self) -> dict[str, Any]:
        return {
            "degraded": self.degraded,
            "offline": self.offline,
            "fetch_failures": list(self.fetch_failures),
            "location_errors": list(self.location_errors),
            "fallbacks": [
                {
                    "location": item.location,
                    "hallName": item.hall_name,
                    "timeSlot": item.time_slot.value,
                    "reason": item.reason,
                }
                for item in self.fallbacks
            ],
            "data_warnings": [
                {
                    "rawValue": item.raw_value,
                    "location": item.location,
                    "hallName": item.hall_name,
                    "timeSlot": item.time_slot.value if item.time_slot else None,
                }
                for item in self.data_warnings
            ],
        }
