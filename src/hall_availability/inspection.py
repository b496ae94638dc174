"""Offset inspection: shows the first rows of each hall's morning range."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import structlog

from .errors import FetchError
from .fetcher import build_range_expression
from .models import LocationConfig
from .resolver import RangeSource
from .sheet_calendar import SheetDate

LOGGER = structlog.get_logger(__name__)

PREVIEW_ROWS = 5


@dataclass
class OffsetPreview:
    """Leading first-column values of a hall's morning range."""

    location: str
    hall_name: str
    range_expression: str
    rows_received: int = 0
    leading_values: List[Optional[str]] = field(default_factory=list)
    error: Optional[str] = None

    def describe(self) -> str:
        if self.error:
            return f"{self.location} - {self.hall_name}: {self.error}"
        values = ", ".join(repr(value) for value in self.leading_values) or "no rows"
        return f"{self.location} - {self.hall_name} [{self.range_expression}] {self.rows_received} rows: {values}"


async def inspect_offsets(
    fetcher: RangeSource,
    locations: Iterable[LocationConfig],
    day: SheetDate,
) -> List[OffsetPreview]:
    """
    Fetch every hall's morning range for ``day``'s month.

    A header row shows up as a non-status word at index 0; the hall's
    ``morning_header_offset`` should then be the number of such rows.
    """
    previews: List[OffsetPreview] = []
    for location in locations:
        for hall in location.halls:
            expression = build_range_expression(day.tab_name, hall.morning_range)
            preview = OffsetPreview(location=location.name, hall_name=hall.name, range_expression=expression)
            try:
                batch = await fetcher.fetch_range(location.sheet_id, expression)
            except FetchError as exc:
                LOGGER.warning("inspection.fetch_failed", location=location.name, hall_name=hall.name, error=str(exc))
                preview.error = str(exc)
            else:
                preview.rows_received = len(batch.values)
                preview.leading_values = [batch.first_column(index) for index in range(min(PREVIEW_ROWS, len(batch.values)))]
            previews.append(preview)
    return previews
