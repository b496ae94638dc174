import asyncio
from datetime import date

import pytest

from hall_availability.diagnostics import Diagnostics
from hall_availability.errors import FetchError
from hall_availability.models import HallRangeConfig, LocationConfig, RawCellBatch, Status, TimeSlot
from hall_availability.resolver import HallResolver
from hall_availability.sheet_calendar import SheetDate
from tests.helpers import column

LOCATION = LocationConfig(name="GMK Banquets Tathawade", sheet_id="sheet-1", halls=())
ASTER = HallRangeConfig(name="Aster", morning_range="B4:B33", evening_range="C4:C33")


class StubFetcher:
    def __init__(self, columns, failing=()):
        self.columns = columns
        self.failing = set(failing)
        self.calls = []

    async def fetch_range(self, sheet_id, range_expression):
        self.calls.append((sheet_id, range_expression))
        await asyncio.sleep(0)
        cell_range = range_expression.split("!", 1)[1]
        if cell_range in self.failing:
            raise FetchError(f"{cell_range} unreachable", attempts=4)
        return RawCellBatch(values=self.columns.get(cell_range, []))


@pytest.mark.asyncio
async def test_vacant_cell_resolves_to_available_record():
    fetcher = StubFetcher({"B4:B33": column(d18="VAC"), "C4:C33": column()})

    morning, evening = await HallResolver(fetcher).resolve(LOCATION, ASTER, SheetDate(date(2025, 5, 18)))

    assert morning.model_dump(by_alias=True) == {
        "date": "2025-05-18",
        "location": "GMK BANQUETS TATHAWADE",
        "hallName": "Aster",
        "timeSlot": TimeSlot.MORNING,
        "status": Status.AVAILABLE,
    }
    assert evening.time_slot is TimeSlot.EVENING
    assert evening.status is Status.BOOKED
    assert sorted(call[1] for call in fetcher.calls) == ["'MAY 2025'!B4:B33", "'MAY 2025'!C4:C33"]


@pytest.mark.asyncio
async def test_header_offset_shifts_row_index():
    hall = HallRangeConfig(
        name="Agastya",
        morning_range="L3:L33",
        evening_range="M4:M33",
        morning_header_offset=1,
    )
    morning_rows = column()
    morning_rows[21] = ["vac"]  # day 21 with one header row
    evening_rows = column(d21="vac")
    fetcher = StubFetcher({"L3:L33": morning_rows, "M4:M33": evening_rows})

    morning, evening = await HallResolver(fetcher).resolve(LOCATION, hall, SheetDate(date(2025, 5, 21)))

    assert morning.status is Status.AVAILABLE
    assert evening.status is Status.AVAILABLE


@pytest.mark.asyncio
async def test_out_of_bounds_row_is_booked():
    fetcher = StubFetcher({"B4:B33": [["vac"]] * 10, "C4:C33": []})

    morning, evening = await HallResolver(fetcher).resolve(LOCATION, ASTER, SheetDate(date(2025, 5, 31)))

    assert morning.status is Status.BOOKED
    assert evening.status is Status.BOOKED


@pytest.mark.asyncio
async def test_empty_row_reads_as_missing_cell():
    rows = column(d5="vac")
    rows[4] = []
    fetcher = StubFetcher({"B4:B33": rows, "C4:C33": column(d5="")})

    morning, evening = await HallResolver(fetcher).resolve(LOCATION, ASTER, SheetDate(date(2025, 5, 5)))

    assert morning.status is Status.BOOKED
    assert evening.status is Status.AVAILABLE


@pytest.mark.asyncio
async def test_failed_slot_falls_back_and_resolved_slot_is_kept():
    fetcher = StubFetcher({"B4:B33": column(d18="vac")}, failing={"C4:C33"})
    diagnostics = Diagnostics()

    morning, evening = await HallResolver(fetcher).resolve(
        LOCATION, ASTER, SheetDate(date(2025, 5, 18)), diagnostics
    )

    assert morning.status is Status.AVAILABLE
    assert evening.status is Status.BOOKED
    assert diagnostics.degraded
    assert [(item.hall_name, item.time_slot) for item in diagnostics.fallbacks] == [("Aster", TimeSlot.EVENING)]
    assert len(diagnostics.fetch_failures) == 1


@pytest.mark.asyncio
async def test_both_slots_fall_back_when_hall_is_unreachable():
    fetcher = StubFetcher({}, failing={"B4:B33", "C4:C33"})

    first = await HallResolver(fetcher).resolve(LOCATION, ASTER, SheetDate(date(2025, 5, 18)))
    second = await HallResolver(fetcher).resolve(LOCATION, ASTER, SheetDate(date(2025, 5, 18)))

    assert [record.status for record in first] == [Status.BOOKED, Status.BOOKED]
    assert first == second


@pytest.mark.asyncio
async def test_morning_and_evening_are_fetched_concurrently():
    started = []
    both_started = asyncio.Event()

    class BarrierFetcher:
        async def fetch_range(self, sheet_id, range_expression):
            started.append(range_expression)
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            return RawCellBatch(values=column("vac"))

    morning, evening = await HallResolver(BarrierFetcher()).resolve(LOCATION, ASTER, SheetDate(date(2025, 5, 1)))

    assert len(started) == 2
    assert morning.status is Status.AVAILABLE
    assert evening.status is Status.AVAILABLE
