"""FastAPI application exposing availability to presentation clients."""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, List

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

from .models import AvailabilityRecord
from .organizer import organize
from .service import AvailabilityService, build_service
from .sheet_calendar import parse_day

LOGGER = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    # Builds the service at startup so a missing API key is logged before the first request.
    get_service()
    yield


app = FastAPI(title="Hall Availability", version="0.1.0", lifespan=lifespan)


class AvailabilityResponse(BaseModel):
    """Response schema for the /availability endpoints."""

    date: str
    source: str
    degraded: bool
    records: List[AvailabilityRecord]
    diagnostics: Dict[str, Any]


@lru_cache
def get_service() -> AvailabilityService:
    return build_service()


async def _lookup(date: str, service: AvailabilityService, *, organized: bool) -> AvailabilityResponse:
    target = parse_day(date)
    if target is None:
        raise HTTPException(status_code=422, detail=f"Invalid date: {date}")

    LOGGER.info("api.availability.request", date=target.iso, organized=organized)
    result = await service.get_availability(target.value)
    records = organize(result.records, service.locations) if organized else result.records
    return AvailabilityResponse(
        date=target.iso,
        source=result.source,
        degraded=result.degraded,
        records=records,
        diagnostics=result.diagnostics.as_dict(),
    )


@app.get("/availability", response_model=AvailabilityResponse, response_model_by_alias=True)
async def availability(
    date: str = Query(..., description="ISO date (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_service),
) -> AvailabilityResponse:
    """Sorted availability records for every configured hall."""
    return await _lookup(date, service, organized=False)


@app.get("/availability/organized", response_model=AvailabilityResponse, response_model_by_alias=True)
async def availability_organized(
    date: str = Query(..., description="ISO date (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_service),
) -> AvailabilityResponse:
    """Records grouped per location with a header row before each venue."""
    return await _lookup(date, service, organized=True)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
