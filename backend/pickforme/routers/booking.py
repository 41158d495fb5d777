"""Booking router — single and batch bookings plus availability lookups."""

import logging
import datetime as dt
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from pickforme.dependencies import get_orchestrator, get_venue_provider
from pickforme.schemas.booking import (
    AvailabilityQuery,
    AvailabilityResult,
    BatchBookingRequest,
    BookingResult,
    ErrorCode,
    MultiBookingResult,
)
from pickforme.services.booking_orchestrator import BookingOrchestrator
from pickforme.services.providers import VenueProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/book", response_model=BookingResult)
async def book(
    body: dict[str, Any] = Body(...),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
):
    """Book one venue. Business failures are 200 with success=false."""
    result = await orchestrator.coordinate_booking(body)
    if result.error is not None and result.error.code == ErrorCode.ORCHESTRATION_ERROR:
        return JSONResponse(status_code=500, content=result.model_dump(mode="json"))
    return result


@router.post("/book/batch", response_model=MultiBookingResult)
async def book_batch(
    req: BatchBookingRequest,
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
):
    """Book several venues in order; one failure does not stop the rest."""
    return await orchestrator.coordinate_multi_service_booking(req.requests)


@router.get("/availability", response_model=AvailabilityResult)
async def availability(
    venue_id: str = Query(..., min_length=1),
    category: str = Query(...),
    date: dt.date = Query(...),
    time: dt.time | None = Query(None),
    party_size: int = Query(2, ge=1),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
    provider: VenueProvider = Depends(get_venue_provider),
):
    """Check whether a slot is open at a venue, with alternatives when it is not."""
    venue = await provider.get_venue(venue_id)
    if venue is None:
        raise HTTPException(
            status_code=404,
            detail={"code": ErrorCode.BUSINESS_NOT_FOUND.value, "message": f"Venue {venue_id} not found"},
        )
    query = AvailabilityQuery(date=date, time=time, party_size=party_size)
    return await orchestrator.check_availability(venue, category, query)
