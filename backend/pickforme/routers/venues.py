"""Venues router — provider search passthrough."""

import logging

from fastapi import APIRouter, Depends, Query

from pickforme.dependencies import get_venue_provider
from pickforme.schemas.venue import Venue
from pickforme.services.providers import VenueProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search", response_model=list[Venue])
async def search_venues(
    location: str | None = Query(None),
    latitude: float | None = Query(None, ge=-90, le=90),
    longitude: float | None = Query(None, ge=-180, le=180),
    term: str | None = Query(None),
    categories: str | None = Query(None, description="Comma-separated category aliases"),
    price: str | None = Query(None, description="Comma-separated tiers, e.g. 1,2"),
    limit: int | None = Query(None, ge=1, le=50),
    provider: VenueProvider = Depends(get_venue_provider),
):
    """Search venues near a city or coordinates."""
    venues = await provider.search_venues(
        location=location,
        latitude=latitude,
        longitude=longitude,
        term=term,
        categories=categories,
        price=price,
        limit=limit,
    )
    logger.debug(f"Venue search '{term or categories or ''}' in {location}: {len(venues)} results")
    return venues
