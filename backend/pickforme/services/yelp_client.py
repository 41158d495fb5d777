"""Yelp Fusion API client — venue search adapter with mock fallback."""

import asyncio
import logging
from datetime import date, time

import httpx

from pickforme.config import Settings, settings as default_settings
from pickforme.schemas.booking import UserContact
from pickforme.schemas.venue import Coordinates, Venue
from pickforme.services.booking_utils import generate_booking_id, hhmm
from pickforme.services.mock_venues import MockVenueInventory
from pickforme.services.providers import Reservation
from pickforme.services.rules import CONFIRMATION_PREFIXES

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.344
RETRYABLE_STATUS = {429, 500, 502, 503, 504}

# Slots the reservation simulation offers every evening
RESERVATION_TIMES = ["18:00", "18:30", "19:00", "19:30", "20:00"]


class YelpClient:
    """Adapter for the Yelp Fusion business endpoints.

    Without an API key every call is answered from the mock inventory.
    Reservations are simulated in both modes.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
        inventory: MockVenueInventory | None = None,
    ):
        cfg = config or default_settings
        self.api_key = cfg.yelp_api_key if api_key is None else api_key
        self.base_url = base_url or cfg.yelp_base_url
        self.timeout = timeout or cfg.yelp_timeout_seconds
        self.max_retries = cfg.yelp_max_retries if max_retries is None else max_retries
        self.search_limit = cfg.yelp_search_limit
        self.backoff_seconds = backoff_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._use_mock = not self.api_key
        self.inventory = inventory or MockVenueInventory()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: dict | None = None) -> httpx.Response:
        """GET with exponential backoff on 429/5xx and transport errors."""
        client = await self._get_client()
        attempt = 0
        while True:
            try:
                resp = await client.get(path, params=params)
                if resp.status_code in RETRYABLE_STATUS and attempt < self.max_retries:
                    raise httpx.HTTPStatusError(
                        f"Retryable status {resp.status_code}", request=resp.request, response=resp
                    )
                resp.raise_for_status()
                return resp
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                retryable = isinstance(e, httpx.RequestError) or e.response.status_code in RETRYABLE_STATUS
                if not retryable or attempt >= self.max_retries:
                    raise
                delay = self.backoff_seconds * (2 ** attempt)
                attempt += 1
                logger.warning(f"Yelp {path} failed ({e}), retry {attempt}/{self.max_retries} in {delay:.1f}s")
                await asyncio.sleep(delay)

    # ─── Venue search ───

    async def search_venues(
        self,
        location: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        term: str | None = None,
        categories: str | None = None,
        price: str | None = None,
        limit: int | None = None,
    ) -> list[Venue]:
        """Search businesses by city name or coordinates."""
        limit = min(limit or self.search_limit, 50)
        if self._use_mock:
            return self.inventory.search(location, term, categories, price, limit)

        params: dict = {"limit": limit, "sort_by": "best_match"}
        if latitude is not None and longitude is not None:
            params["latitude"] = latitude
            params["longitude"] = longitude
        else:
            params["location"] = location or "San Francisco"
        if term:
            params["term"] = term
        if categories:
            params["categories"] = categories
        if price:
            params["price"] = price

        try:
            resp = await self._request("/businesses/search", params=params)
            data = resp.json()
            return [self._map_business(b) for b in data.get("businesses", [])]
        except Exception as e:
            logger.error(f"Yelp search failed, falling back to mock: {e}")
            return self.inventory.search(location, term, categories, price, limit)

    async def get_venue(self, venue_id: str) -> Venue | None:
        """Fetch one business; None when it does not exist."""
        if self._use_mock or venue_id.startswith("mock-"):
            return self.inventory.get(venue_id)

        try:
            resp = await self._request(f"/businesses/{venue_id}")
            return self._map_business(resp.json())
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"Yelp business lookup failed, falling back to mock: {e}")
            return self.inventory.get(venue_id)
        except Exception as e:
            logger.error(f"Yelp business lookup failed, falling back to mock: {e}")
            return self.inventory.get(venue_id)

    @staticmethod
    def _map_business(b: dict) -> Venue:
        coords = b.get("coordinates") or {}
        location = b.get("location") or {}
        distance_m = b.get("distance")
        has_coords = coords.get("latitude") is not None and coords.get("longitude") is not None
        return Venue(
            id=b["id"],
            name=b.get("name", "Unknown Venue"),
            rating=b.get("rating", 0.0),
            review_count=b.get("review_count", 0),
            price=b.get("price"),
            categories=b.get("categories", []),
            distance=round(distance_m / METERS_PER_MILE, 2) if distance_m is not None else None,
            coordinates=Coordinates(**coords) if has_coords else None,
            address=", ".join(location.get("display_address", [])) or None,
            transactions=b.get("transactions", []),
            phone=b.get("phone") or "",
            display_phone=b.get("display_phone") or "",
            url=b.get("url") or "",
            is_closed=b.get("is_closed", False),
        )

    # ─── Reservations (simulated) ───

    async def check_reservation_availability(
        self, venue_id: str, on: date, at: time, party_size: int
    ) -> list[str]:
        logger.debug(f"Reservation availability for {venue_id} on {on} at {hhmm(at)} ({party_size} people)")
        return list(RESERVATION_TIMES)

    async def make_reservation(
        self, venue_id: str, on: date, at: time, party_size: int, contact: UserContact
    ) -> Reservation:
        confirmation_id = generate_booking_id(CONFIRMATION_PREFIXES["dining"])
        logger.info(f"Reservation {confirmation_id} at {venue_id} on {on} {hhmm(at)} for {party_size}")
        return Reservation(confirmation_id=confirmation_id, status="confirmed")
