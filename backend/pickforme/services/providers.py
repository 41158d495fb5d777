"""Collaborator contracts — venue search and restaurant reservations."""

from dataclasses import dataclass
from datetime import date, time
from typing import Literal, Protocol

from pickforme.schemas.booking import UserContact
from pickforme.schemas.venue import Venue


@dataclass(frozen=True)
class Reservation:
    confirmation_id: str
    status: Literal["confirmed", "pending"] = "confirmed"


class VenueProvider(Protocol):
    async def search_venues(
        self,
        location: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        term: str | None = None,
        categories: str | None = None,
        price: str | None = None,
        limit: int | None = None,
    ) -> list[Venue]: ...

    async def get_venue(self, venue_id: str) -> Venue | None: ...


class ReservationProvider(Protocol):
    async def check_reservation_availability(
        self, venue_id: str, on: date, at: time, party_size: int
    ) -> list[str]:
        """Return the HH:MM times that can be booked on that date."""
        ...

    async def make_reservation(
        self, venue_id: str, on: date, at: time, party_size: int, contact: UserContact
    ) -> Reservation: ...
