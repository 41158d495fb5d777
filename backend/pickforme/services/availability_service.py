"""Availability checks — reservation lookups for dining, simulated slots for the rest."""

import hashlib
import logging
import random
from typing import Protocol

from pickforme.schemas.booking import AvailabilityQuery, AvailabilityResult
from pickforme.schemas.venue import Venue
from pickforme.services.booking_utils import hhmm, offset_dates, offset_times, parse_hhmm
from pickforme.services.providers import ReservationProvider
from pickforme.services.rules import BookingRules, booking_rules

logger = logging.getLogger(__name__)

# Categories whose alternatives move by day rather than by hour
DAY_STEP_CATEGORIES = {"accommodation", "entertainment"}


class AvailabilityChecker(Protocol):
    async def check(self, venue: Venue, category: str, query: AvailabilityQuery) -> AvailabilityResult: ...


class SimulatedAvailabilityChecker:
    """Dining asks the reservation provider; other categories roll a seeded die
    against the per-category availability rate, so the same venue, date and
    time always get the same answer.
    """

    def __init__(self, reservations: ReservationProvider, rules: BookingRules | None = None):
        self.reservations = reservations
        self.rules = rules or booking_rules

    async def check(self, venue: Venue, category: str, query: AvailabilityQuery) -> AvailabilityResult:
        if category == "dining":
            return await self._check_dining(venue, query)
        return self._simulate(venue, category, query)

    async def _check_dining(self, venue: Venue, query: AvailabilityQuery) -> AvailabilityResult:
        requested = query.time or parse_hhmm(self.rules.dining_hours.default_time)
        offered = await self.reservations.check_reservation_availability(
            venue.id, query.date, requested, query.party_size
        )
        if hhmm(requested) in offered:
            return AvailabilityResult(success=True, available=True)
        return AvailabilityResult(
            success=True,
            available=False,
            alternatives=offered[: self.rules.max_time_alternatives],
        )

    def _simulate(self, venue: Venue, category: str, query: AvailabilityQuery) -> AvailabilityResult:
        slot = hhmm(query.time) if query.time else ""
        seed_str = f"{venue.id}{category}{query.date.isoformat()}{slot}"
        seed = int(hashlib.md5(seed_str.encode()).hexdigest()[:8], 16)
        rng = random.Random(seed)

        rate = self.rules.availability.get(category)
        available = rng.random() < rate
        logger.debug(f"Simulated {category} availability for {venue.id} on {query.date}: {available}")
        if available:
            return AvailabilityResult(success=True, available=True)

        count = self.rules.alternative_count
        if category in DAY_STEP_CATEGORIES or query.time is None:
            alternatives = offset_dates(query.date, count)
        else:
            alternatives = offset_times(query.time, count)
        return AvailabilityResult(success=True, available=False, alternatives=alternatives)
