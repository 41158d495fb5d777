"""Booking executor — submits non-dining bookings (simulated)."""

import logging
import random
from typing import Protocol

from pickforme.schemas.booking import BookingDetailsBase
from pickforme.schemas.venue import Venue
from pickforme.services.booking_utils import generate_booking_id
from pickforme.services.error_classifier import ConditionError
from pickforme.services.providers import Reservation
from pickforme.services.rules import CONFIRMATION_PREFIXES

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_CONDITIONS = ("fully_booked", "payment_failed", "system_error")


class BookingRejected(ConditionError):
    """The executor turned the booking down (sold out, payment declined, ...)."""


class BookingExecutor(Protocol):
    async def submit(self, category: str, venue: Venue, details: BookingDetailsBase) -> Reservation: ...


class SimulatedBookingExecutor:
    """Confirms everything unless `failure_rate` says otherwise.

    A rejection raises BookingRejected with one of `conditions`.
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
        conditions: tuple[str, ...] = DEFAULT_FAILURE_CONDITIONS,
    ):
        self.failure_rate = failure_rate
        self.rng = rng or random.Random()
        self.conditions = conditions

    async def submit(self, category: str, venue: Venue, details: BookingDetailsBase) -> Reservation:
        if self.failure_rate > 0 and self.rng.random() < self.failure_rate:
            condition = self.rng.choice(self.conditions)
            logger.info(f"Simulated {category} booking at {venue.id} rejected: {condition}")
            raise BookingRejected(condition)

        booking_id = generate_booking_id(CONFIRMATION_PREFIXES.get(category, "BOOK"))
        return Reservation(confirmation_id=booking_id, status="confirmed")
