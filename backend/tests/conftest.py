from datetime import date, time, timedelta

import pytest

from pickforme.schemas.venue import Venue
from pickforme.services.availability_service import SimulatedAvailabilityChecker
from pickforme.services.booking_executor import SimulatedBookingExecutor
from pickforme.services.booking_handlers import build_handlers
from pickforme.services.booking_orchestrator import BookingOrchestrator
from pickforme.services.error_classifier import ConditionError
from pickforme.services.providers import Reservation

NEXT_WEEK = date.today() + timedelta(days=7)


def make_venue(**overrides) -> Venue:
    data = {
        "id": "venue-1",
        "name": "Trattoria Roma",
        "rating": 4.5,
        "review_count": 120,
        "price": 2,
        "categories": [{"alias": "italian", "title": "Italian"}],
        "distance": 0.8,
        "transactions": [
            "restaurant_reservation",
            "hotel_reservation",
            "ticket_sales",
            "transportation_booking",
            "event_tickets",
        ],
        "phone": "+14155550123",
        "display_phone": "(415) 555-0123",
        "url": "https://example.com/trattoria-roma",
    }
    data.update(overrides)
    return Venue(**data)


def booking_request(category: str = "dining", venue: Venue | None = None, **details) -> dict:
    defaults = {
        "dining": {"preferred_time": "19:00"},
        "accommodation": {
            "check_in_date": NEXT_WEEK.isoformat(),
            "check_out_date": (NEXT_WEEK + timedelta(days=2)).isoformat(),
        },
        "attraction": {"visit_time": "10:00"},
        "transportation": {"departure_time": "09:00", "transportation_type": "train"},
        "entertainment": {"preferred_time": "20:00"},
    }
    payload = {"date": NEXT_WEEK.isoformat(), "party_size": 2, **defaults.get(category, {})}
    payload.update(details)
    return {
        "category": category,
        "venue": (venue or make_venue()).model_dump(mode="json"),
        "user_contact": {"name": "Ada Lovelace", "email": "ada@example.com", "phone": "+14155550000"},
        "details": payload,
    }


class FakeReservations:
    """In-memory reservation provider that records every call."""

    def __init__(self, offered=None, availability_error=None, reservation_error=None):
        self.offered = ["18:00", "18:30", "19:00", "19:30", "20:00"] if offered is None else offered
        self.availability_error = availability_error
        self.reservation_error = reservation_error
        self.availability_calls: list[tuple] = []
        self.reservation_calls: list[tuple] = []

    async def check_reservation_availability(self, venue_id: str, on: date, at: time, party_size: int):
        self.availability_calls.append((venue_id, on, at, party_size))
        if self.availability_error:
            raise self.availability_error
        return list(self.offered)

    async def make_reservation(self, venue_id, on, at, party_size, contact):
        self.reservation_calls.append((venue_id, on, at, party_size))
        if self.reservation_error:
            raise self.reservation_error
        return Reservation(confirmation_id="RES_TEST_1", status="confirmed")


class FakeExecutor:
    """Executor that rejects with a fixed condition, or confirms."""

    def __init__(self, condition: str | None = None, error: Exception | None = None):
        self.condition = condition
        self.error = error
        self.calls: list[str] = []

    async def submit(self, category, venue, details):
        self.calls.append(category)
        if self.error:
            raise self.error
        if self.condition:
            raise ConditionError(self.condition)
        return Reservation(confirmation_id=f"{category.upper()}_TEST_1", status="confirmed")


def build_test_orchestrator(reservations=None, executor=None, delay: float = 0.0, rules=None) -> BookingOrchestrator:
    reservations = reservations or FakeReservations()
    availability = SimulatedAvailabilityChecker(reservations, rules)
    handlers = build_handlers(reservations, executor or SimulatedBookingExecutor(), availability, rules)
    return BookingOrchestrator(handlers, availability, inter_request_delay=delay)


@pytest.fixture
def reservations():
    return FakeReservations()


@pytest.fixture
def orchestrator(reservations):
    return build_test_orchestrator(reservations)
