"""Booking helpers — alternative slots, confirmation copy and display formatting."""

import re
import secrets
import time as time_module
from datetime import date, datetime, time, timedelta

from pickforme.schemas.booking import (
    AccommodationDetails,
    AttractionDetails,
    BookingDetailsBase,
    DiningDetails,
    EntertainmentDetails,
    TransportationDetails,
)
from pickforme.services.rules import DiningHours


def hhmm(t: time) -> str:
    return t.strftime("%H:%M")


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def offset_dates(start: date, count: int = 3) -> list[str]:
    """Successive +1 day alternatives."""
    return [(start + timedelta(days=i)).isoformat() for i in range(1, count + 1)]


def offset_times(start: time, count: int = 3) -> list[str]:
    """Successive +1 hour alternatives, wrapping past midnight."""
    return [f"{(start.hour + i) % 24:02d}:{start.minute:02d}" for i in range(1, count + 1)]


def dining_alternative_times(requested: time, hours: DiningHours, count: int = 5) -> list[str]:
    """Times around the requested one, in fixed steps, inside dining hours."""
    first = parse_hhmm(hours.first_seating)
    last = parse_hhmm(hours.last_seating)
    base = requested.hour * 60 + requested.minute

    slots = []
    for offset in range(-hours.window_minutes, hours.window_minutes + 1, hours.step_minutes):
        if offset == 0:
            continue
        minutes = (base + offset) % (24 * 60)
        candidate = time(minutes // 60, minutes % 60)
        if first <= candidate <= last:
            slots.append(hhmm(candidate))
    return sorted(slots)[:count]


def mask_phone(phone: str | None) -> str | None:
    """Hide all but the last four digits for display."""
    if not phone:
        return phone
    digits = re.sub(r"\D", "", phone)
    if len(digits) <= 4:
        return phone
    return f"***-***-{digits[-4:]}"


def format_booking_date(d: date) -> str:
    return f"{d.strftime('%A, %B')} {d.day}, {d.year}"


def format_booking_time(t: time) -> str:
    hour = t.hour % 12 or 12
    return f"{hour}:{t.minute:02d} {'AM' if t.hour < 12 else 'PM'}"


def _people(n: int) -> str:
    return f"{n} {'person' if n == 1 else 'people'}"


def confirmation_message(category: str, venue_name: str, details: BookingDetailsBase) -> str:
    if isinstance(details, DiningDetails):
        return (
            f"Your reservation at {venue_name} has been confirmed for "
            f"{format_booking_date(details.date)} at {format_booking_time(details.preferred_time)} "
            f"for {_people(details.party_size)}."
        )
    if isinstance(details, AccommodationDetails):
        rooms = f"{details.number_of_rooms} room{'s' if details.number_of_rooms != 1 else ''}"
        return (
            f"Your stay at {venue_name} is confirmed: {rooms} from "
            f"{format_booking_date(details.check_in_date)} to "
            f"{format_booking_date(details.check_out_date)} "
            f"({details.nights} night{'s' if details.nights != 1 else ''})."
        )
    if isinstance(details, (AttractionDetails, EntertainmentDetails)):
        count = details.ticket_count
        return (
            f"{count} ticket{'s' if count != 1 else ''} for {venue_name} confirmed for "
            f"{format_booking_date(details.date)} at {format_booking_time(details.slot_time)}."
        )
    if isinstance(details, TransportationDetails):
        mode = (details.transportation_type or "transportation").replace("_", " ")
        return (
            f"Your {mode} booking with {venue_name} is confirmed for "
            f"{format_booking_date(details.date)}, departing {format_booking_time(details.departure_time)}."
        )
    return f"Your {category} booking at {venue_name} is confirmed."


def next_steps(category: str, details: BookingDetailsBase) -> list[str]:
    steps = ["A confirmation email has been sent to your email address"]
    if category == "dining":
        steps += [
            "Please arrive 10-15 minutes early for your reservation",
            "Contact the restaurant if you need to make changes or cancel",
        ]
    elif category == "accommodation":
        steps += [
            "Bring a valid ID for check-in",
            "Review the cancellation policy before your stay",
        ]
    elif category in ("attraction", "entertainment"):
        steps += [
            "Show your confirmation at the entrance",
            "Arrive early to allow time for entry",
        ]
    elif category == "transportation":
        steps += ["Arrive early for boarding or pick-up"]

    if details.special_requests:
        steps.append(f'Your special request: "{details.special_requests}" has been noted')
    return steps


def generate_booking_id(prefix: str) -> str:
    return f"{prefix}_{int(time_module.time() * 1000)}_{secrets.token_hex(3)}".upper()
