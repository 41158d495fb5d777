"""
Tests for pickforme.services.booking_utils and the booking schemas.
"""
from datetime import date, time

import pytest
from pydantic import ValidationError

from pickforme.schemas.booking import (
    AccommodationDetails,
    AttractionDetails,
    AvailabilityQuery,
    DiningDetails,
    booking_request_adapter,
)
from pickforme.schemas.venue import UserPreferences, Venue
from pickforme.services.booking_utils import (
    confirmation_message,
    dining_alternative_times,
    format_booking_date,
    format_booking_time,
    generate_booking_id,
    mask_phone,
    next_steps,
    offset_dates,
    offset_times,
)
from pickforme.services.rules import DiningHours


class TestAlternatives:
    """Alternative slot generation."""

    def test_offset_dates_cross_month(self):
        assert offset_dates(date(2030, 1, 30)) == ["2030-01-31", "2030-02-01", "2030-02-02"]

    def test_offset_times_wrap_midnight(self):
        assert offset_times(time(22, 15)) == ["23:15", "00:15", "01:15"]

    def test_dining_times_stay_inside_hours(self):
        assert dining_alternative_times(time(11, 30), DiningHours()) == [
            "11:00", "12:00", "12:30", "13:00",
        ]

    def test_dining_times_late_evening(self):
        assert dining_alternative_times(time(22, 30), DiningHours()) == ["21:00", "21:30", "22:00"]

    def test_dining_times_respect_count(self):
        assert len(dining_alternative_times(time(19, 0), DiningHours(), count=2)) == 2


class TestFormatting:
    """Display helpers."""

    @pytest.mark.parametrize("phone,masked", [
        ("+14155550123", "***-***-0123"),
        ("(415) 555-0123", "***-***-0123"),
        ("123", "123"),
        ("", ""),
        (None, None),
    ])
    def test_mask_phone(self, phone, masked):
        assert mask_phone(phone) == masked

    def test_format_date(self):
        assert format_booking_date(date(2030, 6, 14)) == "Friday, June 14, 2030"

    @pytest.mark.parametrize("t,text", [(time(0, 5), "12:05 AM"), (time(12, 0), "12:00 PM"), (time(19, 30), "7:30 PM")])
    def test_format_time(self, t, text):
        assert format_booking_time(t) == text

    def test_booking_id_prefix_and_uniqueness(self):
        first, second = generate_booking_id("hotel"), generate_booking_id("hotel")
        assert first.startswith("HOTEL_")
        assert first != second


class TestConfirmationCopy:
    """Confirmation message and next steps."""

    def test_dining_message(self):
        details = DiningDetails(date=date(2030, 6, 14), party_size=1, preferred_time=time(19, 30))
        message = confirmation_message("dining", "Gary Danko", details)
        assert message == (
            "Your reservation at Gary Danko has been confirmed for "
            "Friday, June 14, 2030 at 7:30 PM for 1 person."
        )

    def test_special_request_noted(self):
        details = DiningDetails(
            date=date(2030, 6, 14), party_size=2, preferred_time=time(19, 0), special_requests="Window seat"
        )
        steps = next_steps("dining", details)
        assert steps[0].startswith("A confirmation email")
        assert steps[-1] == 'Your special request: "Window seat" has been noted'


class TestSchemas:
    """Validation rules on the request models."""

    def test_price_symbols(self):
        assert Venue(id="v", name="V", price="$$$").price == 3
        assert Venue(id="v", name="V", price="").price is None
        assert UserPreferences(price_range="$").price_range == 1

    def test_bad_price(self):
        with pytest.raises(ValidationError):
            Venue(id="v", name="V", price="cheap")

    def test_string_categories(self):
        venue = Venue(id="v", name="V", categories=["Fast Food"])
        assert venue.categories[0].alias == "fastfood"
        assert venue.categories[0].title == "Fast Food"

    def test_venue_is_frozen(self):
        venue = Venue(id="v", name="V")
        with pytest.raises(ValidationError):
            venue.rating = 5.0

    def test_stay_length(self):
        details = AccommodationDetails(
            date=date(2030, 6, 14), party_size=2,
            check_in_date=date(2030, 6, 14), check_out_date=date(2030, 6, 17),
        )
        assert details.nights == 3
        assert details.number_of_rooms == 1

    def test_ticket_count_defaults_to_party(self):
        details = AttractionDetails(date=date(2030, 6, 14), party_size=4, visit_time=time(10, 0))
        assert details.ticket_count == 4
        assert details.ticket_type == "general_admission"

    def test_discriminator_selects_variant(self):
        request = booking_request_adapter.validate_python({
            "category": "attraction",
            "venue": {"id": "v", "name": "V"},
            "user_contact": {"name": "Ada", "email": "ada@example.com"},
            "details": {"date": "2030-06-14", "party_size": 2, "visit_time": "10:00"},
        })
        assert isinstance(request.details, AttractionDetails)

    def test_availability_query_from_details(self):
        details = DiningDetails(date=date(2030, 6, 14), party_size=3, preferred_time=time(18, 0))
        query = AvailabilityQuery.from_details(details)
        assert (query.date, query.time, query.party_size) == (date(2030, 6, 14), time(18, 0), 3)
