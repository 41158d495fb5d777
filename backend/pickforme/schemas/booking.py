import datetime as dt
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from pickforme.schemas.venue import Venue


class ErrorCode(str, Enum):
    """Closed set of booking error codes shared by every component."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BUSINESS_NOT_FOUND = "BUSINESS_NOT_FOUND"
    UNSUPPORTED_CATEGORY = "UNSUPPORTED_CATEGORY"
    NO_ONLINE_BOOKING = "NO_ONLINE_BOOKING"
    TIME_UNAVAILABLE = "TIME_UNAVAILABLE"
    BOOKING_FAILED = "BOOKING_FAILED"
    AVAILABILITY_CHECK_FAILED = "AVAILABILITY_CHECK_FAILED"
    ORCHESTRATION_ERROR = "ORCHESTRATION_ERROR"


TransportationType = Literal["flight", "train", "bus", "car_rental", "taxi"]


class UserContact(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = None

    model_config = {"str_strip_whitespace": True}


# ─── Booking details, one payload per category ───


class BookingDetailsBase(BaseModel):
    date: dt.date
    party_size: int = Field(ge=1)
    special_requests: str | None = None

    @property
    def slot_time(self) -> dt.time | None:
        return None


class DiningDetails(BookingDetailsBase):
    preferred_time: dt.time

    @property
    def slot_time(self) -> dt.time:
        return self.preferred_time


class AccommodationDetails(BookingDetailsBase):
    check_in_date: dt.date
    check_out_date: dt.date
    number_of_rooms: int = Field(default=1, ge=1)
    room_type: str | None = None

    @model_validator(mode="after")
    def check_stay(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days


class AttractionDetails(BookingDetailsBase):
    visit_time: dt.time
    ticket_type: str = "general_admission"
    number_of_tickets: int | None = Field(default=None, ge=1)

    @property
    def slot_time(self) -> dt.time:
        return self.visit_time

    @property
    def ticket_count(self) -> int:
        return self.number_of_tickets or self.party_size


class TransportationDetails(BookingDetailsBase):
    departure_time: dt.time
    arrival_time: dt.time | None = None
    transportation_type: TransportationType | None = None

    @property
    def slot_time(self) -> dt.time:
        return self.departure_time


class EntertainmentDetails(BookingDetailsBase):
    preferred_time: dt.time
    number_of_tickets: int | None = Field(default=None, ge=1)

    @property
    def slot_time(self) -> dt.time:
        return self.preferred_time

    @property
    def ticket_count(self) -> int:
        return self.number_of_tickets or self.party_size


# ─── Requests ───


class BookingRequestBase(BaseModel):
    venue: Venue
    user_contact: UserContact


class DiningBookingRequest(BookingRequestBase):
    category: Literal["dining"] = "dining"
    details: DiningDetails


class AccommodationBookingRequest(BookingRequestBase):
    category: Literal["accommodation"] = "accommodation"
    details: AccommodationDetails


class AttractionBookingRequest(BookingRequestBase):
    category: Literal["attraction"] = "attraction"
    details: AttractionDetails


class TransportationBookingRequest(BookingRequestBase):
    category: Literal["transportation"] = "transportation"
    details: TransportationDetails


class EntertainmentBookingRequest(BookingRequestBase):
    category: Literal["entertainment"] = "entertainment"
    details: EntertainmentDetails


BookingRequest = Annotated[
    Union[
        DiningBookingRequest,
        AccommodationBookingRequest,
        AttractionBookingRequest,
        TransportationBookingRequest,
        EntertainmentBookingRequest,
    ],
    Field(discriminator="category"),
]

booking_request_adapter: TypeAdapter = TypeAdapter(BookingRequest)


class BookingEnvelope(BaseModel):
    """Category-agnostic view of a request, used for the generic checks."""
    category: str
    venue: Venue
    user_contact: UserContact
    details: BookingDetailsBase


class BatchBookingRequest(BaseModel):
    requests: list[dict[str, Any]]


# ─── Results ───


class ContactInfo(BaseModel):
    phone: str | None = None
    display_phone: str | None = None
    website: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.phone or self.display_phone or self.website)


class AlternativeOption(BaseModel):
    venue_id: str
    venue_name: str
    available_slots: list[str]
    estimated_cost: float | None = None
    reason: str


class BookingError(BaseModel):
    code: ErrorCode
    message: str
    details: str | None = None
    retryable: bool
    category: str | None = None
    suggested_actions: list[str] = []
    qualifier: str | None = None


class BookingConfirmation(BaseModel):
    booking_id: str
    category: str
    venue_id: str
    venue_name: str
    status: Literal["confirmed", "pending"]
    details: dict[str, Any]
    user_contact: UserContact
    total_cost: float | None = None
    currency: str = "USD"
    cancellation_policy: str | None = None
    confirmation_email: bool = True
    confirmation_message: str = ""
    next_steps: list[str] = []


class BookingResult(BaseModel):
    success: bool
    category: str | None = None
    booking_id: str | None = None
    confirmation: BookingConfirmation | None = None
    error: BookingError | None = None
    alternatives: list[AlternativeOption] = []
    requires_manual_booking: bool = False
    contact_info: ContactInfo | None = None

    @property
    def estimated_cost(self) -> float:
        if self.confirmation and self.confirmation.total_cost is not None:
            return self.confirmation.total_cost
        return 0.0


class FailedBooking(BaseModel):
    index: int
    category: str | None
    venue_id: str | None
    code: ErrorCode
    message: str


class MultiBookingResult(BaseModel):
    success: bool
    overall_status: Literal["all_confirmed", "partial_confirmed", "all_failed"]
    results: list[BookingResult]
    total_cost: float
    coordination_id: str | None = None
    failed_bookings: list[FailedBooking] = []


# ─── Availability ───


class AvailabilityQuery(BaseModel):
    date: dt.date
    time: dt.time | None = None
    party_size: int = Field(default=2, ge=1)

    @classmethod
    def from_details(cls, details: BookingDetailsBase) -> "AvailabilityQuery":
        return cls(date=details.date, time=details.slot_time, party_size=details.party_size)


class AvailabilityResult(BaseModel):
    success: bool
    available: bool = False
    alternatives: list[str] | None = None
    error: BookingError | None = None
