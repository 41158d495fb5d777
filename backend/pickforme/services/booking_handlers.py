"""Category booking handlers — one per booking category, dispatched by the orchestrator."""

import logging

from pickforme.schemas.booking import (
    AccommodationDetails,
    AlternativeOption,
    AttractionDetails,
    AvailabilityQuery,
    BookingConfirmation,
    BookingDetailsBase,
    BookingResult,
    ContactInfo,
    DiningDetails,
    EntertainmentDetails,
    ErrorCode,
    TransportationDetails,
    UserContact,
)
from pickforme.schemas.venue import Venue
from pickforme.services.availability_service import AvailabilityChecker
from pickforme.services.booking_executor import BookingExecutor
from pickforme.services.booking_utils import (
    confirmation_message,
    dining_alternative_times,
    hhmm,
    mask_phone,
    next_steps,
    offset_dates,
    offset_times,
)
from pickforme.services.error_classifier import ConditionError, build_error
from pickforme.services.providers import Reservation, ReservationProvider
from pickforme.services.rules import (
    CANCELLATION_POLICIES,
    DEFAULT_TRANSPORTATION_URL,
    REQUIRED_TRANSACTIONS,
    TRANSPORTATION_BOOKING_URLS,
    BookingRules,
    booking_rules,
)

logger = logging.getLogger(__name__)


class CategoryBookingHandler:
    """Base handler: capability gate, executor submission and confirmation.

    Subclasses set `category` and `manual_message` and price the booking.
    """

    category: str = ""
    manual_message = "This venue does not support online booking"

    def __init__(
        self,
        executor: BookingExecutor,
        availability: AvailabilityChecker,
        rules: BookingRules | None = None,
        currency: str = "USD",
    ):
        self.executor = executor
        self.availability = availability
        self.rules = rules or booking_rules
        self.currency = currency

    @property
    def required_transaction(self) -> str:
        return REQUIRED_TRANSACTIONS[self.category]

    def supports_online_booking(self, venue: Venue) -> bool:
        return venue.supports(self.required_transaction)

    def contact_info(self, venue: Venue, details: BookingDetailsBase) -> ContactInfo:
        return ContactInfo(phone=venue.phone, display_phone=venue.display_phone, website=venue.url)

    def manual_booking_result(self, venue: Venue, details: BookingDetailsBase) -> BookingResult:
        contact = self.contact_info(venue, details)
        if contact.is_empty:
            hint = f"{venue.name} has no contact details on file"
        elif venue.contact_phone:
            hint = f"Call {venue.name} at {venue.contact_phone} to book"
        else:
            hint = f"Book {venue.name} through {contact.website}"
        logger.info(f"Manual {self.category} booking for {venue.id} ({mask_phone(venue.contact_phone) or 'no phone'})")

        return BookingResult(
            success=False,
            category=self.category,
            error=build_error(
                ErrorCode.NO_ONLINE_BOOKING,
                self.manual_message,
                category=self.category,
                details=hint,
            ),
            requires_manual_booking=True,
            contact_info=contact,
        )

    def estimate_cost(self, venue: Venue, details: BookingDetailsBase) -> float:
        raise NotImplementedError

    # ─── Booking ───

    async def book(self, venue: Venue, details: BookingDetailsBase, contact: UserContact) -> BookingResult:
        """Submit to the executor; rejections come back classified with alternatives."""
        try:
            reservation = await self.executor.submit(self.category, venue, details)
        except ConditionError as e:
            logger.info(f"{self.category} booking at {venue.id} rejected: {e.condition}")
            return BookingResult(
                success=False,
                category=self.category,
                error=build_error(e, f"Unable to complete {self.category} booking: {e}", category=self.category),
                alternatives=await self.find_alternatives(venue, details),
                contact_info=self.contact_info(venue, details),
            )
        return self.confirmed(venue, details, contact, reservation)

    def confirmed(
        self,
        venue: Venue,
        details: BookingDetailsBase,
        contact: UserContact,
        reservation: Reservation,
    ) -> BookingResult:
        confirmation = BookingConfirmation(
            booking_id=reservation.confirmation_id,
            category=self.category,
            venue_id=venue.id,
            venue_name=venue.name,
            status=reservation.status,
            details=details.model_dump(mode="json"),
            user_contact=contact,
            total_cost=round(self.estimate_cost(venue, details), 2),
            currency=self.currency,
            cancellation_policy=CANCELLATION_POLICIES.get(self.category),
            confirmation_message=confirmation_message(self.category, venue.name, details),
            next_steps=next_steps(self.category, details),
        )
        logger.info(f"{self.category} booking {confirmation.booking_id} confirmed at {venue.id}")
        return BookingResult(
            success=True,
            category=self.category,
            booking_id=confirmation.booking_id,
            confirmation=confirmation,
        )

    async def find_alternatives(self, venue: Venue, details: BookingDetailsBase) -> list[AlternativeOption]:
        """Ask the availability checker for other slots at the same venue."""
        slots: list[str] = []
        try:
            result = await self.availability.check(venue, self.category, AvailabilityQuery.from_details(details))
            slots = result.alternatives or []
        except Exception as e:
            logger.warning(f"Alternative lookup for {venue.id} failed: {e}")

        if not slots:
            slots = self.default_alternatives(details)
        return [self.alternative(venue, details, slots, f"Other openings at {venue.name}")]

    def default_alternatives(self, details: BookingDetailsBase) -> list[str]:
        count = self.rules.alternative_count
        if details.slot_time is None:
            return offset_dates(details.date, count)
        return offset_times(details.slot_time, count)

    def alternative(
        self, venue: Venue, details: BookingDetailsBase, slots: list[str], reason: str
    ) -> AlternativeOption:
        return AlternativeOption(
            venue_id=venue.id,
            venue_name=venue.name,
            available_slots=slots,
            estimated_cost=round(self.estimate_cost(venue, details), 2),
            reason=reason,
        )


class DiningBookingHandler(CategoryBookingHandler):
    """Restaurant reservations go through the reservation provider, not the executor."""

    category = "dining"
    manual_message = "This restaurant requires phone reservations"

    def __init__(self, reservations: ReservationProvider, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reservations = reservations

    def estimate_cost(self, venue: Venue, details: DiningDetails) -> float:
        pricing = self.rules.pricing
        tier = venue.price or 2
        return pricing.dining_per_person.get(tier, pricing.dining_per_person[2]) * details.party_size

    async def book(self, venue: Venue, details: DiningDetails, contact: UserContact) -> BookingResult:
        requested = details.preferred_time
        try:
            offered = await self.reservations.check_reservation_availability(
                venue.id, details.date, requested, details.party_size
            )
        except Exception as e:
            logger.error(f"Reservation availability for {venue.id} failed: {e}")
            return BookingResult(
                success=False,
                category=self.category,
                error=build_error(
                    ErrorCode.AVAILABILITY_CHECK_FAILED,
                    "Unable to check availability",
                    category=self.category,
                    details=str(e),
                ),
                contact_info=self.contact_info(venue, details),
            )

        if hhmm(requested) not in offered:
            times = offered or dining_alternative_times(requested, self.rules.dining_hours)
            return BookingResult(
                success=False,
                category=self.category,
                error=build_error(
                    ErrorCode.TIME_UNAVAILABLE,
                    f"The requested time {hhmm(requested)} is not available",
                    category=self.category,
                    details="Alternative times are suggested",
                ),
                alternatives=[self.alternative(
                    venue, details, times[: self.rules.max_time_alternatives], "Other times that evening"
                )],
            )

        try:
            reservation = await self.reservations.make_reservation(
                venue.id, details.date, requested, details.party_size, contact
            )
        except Exception as e:
            logger.error(f"Reservation at {venue.id} failed: {e}")
            times = dining_alternative_times(requested, self.rules.dining_hours)
            return BookingResult(
                success=False,
                category=self.category,
                error=build_error(
                    ErrorCode.BOOKING_FAILED,
                    "Unable to complete booking",
                    category=self.category,
                    details="Please try an alternative time or contact the restaurant directly",
                ),
                alternatives=[self.alternative(
                    venue, details, times[: self.rules.max_failure_alternatives], "Nearby times"
                )],
                contact_info=self.contact_info(venue, details),
            )

        return self.confirmed(venue, details, contact, reservation)


class AccommodationBookingHandler(CategoryBookingHandler):
    category = "accommodation"
    manual_message = "This hotel must be booked directly"

    def estimate_cost(self, venue: Venue, details: AccommodationDetails) -> float:
        return self.rules.pricing.nightly_rate * details.nights * details.number_of_rooms

    def default_alternatives(self, details: AccommodationDetails) -> list[str]:
        return offset_dates(details.check_in_date, self.rules.alternative_count)


class AttractionBookingHandler(CategoryBookingHandler):
    category = "attraction"
    manual_message = "Tickets for this attraction are sold at the venue or its website"

    def estimate_cost(self, venue: Venue, details: AttractionDetails) -> float:
        return self.rules.pricing.attraction_ticket * details.ticket_count


class TransportationBookingHandler(CategoryBookingHandler):
    category = "transportation"
    manual_message = "This provider must be booked through its own booking site"

    def contact_info(self, venue: Venue, details: TransportationDetails) -> ContactInfo:
        website = venue.url or TRANSPORTATION_BOOKING_URLS.get(
            details.transportation_type or "", DEFAULT_TRANSPORTATION_URL
        )
        return ContactInfo(phone=venue.phone, display_phone=venue.display_phone, website=website)

    def estimate_cost(self, venue: Venue, details: TransportationDetails) -> float:
        pricing = self.rules.pricing
        fare = pricing.transportation_fares.get(details.transportation_type or "", pricing.default_fare)
        return fare * details.party_size


class EntertainmentBookingHandler(CategoryBookingHandler):
    category = "entertainment"
    manual_message = "Tickets for this event are sold at the box office"

    def estimate_cost(self, venue: Venue, details: EntertainmentDetails) -> float:
        return self.rules.pricing.entertainment_ticket * details.ticket_count

    def default_alternatives(self, details: EntertainmentDetails) -> list[str]:
        return offset_dates(details.date, self.rules.alternative_count)


def build_handlers(
    reservations: ReservationProvider,
    executor: BookingExecutor,
    availability: AvailabilityChecker,
    rules: BookingRules | None = None,
    currency: str = "USD",
) -> dict[str, CategoryBookingHandler]:
    """Handler registry keyed by category tag."""
    shared = {"executor": executor, "availability": availability, "rules": rules, "currency": currency}
    handlers: list[CategoryBookingHandler] = [
        DiningBookingHandler(reservations, **shared),
        AccommodationBookingHandler(**shared),
        AttractionBookingHandler(**shared),
        TransportationBookingHandler(**shared),
        EntertainmentBookingHandler(**shared),
    ]
    return {h.category: h for h in handlers}
