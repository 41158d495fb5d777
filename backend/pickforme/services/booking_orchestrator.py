"""Booking orchestrator — validates, dispatches and aggregates bookings across categories."""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from pickforme.config import Settings
from pickforme.schemas.booking import (
    AvailabilityQuery,
    AvailabilityResult,
    BookingEnvelope,
    BookingResult,
    ErrorCode,
    FailedBooking,
    MultiBookingResult,
    booking_request_adapter,
)
from pickforme.schemas.venue import Venue
from pickforme.services.availability_service import AvailabilityChecker, SimulatedAvailabilityChecker
from pickforme.services.booking_executor import SimulatedBookingExecutor
from pickforme.services.booking_handlers import CategoryBookingHandler, build_handlers
from pickforme.services.booking_utils import generate_booking_id
from pickforme.services.error_classifier import build_error, format_validation_errors
from pickforme.services.providers import ReservationProvider
from pickforme.services.rules import BookingRules

logger = logging.getLogger(__name__)


class BookingOrchestrator:
    """Single entry point for bookings. Never raises: every outcome is a BookingResult."""

    def __init__(
        self,
        handlers: dict[str, CategoryBookingHandler],
        availability: AvailabilityChecker,
        inter_request_delay: float = 0.2,
    ):
        self.handlers = handlers
        self.availability = availability
        self.inter_request_delay = inter_request_delay

    async def coordinate_booking(self, request: BaseModel | Mapping[str, Any]) -> BookingResult:
        """Validate, capability-check and execute one booking request."""
        start = time.monotonic()
        data = request.model_dump() if isinstance(request, BaseModel) else request
        raw_category = data.get("category") if isinstance(data, Mapping) else None
        category = raw_category if isinstance(raw_category, str) else None

        # 1. Envelope: venue, contact, date, party size
        try:
            envelope = BookingEnvelope.model_validate(data)
        except (ValidationError, TypeError, ValueError) as e:
            return self._validation_failure(e, category)

        # 2. Category tag
        handler = self.handlers.get(envelope.category)
        if handler is None:
            logger.info(f"Rejected booking with unsupported category '{envelope.category}'")
            return BookingResult(
                success=False,
                category=envelope.category,
                error=build_error(
                    ErrorCode.UNSUPPORTED_CATEGORY,
                    f"Unsupported booking category: {envelope.category}",
                    category=envelope.category,
                    details=f"Supported categories: {', '.join(self.handlers)}",
                ),
            )

        # 3. Category-specific fields
        try:
            typed = booking_request_adapter.validate_python(data)
        except (ValidationError, TypeError, ValueError) as e:
            return self._validation_failure(e, envelope.category)

        # 4. Capability gate
        if not handler.supports_online_booking(typed.venue):
            logger.info(
                f"{typed.venue.id} lacks {handler.required_transaction}, manual booking required"
            )
            return handler.manual_booking_result(typed.venue, typed.details)

        # 5. Execute
        try:
            result = await handler.book(typed.venue, typed.details, typed.user_contact)
        except Exception as e:
            logger.exception(f"{typed.category} booking at {typed.venue.id} failed unexpectedly: {e}")
            return BookingResult(
                success=False,
                category=typed.category,
                error=build_error(
                    ErrorCode.ORCHESTRATION_ERROR,
                    "An unexpected error occurred while processing the booking",
                    category=typed.category,
                    details=str(e),
                    qualifier=f"{typed.category.upper()}_BOOKING_ERROR",
                ),
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"{typed.category} booking at {typed.venue.id}: "
            f"{'confirmed' if result.success else result.error.code.value} in {elapsed_ms}ms"
        )
        return result

    def _validation_failure(self, exc: Exception, category: str | None) -> BookingResult:
        # Validators that raise outside pydantic still end as a rejected request
        message = format_validation_errors(exc) if isinstance(exc, ValidationError) else str(exc)
        logger.info(f"Rejected invalid booking request: {message}")
        return BookingResult(
            success=False,
            category=category,
            error=build_error(
                ErrorCode.VALIDATION_ERROR,
                "Invalid booking request",
                category=category,
                details=message,
            ),
        )

    async def check_availability(
        self, venue: Venue, category: str, query: AvailabilityQuery
    ) -> AvailabilityResult:
        """Availability for one venue and slot; failures come back as error results."""
        if category not in self.handlers:
            return AvailabilityResult(
                success=False,
                error=build_error(
                    ErrorCode.UNSUPPORTED_CATEGORY,
                    f"Unsupported booking category: {category}",
                    category=category,
                ),
            )
        try:
            return await self.availability.check(venue, category, query)
        except Exception as e:
            logger.error(f"Availability check for {venue.id} ({category}) failed: {e}")
            return AvailabilityResult(
                success=False,
                error=build_error(
                    ErrorCode.AVAILABILITY_CHECK_FAILED,
                    "Unable to check availability",
                    category=category,
                    details=str(e),
                ),
            )

    async def coordinate_multi_service_booking(
        self, requests: list[BaseModel | Mapping[str, Any]]
    ) -> MultiBookingResult:
        """Book each request in order, pausing between them.

        A failure never stops the remaining requests.
        """
        results: list[BookingResult] = []
        for i, request in enumerate(requests):
            results.append(await self.coordinate_booking(request))
            if i < len(requests) - 1 and self.inter_request_delay > 0:
                await asyncio.sleep(self.inter_request_delay)

        confirmed = [r for r in results if r.success]
        if results and len(confirmed) == len(results):
            overall_status = "all_confirmed"
        elif not confirmed:
            overall_status = "all_failed"
        else:
            overall_status = "partial_confirmed"

        failed = [
            FailedBooking(
                index=i,
                category=r.category,
                venue_id=self._venue_id(requests[i]),
                code=r.error.code,
                message=r.error.message,
            )
            for i, r in enumerate(results)
            if not r.success and r.error is not None
        ]

        coordination_id = generate_booking_id("COORD") if confirmed else None
        logger.info(
            f"Multi-booking {coordination_id or '-'}: {len(confirmed)}/{len(results)} confirmed"
        )
        return MultiBookingResult(
            success=overall_status != "all_failed",
            overall_status=overall_status,
            results=results,
            total_cost=sum(r.estimated_cost for r in confirmed),
            coordination_id=coordination_id,
            failed_bookings=failed,
        )

    @staticmethod
    def _venue_id(request: BaseModel | Mapping[str, Any]) -> str | None:
        venue = getattr(request, "venue", None)
        if venue is not None:
            return venue.id
        if isinstance(request, Mapping) and isinstance(request.get("venue"), Mapping):
            venue_id = request["venue"].get("id")
            return venue_id if isinstance(venue_id, str) else None
        return None


def build_orchestrator(
    reservations: ReservationProvider,
    config: Settings,
    rules: BookingRules | None = None,
) -> BookingOrchestrator:
    """Wire the simulated executor and availability checker around a reservation provider."""
    availability = SimulatedAvailabilityChecker(reservations, rules)
    executor = SimulatedBookingExecutor(failure_rate=config.simulated_booking_failure_rate)
    handlers = build_handlers(
        reservations, executor, availability, rules=rules, currency=config.booking_currency
    )
    return BookingOrchestrator(
        handlers, availability, inter_request_delay=config.multi_booking_delay_seconds
    )
