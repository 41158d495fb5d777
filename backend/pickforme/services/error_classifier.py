"""Error classifier — maps raw failure conditions onto the booking error taxonomy."""

import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from pickforme.schemas.booking import BookingError, ErrorCode

logger = logging.getLogger(__name__)


class ConditionError(Exception):
    """An expected failure that carries a raw condition name (e.g. "fully_booked")."""

    def __init__(self, condition: str, message: str | None = None):
        self.condition = condition
        super().__init__(message or condition.replace("_", " "))


@dataclass(frozen=True)
class ClassifiedError:
    code: ErrorCode
    retryable: bool
    suggested_actions: list[str]


# code → (retryable, default suggested actions)
TAXONOMY: dict[ErrorCode, tuple[bool, tuple[str, ...]]] = {
    ErrorCode.VALIDATION_ERROR: (False, ("Check booking details", "Select valid dates", "Contact venue directly")),
    ErrorCode.BUSINESS_NOT_FOUND: (False, ("Search again", "Choose a different venue")),
    ErrorCode.UNSUPPORTED_CATEGORY: (False, ("Choose a supported category", "Contact venue directly")),
    ErrorCode.NO_ONLINE_BOOKING: (False, ("Call the venue directly", "Visit the venue's website")),
    ErrorCode.TIME_UNAVAILABLE: (True, ("Try one of the suggested alternative times", "Consider a different date", "Call the venue for more options")),
    ErrorCode.BOOKING_FAILED: (True, ("Try again in a few minutes", "Try a different time slot", "Contact venue directly")),
    ErrorCode.AVAILABILITY_CHECK_FAILED: (True, ("Try again in a few minutes", "Call the venue directly")),
    ErrorCode.ORCHESTRATION_ERROR: (True, ("Try again later", "Contact support", "Use alternative booking method")),
}

# Raw condition names produced by providers and simulators
CONDITIONS: dict[str, ErrorCode] = {
    "validation": ErrorCode.VALIDATION_ERROR,
    "validation_error": ErrorCode.VALIDATION_ERROR,
    "invalid_request": ErrorCode.VALIDATION_ERROR,
    "invalid_dates": ErrorCode.VALIDATION_ERROR,
    "not_found": ErrorCode.BUSINESS_NOT_FOUND,
    "business_not_found": ErrorCode.BUSINESS_NOT_FOUND,
    "unsupported_category": ErrorCode.UNSUPPORTED_CATEGORY,
    "no_online_booking": ErrorCode.NO_ONLINE_BOOKING,
    "no_online_reservations": ErrorCode.NO_ONLINE_BOOKING,
    "external_booking_required": ErrorCode.NO_ONLINE_BOOKING,
    "time_unavailable": ErrorCode.TIME_UNAVAILABLE,
    "fully_booked": ErrorCode.TIME_UNAVAILABLE,
    "sold_out": ErrorCode.TIME_UNAVAILABLE,
    "booking_failed": ErrorCode.BOOKING_FAILED,
    "payment_failed": ErrorCode.BOOKING_FAILED,
    "system_error": ErrorCode.BOOKING_FAILED,
    "authentication_failed": ErrorCode.BOOKING_FAILED,
    "availability_check_failed": ErrorCode.AVAILABILITY_CHECK_FAILED,
    "network_timeout": ErrorCode.AVAILABILITY_CHECK_FAILED,
    "server_overload": ErrorCode.AVAILABILITY_CHECK_FAILED,
    "service_unavailable": ErrorCode.AVAILABILITY_CHECK_FAILED,
    "rate_limited": ErrorCode.AVAILABILITY_CHECK_FAILED,
    "rate_limit_exceeded": ErrorCode.AVAILABILITY_CHECK_FAILED,
    "orchestration_error": ErrorCode.ORCHESTRATION_ERROR,
}

# Conditions whose advice differs from their code's default
CONDITION_ACTIONS: dict[str, tuple[str, ...]] = {
    "payment_failed": ("Check payment information", "Try different payment method", "Contact support"),
    "fully_booked": ("Try different dates", "View alternative options", "Join waitlist"),
    "system_error": ("Try again later", "Contact support", "Use alternative booking method"),
    "rate_limited": ("Wait before making more requests", "Try again later"),
    "rate_limit_exceeded": ("Wait before making more requests", "Try again later"),
}


def _normalise(condition: str) -> str:
    return condition.strip().lower().replace("-", "_").replace(" ", "_")


def _from_code(code: ErrorCode, actions: tuple[str, ...] | None = None) -> ClassifiedError:
    retryable, default_actions = TAXONOMY[code]
    return ClassifiedError(code=code, retryable=retryable, suggested_actions=list(actions or default_actions))


def _classify_condition(condition: str) -> ClassifiedError:
    key = _normalise(condition)
    code = CONDITIONS.get(key)
    if code is None:
        try:
            code = ErrorCode(condition.strip().upper())
        except ValueError:
            logger.debug(f"Unknown failure condition '{condition}', treating as booking failure")
            code = ErrorCode.BOOKING_FAILED
    return _from_code(code, CONDITION_ACTIONS.get(key))


def _classify_http_status(status: int) -> ErrorCode:
    if status == 404:
        return ErrorCode.BUSINESS_NOT_FOUND
    if status in (400, 422):
        return ErrorCode.VALIDATION_ERROR
    if status == 429 or status >= 500:
        return ErrorCode.AVAILABILITY_CHECK_FAILED
    return ErrorCode.BOOKING_FAILED


def classify(condition: ErrorCode | str | BaseException) -> ClassifiedError:
    """Map a raw failure condition to a code, retryability and suggested actions.

    Accepts an ErrorCode, a condition name ("fully_booked", "network_timeout",
    "NO_ONLINE_BOOKING", ...) or an exception. Exceptions that are not
    recognised classify as ORCHESTRATION_ERROR.
    """
    if isinstance(condition, ErrorCode):
        return _from_code(condition)
    if isinstance(condition, str):
        return _classify_condition(condition)
    if isinstance(condition, ConditionError):
        return _classify_condition(condition.condition)
    if isinstance(condition, ValidationError):
        return _from_code(ErrorCode.VALIDATION_ERROR)
    if isinstance(condition, httpx.HTTPStatusError):
        return _from_code(_classify_http_status(condition.response.status_code))
    if isinstance(condition, httpx.RequestError):
        return _from_code(ErrorCode.AVAILABILITY_CHECK_FAILED)
    return _from_code(ErrorCode.ORCHESTRATION_ERROR)


def build_error(
    condition: ErrorCode | str | BaseException,
    message: str,
    category: str | None = None,
    details: str | None = None,
    qualifier: str | None = None,
) -> BookingError:
    """Build the wire-level error payload for a classified condition."""
    classified = classify(condition)
    return BookingError(
        code=classified.code,
        message=message,
        details=details,
        retryable=classified.retryable,
        category=category,
        suggested_actions=classified.suggested_actions,
        qualifier=qualifier,
    )


def format_validation_errors(exc: ValidationError) -> str:
    """Flatten pydantic errors into "field.path: message" pairs."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts)
