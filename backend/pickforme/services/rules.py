"""Decision and booking rules — single source for weights, thresholds and rate tables."""

from dataclasses import dataclass, field


# ─── Decision engine ───


@dataclass(frozen=True)
class FactorWeights:
    """Base weights for the five scoring factors. They sum to 1.0.

    Setting a weight to 0 drops that factor from scoring; the remaining
    weights are renormalised.
    """
    rating: float = 0.30
    price: float = 0.25
    distance: float = 0.20
    category: float = 0.15
    popularity: float = 0.10
    context: float = 0.10    # extra weight for the conversational nudge


@dataclass(frozen=True)
class ContextKeywordRule:
    """Boost venues when the last user query mentions one of `keywords`.

    A rule matches a venue by price tier, by a term in its category titles,
    or both (either is enough).
    """
    keywords: tuple[str, ...]
    boost: float
    price_tiers: tuple[int, ...] = ()
    category_terms: tuple[str, ...] = ()


DEFAULT_CONTEXT_RULES: tuple[ContextKeywordRule, ...] = (
    ContextKeywordRule(keywords=("fancy", "upscale"), boost=0.2, price_tiers=(3, 4)),
    ContextKeywordRule(keywords=("cheap", "budget"), boost=0.2, price_tiers=(1, 2)),
    ContextKeywordRule(keywords=("quick", "fast"), boost=0.1, category_terms=("fast", "casual")),
)


@dataclass(frozen=True)
class DistanceBands:
    """Upper bound in miles → score. Checked in order."""
    bands: tuple[tuple[float, float], ...] = ((0.5, 1.0), (1.0, 0.9), (2.0, 0.7), (5.0, 0.5))
    beyond: float = 0.3
    unknown: float = 0.8


@dataclass(frozen=True)
class PopularityBands:
    """Upper bound on review count → score. Checked in order."""
    bands: tuple[tuple[int, float], ...] = ((10, 0.3), (50, 0.6), (200, 0.8))
    beyond: float = 1.0


@dataclass(frozen=True)
class DecisionConfig:
    weights: FactorWeights = field(default_factory=FactorWeights)
    context_rules: tuple[ContextKeywordRule, ...] = DEFAULT_CONTEXT_RULES
    context_cap: float = 0.2
    distance: DistanceBands = field(default_factory=DistanceBands)
    popularity: PopularityBands = field(default_factory=PopularityBands)
    price_step_penalty: float = 0.3
    default_price_tier: int = 2
    neutral_category_score: float = 0.8
    max_alternatives: int = 3
    reasoning_factor_count: int = 3
    reasoning_threshold: float = 0.7
    single_candidate_confidence: float = 0.8
    min_confidence: float = 0.5
    max_confidence: float = 0.95
    confidence_gap_multiplier: float = 2.0


# ─── Booking ───

CATEGORIES = ("dining", "accommodation", "attraction", "transportation", "entertainment")

# Capability flag a venue must advertise for automated booking
REQUIRED_TRANSACTIONS: dict[str, str] = {
    "dining": "restaurant_reservation",
    "accommodation": "hotel_reservation",
    "attraction": "ticket_sales",
    "transportation": "transportation_booking",
    "entertainment": "event_tickets",
}

CONFIRMATION_PREFIXES: dict[str, str] = {
    "dining": "RES",
    "accommodation": "HOTEL",
    "attraction": "TICKET",
    "transportation": "TRANSIT",
    "entertainment": "EVENT",
}

# Public booking sites for manual transportation bookings
TRANSPORTATION_BOOKING_URLS: dict[str, str] = {
    "flight": "https://www.expedia.com/Flights",
    "train": "https://www.amtrak.com",
    "bus": "https://www.greyhound.com",
    "car_rental": "https://www.enterprise.com",
}
DEFAULT_TRANSPORTATION_URL = "https://www.expedia.com"


@dataclass(frozen=True)
class PricingRules:
    """Flat estimate tables (USD) used for confirmation totals."""
    nightly_rate: float = 150.0
    attraction_ticket: float = 25.0
    entertainment_ticket: float = 45.0
    dining_per_person: dict[int, float] = field(
        default_factory=lambda: {1: 25.0, 2: 50.0, 3: 100.0, 4: 200.0}
    )
    transportation_fares: dict[str, float] = field(
        default_factory=lambda: {
            "flight": 250.0,
            "train": 80.0,
            "bus": 40.0,
            "car_rental": 60.0,
            "taxi": 30.0,
        }
    )
    default_fare: float = 50.0


@dataclass(frozen=True)
class AvailabilityRates:
    """Probability that a simulated slot is open, per category."""
    accommodation: float = 0.7
    attraction: float = 0.9
    transportation: float = 0.6
    entertainment: float = 0.5

    def get(self, category: str) -> float:
        return getattr(self, category, 1.0)


@dataclass(frozen=True)
class DiningHours:
    """Window used when generating alternative reservation times."""
    first_seating: str = "11:00"
    last_seating: str = "22:30"
    step_minutes: int = 30
    window_minutes: int = 90
    default_time: str = "19:00"


CANCELLATION_POLICIES: dict[str, str] = {
    "dining": "Contact the restaurant to change or cancel",
    "accommodation": "Free cancellation up to 24 hours before check-in",
    "attraction": "Tickets are refundable up to 48 hours before the visit",
    "transportation": "Subject to the carrier's fare rules",
    "entertainment": "Tickets are non-refundable",
}


@dataclass(frozen=True)
class BookingRules:
    pricing: PricingRules = field(default_factory=PricingRules)
    availability: AvailabilityRates = field(default_factory=AvailabilityRates)
    dining_hours: DiningHours = field(default_factory=DiningHours)
    alternative_count: int = 3
    max_time_alternatives: int = 5
    max_failure_alternatives: int = 3


# Defaults; pass custom instances into the engine/handlers to override
decision_config = DecisionConfig()
booking_rules = BookingRules()
