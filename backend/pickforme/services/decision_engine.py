"""Decision engine — scores candidate venues against preferences and explains the pick."""

import logging
from dataclasses import dataclass

from pickforme.schemas.decision import DecisionFactor, DecisionResponse
from pickforme.schemas.venue import ConversationContext, Location, UserPreferences, Venue
from pickforme.services.rules import DecisionConfig, decision_config

logger = logging.getLogger(__name__)

RATING = "Rating"
PRICE_MATCH = "Price Match"
DISTANCE = "Distance"
CATEGORY_MATCH = "Category Match"
POPULARITY = "Popularity"


class EmptyCandidateSet(ValueError):
    """Raised when a decision is requested over zero venues."""


class NoCandidatesAvailable(ValueError):
    """Raised when a forced selection has nothing to choose from."""


@dataclass
class ScoredVenue:
    venue: Venue
    score: float
    factors: list[DecisionFactor]


class DecisionEngine:
    """Pure, stateless ranking of venues. Safe to share between requests."""

    def __init__(self, config: DecisionConfig | None = None):
        self.config = config or decision_config

    def select_best(
        self,
        venues: list[Venue],
        preferences: UserPreferences,
        location: Location | None = None,
        context: ConversationContext | None = None,
    ) -> DecisionResponse:
        """Pick the best venue, up to three ranked alternatives and a confidence."""
        if not venues:
            raise EmptyCandidateSet("At least one candidate venue is required")

        if len(venues) == 1:
            return self.quick_decision(venues[0])

        scored = [self.score_venue(v, preferences, location, context) for v in venues]
        # list.sort is stable: equal scores keep their input order
        scored.sort(key=lambda s: s.score, reverse=True)

        selected = scored[0]
        alternatives = [s.venue for s in scored[1 : 1 + self.config.max_alternatives]]
        confidence = self._confidence(scored)

        logger.debug(
            f"Selected {selected.venue.id} (score={selected.score:.3f}, "
            f"confidence={confidence:.2f}) from {len(venues)} candidates"
        )

        return DecisionResponse(
            selected_venue=selected.venue,
            alternatives=alternatives,
            factors=selected.factors,
            reasoning=self._reasoning(selected.venue, selected.factors, context),
            confidence=confidence,
        )

    def select_from_available(
        self,
        venues: list[Venue],
        preferences: UserPreferences,
        location: Location | None = None,
    ) -> DecisionResponse:
        """Forced selection when nothing cleared the caller's bar.

        Always picks from the supplied venues and never fabricates one.
        """
        if not venues:
            raise NoCandidatesAvailable(
                "No venues found matching your criteria. "
                "Please try adjusting your preferences or location."
            )
        return self.select_best(venues, preferences, location)

    def quick_decision(self, venue: Venue) -> DecisionResponse:
        """Single-candidate shortcut: no ranking, fixed confidence."""
        return DecisionResponse(
            selected_venue=venue,
            alternatives=[],
            factors=[
                DecisionFactor(
                    name=RATING,
                    weight=1.0,
                    score=self._rating_score(venue),
                    description=f"{venue.rating}/5 stars",
                )
            ],
            reasoning=(
                f"{venue.name} is a great choice with {venue.rating}/5 stars "
                f"and {venue.review_count} reviews."
            ),
            confidence=self.config.single_candidate_confidence,
        )

    # ─── Scoring ───

    def score_venue(
        self,
        venue: Venue,
        preferences: UserPreferences,
        location: Location | None = None,
        context: ConversationContext | None = None,
    ) -> ScoredVenue:
        """Weighted score over the active factors plus the context nudge."""
        w = self.config.weights
        candidates = [
            (RATING, w.rating, self._rating_score(venue),
             f"{venue.rating}/5 stars with {venue.review_count} reviews"),
            (PRICE_MATCH, w.price, self._price_score(venue, preferences),
             f"{venue.price_label} price range (preference: {'$' * preferences.price_range})"),
            (DISTANCE, w.distance, self._distance_score(venue),
             self._distance_description(venue, location)),
            (CATEGORY_MATCH, w.category, self._category_score(venue, preferences),
             f"Serves {', '.join(c.title for c in venue.categories) or 'unlisted categories'}"),
            (POPULARITY, w.popularity, self._popularity_score(venue),
             f"{venue.review_count} reviews indicate popularity"),
        ]
        active = [c for c in candidates if c[1] > 0]
        total_weight = sum(c[1] for c in active)
        if total_weight <= 0:
            return ScoredVenue(venue=venue, score=0.0, factors=[])

        weighted = sum(weight * score for _, weight, score, _ in active)
        if context is not None and w.context > 0:
            weighted += self._context_adjustment(venue, context) * w.context

        factors = [
            DecisionFactor(name=name, weight=weight / total_weight, score=score, description=desc)
            for name, weight, score, desc in active
        ]
        return ScoredVenue(venue=venue, score=weighted / total_weight, factors=factors)

    @staticmethod
    def _rating_score(venue: Venue) -> float:
        return max(0.0, min(1.0, venue.rating / 5))

    def _price_score(self, venue: Venue, preferences: UserPreferences) -> float:
        venue_tier = venue.price or self.config.default_price_tier
        difference = abs(venue_tier - preferences.price_range)
        return max(0.0, 1 - difference * self.config.price_step_penalty)

    def _distance_score(self, venue: Venue) -> float:
        bands = self.config.distance
        if venue.distance is None:
            return bands.unknown
        for upper, score in bands.bands:
            if venue.distance <= upper:
                return score
        return bands.beyond

    @staticmethod
    def _distance_description(venue: Venue, location: Location | None) -> str:
        origin = f" from {location.city}" if location and location.city else ""
        if venue.distance is None:
            return f"Distance{origin} unknown"
        return f"{venue.distance:.1f} miles away{origin}"

    def _category_score(self, venue: Venue, preferences: UserPreferences) -> float:
        preferred = [p.strip().lower() for p in preferences.cuisine_types if p.strip()]
        if not preferred:
            return self.config.neutral_category_score

        tags = [t for c in venue.categories for t in (c.alias.lower(), c.title.lower()) if t]
        matches = sum(1 for pref in preferred if any(pref in tag or tag in pref for tag in tags))
        return min(1.0, matches / len(preferred))

    def _popularity_score(self, venue: Venue) -> float:
        bands = self.config.popularity
        for upper, score in bands.bands:
            if venue.review_count <= upper:
                return score
        return bands.beyond

    def _context_adjustment(self, venue: Venue, context: ConversationContext) -> float:
        query = (context.last_user_query or "").lower()
        if not query:
            return 0.0

        titles = " ".join(c.title.lower() for c in venue.categories)
        adjustment = 0.0
        for rule in self.config.context_rules:
            if not any(keyword in query for keyword in rule.keywords):
                continue
            tier_match = venue.price is not None and venue.price in rule.price_tiers
            term_match = any(term in titles for term in rule.category_terms)
            if tier_match or term_match:
                adjustment += rule.boost

        cap = self.config.context_cap
        return max(-cap, min(cap, adjustment))

    def _confidence(self, scored: list[ScoredVenue]) -> float:
        cfg = self.config
        if len(scored) < 2:
            return cfg.single_candidate_confidence
        gap = scored[0].score - scored[1].score
        confidence = cfg.min_confidence + gap * cfg.confidence_gap_multiplier
        return max(cfg.min_confidence, min(cfg.max_confidence, confidence))

    # ─── Explanation ───

    def _reasoning(
        self,
        venue: Venue,
        factors: list[DecisionFactor],
        context: ConversationContext | None,
    ) -> str:
        top = sorted(factors, key=lambda f: f.score * f.weight, reverse=True)
        top = top[: self.config.reasoning_factor_count]

        clauses = {
            RATING: f"it has excellent ratings ({venue.rating}/5 stars)",
            PRICE_MATCH: f"it matches your budget preference ({venue.price_label})",
            DISTANCE: "it's conveniently located nearby",
            CATEGORY_MATCH: "it serves your preferred cuisine",
            POPULARITY: "it's well-reviewed by many customers",
        }
        reasons = [clauses[f.name] for f in top if f.score > self.config.reasoning_threshold]

        reasoning = f"I selected {venue.name} because "
        if reasons:
            reasoning += "it excels in several key areas: " + ", ".join(reasons) + "."
        else:
            reasoning += "it provides the best overall balance of quality, location, and value."

        if context is not None and context.stage == "decision_made":
            reasoning += " This choice aligns with your previous preferences in our conversation."

        return reasoning
