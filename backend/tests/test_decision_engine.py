"""
Tests for pickforme.services.decision_engine.

Covers ranking, confidence, the single-candidate shortcut, forced selection
and the conversational nudge.
"""
import pytest

from conftest import make_venue
from pickforme.schemas.venue import ConversationContext, Location, UserPreferences
from pickforme.services.decision_engine import (
    CATEGORY_MATCH,
    DISTANCE,
    RATING,
    DecisionEngine,
    EmptyCandidateSet,
    NoCandidatesAvailable,
)
from pickforme.services.rules import DecisionConfig, FactorWeights


@pytest.fixture
def engine():
    return DecisionEngine()


@pytest.fixture
def prefs():
    return UserPreferences()


class TestSelectBest:
    """Tests for the main ranking path."""

    def test_empty_candidates_raise(self, engine, prefs):
        """An empty list is rejected with a typed error."""
        with pytest.raises(EmptyCandidateSet):
            engine.select_best([], prefs)

    def test_empty_candidates_are_value_errors(self, engine, prefs):
        with pytest.raises(ValueError):
            engine.select_best([], prefs)

    def test_single_candidate_shortcut(self, engine, prefs):
        """One venue: returned as-is, confidence 0.8, single Rating factor."""
        venue = make_venue()
        result = engine.select_best([venue], prefs)

        assert result.selected_venue == venue
        assert result.alternatives == []
        assert result.confidence == 0.8
        assert len(result.factors) == 1
        assert result.factors[0].name == RATING
        assert result.factors[0].weight == 1.0

    def test_higher_rating_wins(self, engine, prefs):
        low = make_venue(id="low", rating=3.0)
        high = make_venue(id="high", rating=4.8)
        result = engine.select_best([low, high], prefs)

        assert result.selected_venue.id == "high"
        assert [v.id for v in result.alternatives] == ["low"]

    def test_at_most_three_alternatives(self, engine, prefs):
        venues = [make_venue(id=f"v{i}", rating=5.0 - i * 0.5) for i in range(6)]
        result = engine.select_best(venues, prefs)

        assert result.selected_venue.id == "v0"
        assert [v.id for v in result.alternatives] == ["v1", "v2", "v3"]

    def test_ties_keep_input_order(self, engine, prefs):
        """Identical scores select the earliest venue."""
        venues = [make_venue(id="first"), make_venue(id="second"), make_venue(id="third")]
        result = engine.select_best(venues, prefs)

        assert result.selected_venue.id == "first"
        assert [v.id for v in result.alternatives] == ["second", "third"]

    def test_deterministic(self, engine, prefs):
        venues = [
            make_venue(id="a", rating=4.1, distance=3.0),
            make_venue(id="b", rating=4.6, price=3),
            make_venue(id="c", rating=3.9, review_count=900),
        ]
        assert engine.select_best(venues, prefs) == engine.select_best(venues, prefs)

    def test_factor_weights_sum_to_one(self, engine, prefs):
        result = engine.select_best([make_venue(id="a"), make_venue(id="b", rating=3.0)], prefs)
        assert sum(f.weight for f in result.factors) == pytest.approx(1.0)
        assert len(result.factors) == 5


class TestConfidence:
    """Tests for the confidence formula and its bounds."""

    def test_confidence_from_score_gap(self, engine, prefs):
        """0.5 + 2 * gap; the rating difference 4.5 vs 3.0 is a 0.09 gap."""
        top = make_venue(id="top", rating=4.5)
        second = make_venue(id="second", rating=3.0)
        result = engine.select_best([top, second], prefs)
        assert result.confidence == pytest.approx(0.68)

    def test_equal_scores_give_minimum(self, engine, prefs):
        result = engine.select_best([make_venue(id="a"), make_venue(id="b")], prefs)
        assert result.confidence == pytest.approx(0.5)

    def test_large_gap_is_capped(self, engine, prefs):
        best = make_venue(id="best", rating=5.0, distance=0.1, review_count=5000)
        worst = make_venue(
            id="worst", rating=0.5, price=4, distance=50.0, review_count=1,
            categories=[{"alias": "bars", "title": "Bars"}],
        )
        result = engine.select_best([best, worst], UserPreferences(price_range=1, cuisine_types=["italian"]))
        assert result.confidence == 0.95

    @pytest.mark.parametrize("ratings", [(1.0, 5.0), (4.0, 4.1), (2.5, 2.5, 4.9), (3.3, 4.4, 1.1, 0.0)])
    def test_confidence_always_in_bounds(self, engine, prefs, ratings):
        venues = [make_venue(id=f"v{i}", rating=r) for i, r in enumerate(ratings)]
        result = engine.select_best(venues, prefs)
        assert 0.5 <= result.confidence <= 0.95


class TestScoring:
    """Tests for individual factors and the context adjustment."""

    def test_score_is_monotonic_in_rating(self, engine, prefs):
        scores = [engine.score_venue(make_venue(rating=r), prefs).score for r in (1.0, 2.5, 4.0, 5.0)]
        assert scores == sorted(scores)
        assert len(set(scores)) == 4

    def test_known_score(self, engine, prefs):
        """4.5 stars, matching price, 0.8 miles, no cuisine preference, 120 reviews."""
        assert engine.score_venue(make_venue(), prefs).score == pytest.approx(0.9)

    def test_unknown_distance_is_neutral(self, engine, prefs):
        scored = engine.score_venue(make_venue(distance=None), prefs)
        distance = next(f for f in scored.factors if f.name == DISTANCE)
        assert distance.score == 0.8

    def test_zero_distance_is_best(self, engine, prefs):
        scored = engine.score_venue(make_venue(distance=0), prefs)
        distance = next(f for f in scored.factors if f.name == DISTANCE)
        assert distance.score == 1.0

    def test_category_match_fraction(self, engine):
        venue = make_venue()
        full = engine.score_venue(venue, UserPreferences(cuisine_types=["Italian"]))
        half = engine.score_venue(venue, UserPreferences(cuisine_types=["italian", "sushi"]))

        assert next(f for f in full.factors if f.name == CATEGORY_MATCH).score == 1.0
        assert next(f for f in half.factors if f.name == CATEGORY_MATCH).score == 0.5

    def test_missing_price_treated_as_moderate(self, engine, prefs):
        assert engine.score_venue(make_venue(price=None), prefs).score == pytest.approx(
            engine.score_venue(make_venue(price=2), prefs).score
        )

    def test_zero_weight_factor_is_dropped(self, prefs):
        engine = DecisionEngine(DecisionConfig(weights=FactorWeights(distance=0.0)))
        scored = engine.score_venue(make_venue(), prefs)

        assert DISTANCE not in [f.name for f in scored.factors]
        assert sum(f.weight for f in scored.factors) == pytest.approx(1.0)

    def test_fancy_query_boosts_upscale_venue(self, engine, prefs):
        venue = make_venue(price=4)
        plain = engine.score_venue(venue, prefs)
        fancy = engine.score_venue(venue, prefs, context=ConversationContext(last_user_query="somewhere fancy"))
        assert fancy.score - plain.score == pytest.approx(0.02)

    def test_cheap_query_ignores_upscale_venue(self, engine, prefs):
        venue = make_venue(price=4)
        plain = engine.score_venue(venue, prefs)
        cheap = engine.score_venue(venue, prefs, context=ConversationContext(last_user_query="cheap eats"))
        assert cheap.score == pytest.approx(plain.score)

    def test_quick_query_matches_category_terms(self, engine, prefs):
        venue = make_venue(categories=["Fast Food"])
        plain = engine.score_venue(venue, prefs)
        quick = engine.score_venue(venue, prefs, context=ConversationContext(last_user_query="something quick"))
        assert quick.score - plain.score == pytest.approx(0.01)

    def test_location_only_changes_descriptions(self, engine, prefs):
        venue = make_venue()
        here = Location(latitude=37.77, longitude=-122.42, city="San Francisco")
        with_location = engine.score_venue(venue, prefs, location=here)
        without = engine.score_venue(venue, prefs)

        assert with_location.score == without.score
        distance = next(f for f in with_location.factors if f.name == DISTANCE)
        assert "San Francisco" in distance.description


class TestReasoning:
    """Tests for the explanation text."""

    def test_strong_factors_are_named(self, engine, prefs):
        result = engine.select_best([make_venue(id="a", rating=4.9), make_venue(id="b", rating=3.0)], prefs)
        assert result.reasoning.startswith("I selected Trattoria Roma because")
        assert "excellent ratings" in result.reasoning

    def test_fallback_sentence_when_nothing_stands_out(self, engine):
        prefs = UserPreferences(price_range=1, cuisine_types=["sushi"])
        venues = [
            make_venue(id="a", rating=2.0, price=4, distance=10.0, review_count=5),
            make_venue(id="b", rating=1.5, price=4, distance=12.0, review_count=3),
        ]
        result = engine.select_best(venues, prefs)
        assert "best overall balance of quality, location, and value" in result.reasoning

    def test_decision_made_stage_adds_sentence(self, engine, prefs):
        venues = [make_venue(id="a"), make_venue(id="b", rating=2.0)]
        context = ConversationContext(last_user_query="dinner", stage="decision_made")
        result = engine.select_best(venues, prefs, context=context)
        assert result.reasoning.endswith("aligns with your previous preferences in our conversation.")


class TestForcedSelection:
    """Tests for select_from_available."""

    def test_empty_raises(self, engine, prefs):
        with pytest.raises(NoCandidatesAvailable):
            engine.select_from_available([], prefs)

    def test_picks_from_supplied_venues(self, engine, prefs):
        venues = [make_venue(id="a", rating=2.0), make_venue(id="b", rating=2.5)]
        result = engine.select_from_available(venues, prefs)
        assert result.selected_venue.id in {"a", "b"}
        assert result.selected_venue.id == "b"
