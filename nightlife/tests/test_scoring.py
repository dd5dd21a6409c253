import math
from dataclasses import fields

import pytest
from pydantic import ValidationError

from nightlife.scoring.config import (
    DEFAULT_SCORING_CONFIG,
    DEFAULT_SCORING_WEIGHTS,
    EXPERT_PICKS,
    ScoringWeights,
)
from nightlife.scoring.engine import (
    calculate_power_score,
    deals_score,
    normalize_rating,
    proximity_score,
    review_velocity_score,
    trending_score,
)
from nightlife.scoring.methodology import methodology, weight_explanation
from nightlife.scoring.models import ScoringInput

EXAMPLE_INPUT = ScoringInput(
    venue_id="example",
    primary_rating=4.5,
    secondary_rating=4.0,
    recent_review_count=50,
    total_review_count=500,
    active_deals_count=2,
    has_happy_hour_now=True,
    has_event_tonight=False,
    is_open_now=True,
    user_distance=0.5,
    previous_rank=5,
    current_rank=3,
    expert_boost_multiplier=1.5,
    social_buzz_score=None,
)


# ── Weights ──────────────────────────────────────────────────────────────


def test_default_weights_sum_to_one():
    assert DEFAULT_SCORING_WEIGHTS.total() == 1.0
    assert math.fsum(getattr(DEFAULT_SCORING_WEIGHTS, f.name) for f in fields(ScoringWeights)) == 1.0


def test_weights_that_do_not_sum_to_one_are_rejected():
    with pytest.raises(ValueError):
        ScoringWeights(primary_rating=0.5)


# ── Factor scores ────────────────────────────────────────────────────────


def test_normalize_rating_anchor_points():
    assert normalize_rating(0.0) == 0.0
    assert normalize_rating(3.0) == 50.0
    assert normalize_rating(5.0) == 100.0
    assert normalize_rating(2.0) == 20.0


def test_normalize_rating_is_monotonic():
    ratings = [r / 10 for r in range(0, 51)]
    scores = [normalize_rating(r) for r in ratings]
    assert scores == sorted(scores)


def test_review_velocity_is_neutral_without_reviews():
    assert review_velocity_score(0, 0) == 50.0


def test_review_velocity_caps_at_100():
    assert review_velocity_score(500, 500) == 100.0


def test_deals_score_caps():
    assert deals_score(10, False) == 60.0
    assert deals_score(10, True) == 100.0
    assert deals_score(0, True) == 40.0


def test_proximity_bounds():
    assert proximity_score(0.0) == 100
    assert proximity_score(1.0) == 100
    assert proximity_score(25.0) == 0
    assert proximity_score(40.0) == 0


def test_proximity_decays_with_distance():
    scores = [proximity_score(d) for d in (1.5, 3, 5, 8, 12, 17, 24)]
    assert scores[0] == 93
    assert all(a > b for a, b in zip(scores, scores[1:]))


def test_trending_score_is_capped():
    assert trending_score(5, 3) == 52
    assert trending_score(100, 1) == 100
    assert trending_score(1, 100) == 0


# ── Power score ──────────────────────────────────────────────────────────


def test_worked_example():
    result = calculate_power_score(EXAMPLE_INPUT)
    b = result.breakdown

    assert b.primary_rating == 87.5
    assert b.secondary_rating == 75.0
    assert b.review_velocity == 75.0
    assert b.deals == 70.0
    assert b.proximity == 100.0
    assert b.trending == 52.0
    assert b.social_buzz == 50.0
    assert b.events == 0.0
    assert b.open_now == 100.0
    assert b.base_score == pytest.approx(62.2)
    assert b.expert_boost == 50.0
    assert result.power_score == 93.3
    assert b.total == result.power_score


def test_scoring_is_idempotent():
    assert calculate_power_score(EXAMPLE_INPUT) == calculate_power_score(EXAMPLE_INPUT)


def test_unknown_factors_do_not_contribute():
    result = calculate_power_score(ScoringInput(venue_id="bare", social_buzz_score=0))
    b = result.breakdown

    assert b.primary_rating is None
    assert b.secondary_rating is None
    assert b.proximity is None
    assert b.trending is None
    # Only review velocity (neutral 50 at 5%) remains.
    assert result.power_score == 2.5


def test_trending_omitted_without_both_ranks():
    only_current = EXAMPLE_INPUT.model_copy(update={"previous_rank": None})
    result = calculate_power_score(only_current)

    assert result.breakdown.trending is None
    assert result.breakdown.base_score == pytest.approx(57.0)


def test_registry_boost_takes_precedence_over_multiplier():
    scoring_input = EXAMPLE_INPUT.model_copy(update={
        "venue_slug": "georges-keep",
        "expert_boost_multiplier": 1.0,
    })
    result = calculate_power_score(scoring_input)

    assert result.breakdown.expert_boost == 15.0
    assert result.power_score == round(62.2 * 1.15, 1)
    tags = [r.tag for r in result.reasons]
    assert "expert_pick" in tags
    assert EXPERT_PICKS["georges-keep"].reason in result.explanation


def test_unboosted_venue_has_no_expert_reason():
    result = calculate_power_score(EXAMPLE_INPUT.model_copy(update={"expert_boost_multiplier": 1.0}))
    assert result.breakdown.expert_boost == 0.0
    assert result.power_score == result.breakdown.base_score
    assert "expert_pick" not in [r.tag for r in result.reasons]


# ── Explanation ──────────────────────────────────────────────────────────


def test_example_reasons_in_display_order():
    result = calculate_power_score(EXAMPLE_INPUT)
    tags = [r.tag for r in result.reasons]

    assert tags == ["primary_rating_strong", "great_deals", "very_close", "social_active", "expert_pick"]
    assert result.explanation == " • ".join(r.text for r in result.reasons)


def test_explanation_falls_back_when_nothing_stands_out():
    result = calculate_power_score(ScoringInput(venue_id="quiet", primary_rating=3.5, social_buzz_score=10))
    assert result.reasons == []
    assert result.explanation == DEFAULT_SCORING_CONFIG.fallback_explanation


def test_falling_venue_is_cooling_off():
    result = calculate_power_score(
        ScoringInput(venue_id="v", previous_rank=1, current_rank=30, social_buzz_score=90)
    )
    tags = [r.tag for r in result.reasons]
    assert "cooling_off" in tags
    assert "social_exploding" in tags


# ── Methodology ──────────────────────────────────────────────────────────


def test_weight_explanation_covers_every_weight():
    rows = weight_explanation()
    assert {row["key"] for row in rows} == {f.name for f in fields(ScoringWeights)}
    assert math.fsum(row["weight"] for row in rows) == 1.0


def test_methodology_lists_expert_picks():
    body = methodology()
    slugs = {pick["slug"] for pick in body["expert_picks"]}
    assert slugs == set(EXPERT_PICKS)


def test_venue_without_rank_history_is_not_cooling_off():
    result = calculate_power_score(ScoringInput(venue_id="fresh", current_rank=4, social_buzz_score=10))
    assert result.breakdown.trending is None
    assert "cooling_off" not in [r.tag for r in result.reasons]


@pytest.mark.parametrize(
    "field",
    ["primary_rating", "secondary_rating", "user_distance", "expert_boost_multiplier", "social_buzz_score"],
)
def test_scoring_input_rejects_non_finite_numbers(field):
    with pytest.raises(ValidationError):
        ScoringInput(venue_id="x", **{field: float("inf")})
    with pytest.raises(ValidationError):
        ScoringInput(venue_id="x", **{field: float("nan")})
