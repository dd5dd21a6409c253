"""
Power score calculation.

Every venue signal is first mapped onto a 0-100 factor score, the factor
scores are combined with the fixed weight table into a base score, and an
expert boost (if any) multiplies the base score:

    power_score = round(sum(weight_i * factor_i) * expert_boost, 1)

Factors whose signal is unavailable contribute nothing; they are reported
as ``None`` in the breakdown rather than as zero.
"""
from __future__ import annotations

import math

from .config import DEFAULT_SCORING_CONFIG, ExpertPick, ScoringConfig, ScoringWeights
from .models import Reason, ScoreBreakdown, ScoringInput, ScoringResult

NEUTRAL_SCORE = 50.0
FULL_SCORE = 100.0

PROXIMITY_FULL_MILES = 1.0
PROXIMITY_ZERO_MILES = 25.0
PROXIMITY_DECAY_RATE = 0.15

TRENDING_MAX_CHANGE = 50


def normalize_rating(rating: float) -> float:
    """
    Map a 0-5 star rating onto 0-100.

    Ratings below 3.0 are penalised: they only reach half of their linear
    share. From 3.0 upwards the scale is linear from 50 to 100.
    """
    if rating < 3.0:
        return (rating / 5.0) * 50.0
    return 50.0 + ((rating - 3.0) / 2.0) * 50.0


def review_velocity_score(recent_count: int, total_count: int) -> float:
    """Recent reviews relative to 10% of the historical volume; 50 for venues without reviews."""
    if total_count == 0:
        return NEUTRAL_SCORE
    ratio = recent_count / max(total_count * 0.1, 1)
    return min(FULL_SCORE, NEUTRAL_SCORE + ratio * 25.0)


def deals_score(active_deals: int, has_happy_hour: bool) -> float:
    score = min(active_deals * 15.0, 60.0)
    if has_happy_hour:
        score += 40.0
    return min(score, FULL_SCORE)


def proximity_score(distance_miles: float) -> int:
    """Full credit within a mile, nothing from 25 miles, exponential decay in between."""
    if distance_miles <= PROXIMITY_FULL_MILES:
        return 100
    if distance_miles >= PROXIMITY_ZERO_MILES:
        return 0
    return round(100 * math.exp(-PROXIMITY_DECAY_RATE * (distance_miles - PROXIMITY_FULL_MILES)))


def trending_score(previous_rank: int, current_rank: int) -> float:
    change = previous_rank - current_rank  # positive = moved up
    capped = max(-TRENDING_MAX_CHANGE, min(TRENDING_MAX_CHANGE, change))
    return NEUTRAL_SCORE + capped


def _flag_score(flag: bool) -> float:
    return FULL_SCORE if flag else 0.0


def weighted_base_score(breakdown: ScoreBreakdown, weights: ScoringWeights) -> float:
    contributions = [
        (breakdown.primary_rating, weights.primary_rating),
        (breakdown.secondary_rating, weights.secondary_rating),
        (breakdown.review_velocity, weights.review_velocity),
        (breakdown.deals, weights.deals),
        (breakdown.events, weights.events_tonight),
        (breakdown.social_buzz, weights.social_buzz),
        (breakdown.proximity, weights.proximity),
        (breakdown.open_now, weights.open_now),
        (breakdown.trending, weights.trending),
    ]
    return sum(score * weight for score, weight in contributions if score is not None)


def _resolve_expert_boost(
    scoring_input: ScoringInput,
    config: ScoringConfig,
) -> tuple[float, ExpertPick | None]:
    """Registry entries take precedence over the venue's own multiplier."""
    pick = None
    if scoring_input.venue_slug:
        pick = config.expert_picks.get(scoring_input.venue_slug)
    if pick is not None:
        return pick.boost, pick
    if scoring_input.expert_boost_multiplier > 1:
        return scoring_input.expert_boost_multiplier, None
    return 1.0, None


def explain(
    breakdown: ScoreBreakdown,
    expert_pick: ExpertPick | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[Reason]:
    """Return the reasons triggered by ``breakdown``, in display order."""
    reasons: list[Reason] = []

    primary = breakdown.primary_rating or 0.0
    if primary >= 90:
        reasons.append(Reason(tag="primary_rating_excellent", text=f"Excellent {config.primary_label} reviews"))
    elif primary >= 80:
        reasons.append(Reason(tag="primary_rating_strong", text=f"Strong {config.primary_label} rating"))

    if (breakdown.secondary_rating or 0.0) >= 90:
        reasons.append(Reason(tag="secondary_rating_top", text=f"Top {config.secondary_label} rating"))

    if breakdown.deals >= 60:
        reasons.append(Reason(tag="great_deals", text="Great deals tonight"))

    if (breakdown.proximity or 0.0) >= 80:
        reasons.append(Reason(tag="very_close", text="Very close to you"))

    if breakdown.trending is not None:
        if breakdown.trending >= 70:
            reasons.append(Reason(tag="trending_up", text="Trending up"))
        elif breakdown.trending <= 30:
            reasons.append(Reason(tag="cooling_off", text="Cooling off"))

    if breakdown.social_buzz >= 85:
        reasons.append(Reason(tag="social_exploding", text="EXPLODING on social media"))
    elif breakdown.social_buzz >= 70:
        reasons.append(Reason(tag="social_buzzing", text="Buzzing on social"))
    elif breakdown.social_buzz >= 50:
        reasons.append(Reason(tag="social_active", text="Active on social"))

    if breakdown.expert_boost > 0:
        if expert_pick is not None:
            reasons.append(Reason(tag="expert_pick", text=f"Expert pick: {expert_pick.reason}"))
        else:
            reasons.append(Reason(tag="expert_pick", text="Expert recommended"))

    return reasons


def join_reasons(reasons: list[Reason], config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> str:
    if not reasons:
        return config.fallback_explanation
    return config.explanation_separator.join(r.text for r in reasons)


def calculate_power_score(
    scoring_input: ScoringInput,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoringResult:
    """Score one venue. Pure: the same input always yields the same result."""
    primary = None
    if scoring_input.primary_rating is not None:
        primary = normalize_rating(scoring_input.primary_rating)

    secondary = None
    if scoring_input.secondary_rating is not None:
        secondary = normalize_rating(scoring_input.secondary_rating)

    proximity = None
    if scoring_input.user_distance is not None:
        proximity = float(proximity_score(scoring_input.user_distance))

    # Momentum needs both snapshots; a venue without history gets no trending credit at all.
    trending = None
    if scoring_input.previous_rank is not None and scoring_input.current_rank is not None:
        trending = trending_score(scoring_input.previous_rank, scoring_input.current_rank)

    buzz = scoring_input.social_buzz_score
    if buzz is None:
        buzz = NEUTRAL_SCORE

    breakdown = ScoreBreakdown(
        primary_rating=primary,
        secondary_rating=secondary,
        review_velocity=review_velocity_score(
            scoring_input.recent_review_count, scoring_input.total_review_count
        ),
        deals=deals_score(scoring_input.active_deals_count, scoring_input.has_happy_hour_now),
        events=_flag_score(scoring_input.has_event_tonight),
        social_buzz=buzz,
        proximity=proximity,
        open_now=_flag_score(scoring_input.is_open_now),
        trending=trending,
        base_score=0.0,
        total=0.0,
    )

    base = weighted_base_score(breakdown, config.weights)
    boost, pick = _resolve_expert_boost(scoring_input, config)
    total = base * boost
    power_score = round(total, 1)

    breakdown = breakdown.model_copy(update={
        "expert_boost": round((boost - 1) * 100, 2),
        "base_score": round(base, 1),
        "total": power_score,
    })

    reasons = explain(breakdown, pick, config)
    return ScoringResult(
        power_score=power_score,
        breakdown=breakdown,
        reasons=reasons,
        explanation=join_reasons(reasons, config),
    )
