from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..catalog.data_store import VenueCatalog
from ..catalog.models import Deal, Event, Ranking, Venue
from ..geo.distance import bounding_box, distance
from ..scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from ..scoring.engine import calculate_power_score
from ..scoring.models import ScoringInput, ScoringResult
from ..trends.analyzer import determine_trend
from ..trends.models import Trend, TrendDirection
from .config import DEFAULT_SELECTION_CONFIG, SelectionConfig
from .models import (
    NearbySort,
    SelectionMode,
    SelectionQuery,
    SelectionResponse,
    VenueResult,
)
from .time_windows import active_deals_now, events_today, happy_hour_active, local_now

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """A venue moving through the pipeline, with everything attached so far."""

    venue: Venue
    distance: float | None = None
    active_deals: list[Deal] = field(default_factory=list)
    events_today: list[Event] = field(default_factory=list)
    happy_hour: bool = False
    is_open: bool = False
    ranking: Ranking | None = None
    score: ScoringResult | None = None

    @property
    def has_deals(self) -> bool:
        return bool(self.active_deals)

    @property
    def has_events(self) -> bool:
        return bool(self.events_today)

    @property
    def power_score(self) -> float:
        return self.score.power_score if self.score else 0.0

    @property
    def trend(self) -> Trend | None:
        if self.ranking is None:
            return None
        return determine_trend(self.ranking.rank, self.ranking.previous_rank)


# ── Stages ───────────────────────────────────────────────────────────────


def geo_filter(
    catalog: VenueCatalog,
    query: SelectionQuery,
) -> list[Candidate]:
    """Bounding-box pre-filter through the catalog, then the exact distance re-filter."""
    if query.location is None:
        return [Candidate(venue=v) for v in catalog.venues(query.category)]

    box = bounding_box(query.location, query.radius_miles)
    in_box = catalog.venues_in_box(box, query.category)

    candidates = []
    for venue in in_box:
        miles = distance(query.location, venue.location)
        if miles <= query.radius_miles:
            candidates.append(Candidate(venue=venue, distance=miles))

    logger.debug("geo filter: %d in box, %d within %.2f mi", len(in_box), len(candidates), query.radius_miles)
    return candidates


def attach_time_windows(
    candidates: list[Candidate],
    catalog: VenueCatalog,
    now: datetime,
    timezone: str,
) -> None:
    for c in candidates:
        c.active_deals = active_deals_now(c.venue.deals, now)
        c.events_today = events_today(c.venue.events, now, timezone)
        c.happy_hour = happy_hour_active(c.active_deals)
        c.is_open = catalog.is_open(c.venue, now)


def scoring_input_for(candidate: Candidate, scoring_config: ScoringConfig) -> ScoringInput:
    venue = candidate.venue
    primary = venue.rating_from(scoring_config.primary_provider)
    secondary = venue.rating_from(scoring_config.secondary_provider)

    # Review counts come from the primary provider when it has data.
    volume = primary or secondary
    total_reviews = volume.review_count if volume else 0
    if volume is not None and volume.recent_review_count is not None:
        recent_reviews = volume.recent_review_count
    else:
        recent_reviews = round(total_reviews * 0.1)

    ranking = candidate.ranking
    return ScoringInput(
        venue_id=venue.id,
        venue_slug=venue.slug,
        primary_rating=primary.value if primary else None,
        secondary_rating=secondary.value if secondary else None,
        recent_review_count=recent_reviews,
        total_review_count=total_reviews,
        active_deals_count=len(candidate.active_deals),
        has_happy_hour_now=candidate.happy_hour,
        has_event_tonight=candidate.has_events,
        is_open_now=candidate.is_open,
        user_distance=candidate.distance,
        previous_rank=ranking.previous_rank if ranking else None,
        current_rank=ranking.rank if ranking else None,
        expert_boost_multiplier=venue.expert_boost_multiplier,
        social_buzz_score=venue.social_buzz_score,
    )


def attach_scores(candidates: list[Candidate], scoring_config: ScoringConfig) -> None:
    for c in candidates:
        c.score = calculate_power_score(scoring_input_for(c, scoring_config), scoring_config)


# ── Orderings ────────────────────────────────────────────────────────────
# Every key ends with the venue id so equal keys never depend on catalog order.


def tonight_key(c: Candidate) -> tuple:
    return (not c.has_deals, not c.has_events, -c.power_score, c.venue.id)


def distance_key(c: Candidate) -> tuple:
    return (c.distance if c.distance is not None else math.inf, c.venue.id)


def score_key(c: Candidate) -> tuple:
    return (-c.power_score, c.venue.id)


def rank_key(c: Candidate) -> tuple:
    return (c.ranking.rank if c.ranking else math.inf, c.venue.id)


def _rating_key(scoring_config: ScoringConfig) -> Callable[[Candidate], tuple]:
    def key(c: Candidate) -> tuple:
        rating = c.venue.rating_from(scoring_config.primary_provider)
        return (-(rating.value if rating else 0.0), c.venue.id)
    return key


def trending_key(c: Candidate) -> tuple:
    trend = c.trend
    return (trend.direction != TrendDirection.up, -trend.magnitude, c.ranking.rank, c.venue.id)


# ── Pipeline ─────────────────────────────────────────────────────────────


def _to_result(c: Candidate) -> VenueResult:
    venue = c.venue
    ranking = c.ranking
    return VenueResult(
        id=venue.id,
        name=venue.name,
        slug=venue.slug,
        category=venue.category,
        city=venue.city,
        latitude=venue.location.latitude,
        longitude=venue.location.longitude,
        is_expert_pick=venue.is_expert_pick,
        distance=c.distance,
        power_score=c.score.power_score,
        breakdown=c.score.breakdown,
        has_deals_tonight=c.has_deals,
        has_events_tonight=c.has_events,
        happy_hour_active=c.happy_hour,
        is_open_now=c.is_open,
        active_deals=c.active_deals,
        events_tonight=c.events_today,
        score_explanation=c.score.explanation,
        reasons=c.score.reasons,
        rank=ranking.rank if ranking else None,
        previous_rank=ranking.previous_rank if ranking else None,
        trend=c.trend,
    )


def _resolve_rankings(
    candidates: list[Candidate],
    catalog: VenueCatalog,
    query: SelectionQuery,
) -> tuple[str | None, list[Candidate]]:
    """Attach rankings; period views keep only venues ranked in the period."""
    if query.mode in (SelectionMode.tonight, SelectionMode.nearby):
        for c in candidates:
            c.ranking = c.venue.ranking
        return None, candidates

    period = query.period or catalog.latest_period()
    if period is None:
        return None, []

    rankings = catalog.rankings_for(period)
    ranked = []
    for c in candidates:
        c.ranking = rankings.get(c.venue.id)
        if c.ranking is not None:
            ranked.append(c)
    return period, ranked


def _order(
    candidates: list[Candidate],
    query: SelectionQuery,
    scoring_config: ScoringConfig,
) -> list[Candidate]:
    if query.mode == SelectionMode.tonight:
        return sorted(candidates, key=tonight_key)

    if query.mode == SelectionMode.nearby:
        keys = {
            NearbySort.distance: distance_key,
            NearbySort.score: score_key,
            NearbySort.rating: _rating_key(scoring_config),
            NearbySort.rank: rank_key,
        }
        return sorted(candidates, key=keys[query.sort])

    if query.mode == SelectionMode.monthly:
        return sorted(candidates, key=rank_key)

    movers = [c for c in candidates if c.trend.direction in (TrendDirection.up, TrendDirection.down)]
    if query.direction is not None:
        movers = [c for c in movers if c.trend.direction == query.direction]
    return sorted(movers, key=trending_key)


def select_venues(
    query: SelectionQuery,
    catalog: VenueCatalog,
    now: datetime | None = None,
    config: SelectionConfig = DEFAULT_SELECTION_CONFIG,
    scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> SelectionResponse:
    """
    Run the selection pipeline for one request.

    Stages: geo pre-filter, exact distance filter, time-window attachment,
    score attachment, mode ordering, limit. The response is built only
    after every stage has completed.
    """
    now_local = local_now(config.timezone, now)

    candidates = geo_filter(catalog, query)
    period, candidates = _resolve_rankings(candidates, catalog, query)
    attach_time_windows(candidates, catalog, now_local, config.timezone)
    attach_scores(candidates, scoring_config)

    ordered = _order(candidates, query, scoring_config)
    selected = ordered[: query.limit]

    logger.debug(
        "%s selection: %d candidates, %d ordered, %d returned",
        query.mode.value, len(candidates), len(ordered), len(selected),
    )

    return SelectionResponse(
        mode=query.mode,
        period=period,
        venues=[_to_result(c) for c in selected],
        total_candidates=len(ordered),
        timestamp=now if now is not None else datetime.now().astimezone(),
    )
