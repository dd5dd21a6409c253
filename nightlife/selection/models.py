from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..catalog.models import Deal, Event
from ..geo.models import Coordinates
from ..scoring.models import Reason, ScoreBreakdown
from ..trends.models import Trend, TrendDirection


class SelectionMode(str, Enum):
    tonight = "tonight"
    nearby = "nearby"
    monthly = "monthly"
    trending = "trending"


class NearbySort(str, Enum):
    distance = "distance"
    score = "score"
    rating = "rating"
    rank = "rank"


class SelectionQuery(BaseModel):
    """A validated selection request. Build it through ``validation.build_query``."""

    mode: SelectionMode
    location: Coordinates | None = None
    radius_miles: float = Field(..., gt=0, allow_inf_nan=False)
    limit: int = Field(..., ge=1)
    category: str | None = None
    sort: NearbySort = NearbySort.distance
    period: str | None = None
    direction: TrendDirection | None = None


class VenueResult(BaseModel):
    id: str
    name: str
    slug: str
    category: str
    city: str
    latitude: float
    longitude: float
    is_expert_pick: bool
    distance: float | None = None
    power_score: float
    breakdown: ScoreBreakdown
    has_deals_tonight: bool
    has_events_tonight: bool
    happy_hour_active: bool
    is_open_now: bool
    active_deals: list[Deal] = Field(default_factory=list)
    events_tonight: list[Event] = Field(default_factory=list)
    score_explanation: str
    reasons: list[Reason] = Field(default_factory=list)
    rank: int | None = None
    previous_rank: int | None = None
    trend: Trend | None = None


class SelectionResponse(BaseModel):
    mode: SelectionMode
    period: str | None = None
    venues: list[VenueResult]
    total_candidates: int
    timestamp: datetime
