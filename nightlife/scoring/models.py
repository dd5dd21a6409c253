from __future__ import annotations

from pydantic import BaseModel, Field


class ScoringInput(BaseModel):
    """Raw signals for one venue. ``None`` means the signal is unavailable."""

    venue_id: str
    venue_slug: str | None = None
    primary_rating: float | None = Field(default=None, ge=0.0, le=5.0, allow_inf_nan=False)
    secondary_rating: float | None = Field(default=None, ge=0.0, le=5.0, allow_inf_nan=False)
    recent_review_count: int = Field(default=0, ge=0)
    total_review_count: int = Field(default=0, ge=0)
    active_deals_count: int = Field(default=0, ge=0)
    has_happy_hour_now: bool = False
    has_event_tonight: bool = False
    is_open_now: bool = False
    user_distance: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    previous_rank: int | None = Field(default=None, ge=1)
    current_rank: int | None = Field(default=None, ge=1)
    expert_boost_multiplier: float = Field(default=1.0, ge=1.0, allow_inf_nan=False)
    social_buzz_score: float | None = Field(default=None, ge=0.0, le=100.0, allow_inf_nan=False)


class ScoreBreakdown(BaseModel):
    """Per-factor 0-100 scores before weighting. ``None`` marks a factor that did not contribute."""

    primary_rating: float | None = None
    secondary_rating: float | None = None
    review_velocity: float
    deals: float
    events: float
    social_buzz: float
    proximity: float | None = None
    open_now: float
    trending: float | None = None
    expert_boost: float = 0.0
    base_score: float
    total: float


class Reason(BaseModel):
    tag: str
    text: str


class ScoringResult(BaseModel):
    power_score: float
    breakdown: ScoreBreakdown
    reasons: list[Reason] = Field(default_factory=list)
    explanation: str
