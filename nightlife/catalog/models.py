from __future__ import annotations

from datetime import datetime, time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..geo.models import Coordinates
from ..trends.models import TrendDirection

WEEKDAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class DealType(str, Enum):
    happy_hour = "happy_hour"
    daily_special = "daily_special"
    event = "event"
    limited_time = "limited_time"
    member_only = "member_only"


class Rating(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str = Field(..., min_length=1)
    value: float = Field(..., ge=0.0, le=5.0, allow_inf_nan=False)
    review_count: int = Field(default=0, ge=0)
    recent_review_count: int | None = Field(default=None, ge=0)


class Deal(BaseModel):
    """A recurring promotion. ``days`` of ``None`` means every day (0 = Monday)."""

    model_config = ConfigDict(frozen=True)

    title: str
    deal_type: DealType = DealType.daily_special
    days: frozenset[int] | None = None
    start_time: time | None = None
    end_time: time | None = None
    is_active: bool = True

    @field_validator("days")
    @classmethod
    def _check_days(cls, v: frozenset[int] | None) -> frozenset[int] | None:
        if v is not None and any(d < 0 or d > 6 for d in v):
            raise ValueError("weekdays must be between 0 (Monday) and 6 (Sunday)")
        return v


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    event_type: str = "special_event"
    start_time: datetime


class OpeningHours(BaseModel):
    """Opening window for one weekday. A close time at or before the open time runs past midnight."""

    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=0, le=6)
    open_time: time
    close_time: time


class Ranking(BaseModel):
    model_config = ConfigDict(frozen=True)

    venue_id: str
    period: str
    score: float
    rank: int = Field(..., ge=1)
    previous_rank: int | None = Field(default=None, ge=1)
    trend_direction: TrendDirection = TrendDirection.new
    trend_magnitude: int = Field(default=0, ge=0)


class Venue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
    category: str
    city: str = ""
    location: Coordinates
    ratings: list[Rating] = Field(default_factory=list)
    deals: list[Deal] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    hours: list[OpeningHours] = Field(default_factory=list)
    is_expert_pick: bool = False
    expert_boost_multiplier: float = Field(default=1.0, ge=1.0, allow_inf_nan=False)
    social_buzz_score: float | None = Field(default=None, ge=0.0, le=100.0, allow_inf_nan=False)
    ranking: Ranking | None = None

    def rating_from(self, source: str) -> Rating | None:
        for rating in self.ratings:
            if rating.source == source:
                return rating
        return None
