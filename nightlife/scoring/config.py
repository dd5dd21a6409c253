from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class ScoringWeights:
    """
    Weight of each factor in the power score. The table sums to 1.0.

    ``expert_pick`` is part of the published table but is applied as a
    multiplier on the base score, never added to it.
    """

    primary_rating: float = 0.20
    secondary_rating: float = 0.15
    review_velocity: float = 0.05
    deals: float = 0.10
    events_tonight: float = 0.10
    social_buzz: float = 0.05
    proximity: float = 0.10
    open_now: float = 0.05
    expert_pick: float = 0.10
    trending: float = 0.10

    def __post_init__(self) -> None:
        if not math.isclose(self.total(), 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {self.total()}")

    def total(self) -> float:
        return math.fsum(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class ExpertPick:
    boost: float
    reason: str


EXPERT_PICKS: Mapping[str, ExpertPick] = MappingProxyType({
    "georges-keep": ExpertPick(
        boost=1.15,
        reason="Award-winning craft cocktail bar with innovative seasonal menus",
    ),
    "camp-1604": ExpertPick(
        boost=1.12,
        reason="Premier NW SA destination with excellent food and drinks",
    ),
    "kung-fu-saloon": ExpertPick(
        boost=1.10,
        reason="Unique late-night spot with authentic atmosphere",
    ),
    "the-venue": ExpertPick(
        boost=1.10,
        reason="Top Boerne nightlife destination with live entertainment",
    ),
})


@dataclass(frozen=True)
class ScoringConfig:
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    expert_picks: Mapping[str, ExpertPick] = field(default_factory=lambda: EXPERT_PICKS)
    primary_provider: str = "google"
    secondary_provider: str = "yelp"
    primary_label: str = "Google"
    secondary_label: str = "Yelp"
    explanation_separator: str = " • "
    fallback_explanation: str = "Solid local option"


DEFAULT_SCORING_WEIGHTS = ScoringWeights()
DEFAULT_SCORING_CONFIG = ScoringConfig(weights=DEFAULT_SCORING_WEIGHTS)
