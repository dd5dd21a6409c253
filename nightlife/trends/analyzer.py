from __future__ import annotations

import re
from typing import Iterable, Mapping

from ..catalog.models import Ranking
from .models import Trend, TrendDirection

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def determine_trend(current_rank: int, previous_rank: int | None) -> Trend:
    """Compare two 1-based ranks; a numerically smaller rank is better."""
    if previous_rank is None:
        return Trend(direction=TrendDirection.new, magnitude=0)

    change = previous_rank - current_rank
    if change > 0:
        return Trend(direction=TrendDirection.up, magnitude=change)
    if change < 0:
        return Trend(direction=TrendDirection.down, magnitude=abs(change))
    return Trend(direction=TrendDirection.stable, magnitude=0)


def parse_period(period: str) -> tuple[int, int]:
    """Split ``"YYYY-MM"`` into ``(year, month)``. Raises ``ValueError`` on bad input."""
    match = _PERIOD_RE.match(period)
    if not match:
        raise ValueError(f"Invalid period {period!r}, expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period {period!r}")
    return year, month


def format_period(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def previous_period(period: str) -> str:
    year, month = parse_period(period)
    if month == 1:
        return format_period(year - 1, 12)
    return format_period(year, month - 1)


def assign_ranks(
    scores: Iterable[tuple[str, float]],
    previous_ranks: Mapping[str, int],
    period: str,
) -> list[Ranking]:
    """
    Rank ``(venue_id, score)`` pairs for one period.

    Scores sort descending; exactly equal scores fall back to venue id
    ascending so the result never depends on input order. Ranks are the
    contiguous sequence 1..N.
    """
    ordered = sorted(scores, key=lambda pair: (-pair[1], pair[0]))

    rankings: list[Ranking] = []
    for idx, (venue_id, score) in enumerate(ordered, start=1):
        previous = previous_ranks.get(venue_id)
        trend = determine_trend(idx, previous)
        rankings.append(Ranking(
            venue_id=venue_id,
            period=period,
            score=score,
            rank=idx,
            previous_rank=previous,
            trend_direction=trend.direction,
            trend_magnitude=trend.magnitude,
        ))
    return rankings
