"""
Offline job that writes a monthly ranking snapshot.

Usage:
    python -m nightlife.trends.snapshot [YYYY-MM]
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..catalog.data_store import FrameCatalog, get_catalog
from ..catalog.models import Ranking
from ..scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from ..selection.config import DEFAULT_SELECTION_CONFIG
from ..selection.pipeline import Candidate, attach_scores, attach_time_windows
from ..selection.time_windows import local_now
from .analyzer import assign_ranks, format_period, previous_period

logger = logging.getLogger(__name__)


def compute_snapshot(
    catalog: FrameCatalog,
    period: str,
    reference_time: datetime,
    scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    timezone: str = DEFAULT_SELECTION_CONFIG.timezone,
) -> list[Ranking]:
    """
    Score every catalog venue at ``reference_time`` and rank the period.

    There is no requester, so proximity never contributes. Momentum and
    previous ranks both come from the period before ``period``, never from
    ``period`` itself, so re-running a period gives the same result.
    """
    prior = catalog.rankings_for(previous_period(period))

    candidates = [Candidate(venue=v, ranking=prior.get(v.id)) for v in catalog.venues()]
    attach_time_windows(candidates, catalog, reference_time, timezone)
    attach_scores(candidates, scoring_config)

    previous_ranks = {venue_id: r.rank for venue_id, r in prior.items()}

    return assign_ranks(
        ((c.venue.id, c.power_score) for c in candidates),
        previous_ranks,
        period,
    )


def run_snapshot(
    period: str | None = None,
    catalog: FrameCatalog | None = None,
    reference_time: datetime | None = None,
) -> list[Ranking]:
    catalog = catalog or get_catalog()
    now = local_now(DEFAULT_SELECTION_CONFIG.timezone, reference_time)
    period = period or format_period(now.year, now.month)

    rankings = compute_snapshot(catalog, period, now)
    catalog.replace_period(period, rankings)
    logger.info("Snapshot %s: ranked %d venues", period, len(rankings))
    return rankings


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = run_snapshot(sys.argv[1] if len(sys.argv) > 1 else None)
    print(f"Snapshot complete. Ranked {len(result)} venues.")
