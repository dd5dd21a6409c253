from __future__ import annotations

import logging
from datetime import datetime, time
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

import pandas as pd
from pydantic import ValidationError

from ..geo.models import BoundingBox, Coordinates
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .hours import is_open_by_hours
from .models import WEEKDAYS, Deal, Event, OpeningHours, Rating, Ranking, Venue

logger = logging.getLogger(__name__)

OpenPredicate = Callable[[Venue, datetime], bool]

VENUE_COLUMNS = [
    "id", "name", "slug", "category", "city", "latitude", "longitude",
    "is_expert_pick", "expert_boost_multiplier",
]
RATING_COLUMNS = ["venue_id", "source", "value", "review_count", "recent_review_count"]
DEAL_COLUMNS = ["venue_id", "title", "deal_type", "days", "start_time", "end_time", "is_active"]
EVENT_COLUMNS = ["venue_id", "title", "event_type", "start_time"]
HOURS_COLUMNS = ["venue_id", "day", "open_time", "close_time"]
RANKING_COLUMNS = [
    "venue_id", "period", "score", "rank", "previous_rank",
    "trend_direction", "trend_magnitude",
]


class VenueCatalog(Protocol):
    """What the selection pipeline needs from the data layer."""

    def venues_in_box(self, box: BoundingBox, category: str | None = None) -> list[Venue]: ...

    def venues(self, category: str | None = None) -> list[Venue]: ...

    def rankings_for(self, period: str) -> dict[str, Ranking]: ...

    def latest_period(self) -> str | None: ...

    def is_open(self, venue: Venue, now: datetime) -> bool: ...


# ── Cell parsing ─────────────────────────────────────────────────────────


def _value(row: pd.Series, column: str) -> Any:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return value


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def _as_time(value: Any) -> time | None:
    if value is None or str(value).strip() == "":
        return None
    return time.fromisoformat(str(value).strip())


def _as_days(value: Any) -> frozenset[int] | None:
    """``"mon|fri"`` -> ``{0, 4}``; empty or ``"all"`` -> ``None`` (every day)."""
    if value is None:
        return None
    raw = str(value).strip().lower()
    if raw in ("", "all"):
        return None
    return frozenset(WEEKDAYS.index(part.strip()[:3]) for part in raw.split("|") if part.strip())


def _as_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _read_table(path: Path, columns: list[str]) -> pd.DataFrame:
    if not path.exists():
        logger.info("Catalog table %s not found, using an empty table", path.name)
        return pd.DataFrame(columns=columns)
    return pd.read_csv(path, dtype={"id": str, "venue_id": str, "period": str})


# ── Catalog ──────────────────────────────────────────────────────────────


class FrameCatalog:
    """
    In-memory venue catalog backed by pandas tables.

    The venue table keeps its coordinate columns so bounding-box lookups are
    a vectorised range mask; the child tables are folded into immutable
    :class:`Venue` aggregates once at construction.
    """

    def __init__(
        self,
        venues: pd.DataFrame,
        ratings: pd.DataFrame | None = None,
        deals: pd.DataFrame | None = None,
        events: pd.DataFrame | None = None,
        hours: pd.DataFrame | None = None,
        rankings: pd.DataFrame | None = None,
        open_predicate: OpenPredicate = is_open_by_hours,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> None:
        self.config = config
        self._open_predicate = open_predicate

        ratings_by_venue = self._group(ratings, self._build_rating)
        deals_by_venue = self._group(deals, self._build_deal)
        events_by_venue = self._group(events, self._build_event)
        hours_by_venue = self._group(hours, self._build_hours)

        self._rankings: dict[str, dict[str, Ranking]] = {}
        for ranking in self._build_many(rankings, self._build_ranking):
            self._rankings.setdefault(ranking.period, {})[ranking.venue_id] = ranking

        self._venues: dict[str, Venue] = {}
        for _, row in venues.iterrows():
            venue_id = str(row["id"])
            try:
                self._venues[venue_id] = Venue(
                    id=venue_id,
                    name=row["name"],
                    slug=row["slug"],
                    category=row["category"],
                    city=_value(row, "city") or "",
                    location=Coordinates(latitude=row["latitude"], longitude=row["longitude"]),
                    ratings=ratings_by_venue.get(venue_id, []),
                    deals=deals_by_venue.get(venue_id, []),
                    events=events_by_venue.get(venue_id, []),
                    hours=hours_by_venue.get(venue_id, []),
                    is_expert_pick=_as_bool(_value(row, "is_expert_pick")),
                    expert_boost_multiplier=_value(row, "expert_boost_multiplier") or 1.0,
                    social_buzz_score=_value(row, "social_buzz_score"),
                )
            except (ValidationError, KeyError, TypeError) as exc:
                logger.warning("Skipping malformed venue row %s: %s", venue_id, exc)

        frame = venues.copy()
        frame["id"] = frame["id"].astype(str)
        self._frame = frame.loc[frame["id"].isin(list(self._venues))].sort_values("id")
        self._attach_current_rankings()

        logger.info(
            "Catalog loaded: %d venues, %d ranking periods",
            len(self._venues), len(self._rankings),
        )

    @classmethod
    def from_directory(
        cls,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
        open_predicate: OpenPredicate = is_open_by_hours,
    ) -> FrameCatalog:
        return cls(
            venues=_read_table(config.path(config.venues_filename), VENUE_COLUMNS),
            ratings=_read_table(config.path(config.ratings_filename), RATING_COLUMNS),
            deals=_read_table(config.path(config.deals_filename), DEAL_COLUMNS),
            events=_read_table(config.path(config.events_filename), EVENT_COLUMNS),
            hours=_read_table(config.path(config.hours_filename), HOURS_COLUMNS),
            rankings=_read_table(config.path(config.rankings_filename), RANKING_COLUMNS),
            open_predicate=open_predicate,
            config=config,
        )

    # -- row builders -----------------------------------------------------

    @staticmethod
    def _build_rating(row: pd.Series) -> Rating:
        return Rating(
            source=str(row["source"]).strip().lower(),
            value=row["value"],
            review_count=_as_int(_value(row, "review_count")) or 0,
            recent_review_count=_as_int(_value(row, "recent_review_count")),
        )

    @staticmethod
    def _build_deal(row: pd.Series) -> Deal:
        return Deal(
            title=row["title"],
            deal_type=_value(row, "deal_type") or "daily_special",
            days=_as_days(_value(row, "days")),
            start_time=_as_time(_value(row, "start_time")),
            end_time=_as_time(_value(row, "end_time")),
            is_active=_as_bool(_value(row, "is_active"), default=True),
        )

    @staticmethod
    def _build_event(row: pd.Series) -> Event:
        return Event(
            title=row["title"],
            event_type=_value(row, "event_type") or "special_event",
            start_time=datetime.fromisoformat(str(row["start_time"]).strip()),
        )

    @staticmethod
    def _build_hours(row: pd.Series) -> OpeningHours:
        return OpeningHours(
            day=WEEKDAYS.index(str(row["day"]).strip().lower()[:3]),
            open_time=_as_time(row["open_time"]),
            close_time=_as_time(row["close_time"]),
        )

    @staticmethod
    def _build_ranking(row: pd.Series) -> Ranking:
        return Ranking(
            venue_id=str(row["venue_id"]),
            period=str(row["period"]),
            score=row["score"],
            rank=int(row["rank"]),
            previous_rank=_as_int(_value(row, "previous_rank")),
            trend_direction=_value(row, "trend_direction") or "new",
            trend_magnitude=_as_int(_value(row, "trend_magnitude")) or 0,
        )

    @staticmethod
    def _build_many(frame: pd.DataFrame | None, build: Callable[[pd.Series], Any]) -> list[Any]:
        if frame is None or frame.empty:
            return []
        built = []
        for idx, row in frame.iterrows():
            try:
                built.append(build(row))
            except (ValidationError, ValueError, KeyError, TypeError) as exc:
                logger.warning("Skipping malformed catalog row %s: %s", idx, exc)
        return built

    def _group(self, frame: pd.DataFrame | None, build: Callable[[pd.Series], Any]) -> dict[str, list[Any]]:
        grouped: dict[str, list[Any]] = {}
        if frame is None or frame.empty:
            return grouped
        for venue_id, rows in frame.groupby(frame["venue_id"].astype(str), sort=True):
            items = self._build_many(rows, build)
            if items:
                grouped[venue_id] = items
        return grouped

    def _attach_current_rankings(self) -> None:
        latest = self.latest_period()
        current = self._rankings.get(latest, {}) if latest else {}
        self._venues = {
            vid: venue.model_copy(update={"ranking": current.get(vid)})
            for vid, venue in self._venues.items()
        }

    # -- lookups ----------------------------------------------------------

    def venues_in_box(self, box: BoundingBox, category: str | None = None) -> list[Venue]:
        frame = self._frame
        lng = frame["longitude"]
        if box.crosses_antimeridian:
            lng_mask = (lng >= box.min_lng) | (lng <= box.max_lng)
        else:
            lng_mask = lng.between(box.min_lng, box.max_lng)
        mask = frame["latitude"].between(box.min_lat, box.max_lat) & lng_mask
        if category:
            mask = mask & (frame["category"] == category)
        return [self._venues[vid] for vid in frame.loc[mask, "id"]]

    def venues(self, category: str | None = None) -> list[Venue]:
        frame = self._frame
        if category:
            frame = frame.loc[frame["category"] == category]
        return [self._venues[vid] for vid in frame["id"]]

    def get_venue(self, venue_id: str) -> Venue | None:
        return self._venues.get(venue_id)

    def rankings_for(self, period: str) -> dict[str, Ranking]:
        return dict(self._rankings.get(period, {}))

    def periods(self) -> list[str]:
        return sorted(self._rankings)

    def latest_period(self) -> str | None:
        periods = self.periods()
        return periods[-1] if periods else None

    def is_open(self, venue: Venue, now: datetime) -> bool:
        return self._open_predicate(venue, now)

    # -- writes -----------------------------------------------------------

    def replace_period(self, period: str, rankings: Iterable[Ranking]) -> None:
        """Swap in the snapshot for ``period`` and persist the rankings table."""
        self._rankings[period] = {r.venue_id: r for r in rankings}
        self._attach_current_rankings()

        rows = [
            {
                "venue_id": r.venue_id,
                "period": r.period,
                "score": r.score,
                "rank": r.rank,
                "previous_rank": r.previous_rank,
                "trend_direction": r.trend_direction.value,
                "trend_magnitude": r.trend_magnitude,
            }
            for p in self.periods()
            for r in sorted(self._rankings[p].values(), key=lambda item: item.rank)
        ]
        table = pd.DataFrame(rows, columns=RANKING_COLUMNS)
        table["previous_rank"] = table["previous_rank"].astype("Int64")

        self.config.data_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.config.path(self.config.rankings_filename)
        table.to_csv(output_path, index=False)
        logger.info("Wrote %d rankings for %s to %s", len(self._rankings[period]), period, output_path)


_catalog: FrameCatalog | None = None


def get_catalog() -> FrameCatalog:
    """Return the process-wide catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = FrameCatalog.from_directory()
    return _catalog
