from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .catalog.data_store import FrameCatalog, get_catalog
from .scoring.engine import calculate_power_score
from .scoring.methodology import methodology
from .scoring.models import ScoringInput, ScoringResult
from .selection.config import DEFAULT_SELECTION_CONFIG
from .selection.models import NearbySort, SelectionMode, SelectionQuery, SelectionResponse
from .selection.pipeline import select_venues
from .selection.validation import InvalidQueryError, build_query
from .trends.models import TrendDirection

logger = logging.getLogger(__name__)

app = FastAPI(title="Nightlife Power Rankings API", version="1.0.0")


def current_time() -> datetime:
    return datetime.now(ZoneInfo(DEFAULT_SELECTION_CONFIG.timezone))


@app.exception_handler(InvalidQueryError)
def invalid_query(request: Request, exc: InvalidQueryError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def _run(
    query: SelectionQuery,
    catalog: FrameCatalog,
    now: datetime,
    failure_message: str,
) -> SelectionResponse:
    try:
        return select_venues(query, catalog, now=now)
    except Exception:
        logger.exception("Selection pipeline failed for mode=%s", query.mode.value)
        raise HTTPException(status_code=500, detail=failure_message)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/scoring")
def scoring_methodology() -> dict:
    return methodology()


@app.post("/scoring/calculate", response_model=ScoringResult)
def scoring_calculate(body: ScoringInput) -> ScoringResult:
    return calculate_power_score(body)


# ── Venue selections ─────────────────────────────────────────────────────


@app.get("/venues/tonight", response_model=SelectionResponse)
def venues_tonight(
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = None,
    limit: int | None = None,
    category: str | None = None,
    catalog: FrameCatalog = Depends(get_catalog),
    now: datetime = Depends(current_time),
) -> SelectionResponse:
    query = build_query(
        SelectionMode.tonight, lat=lat, lng=lng, radius=radius, limit=limit, category=category,
    )
    return _run(query, catalog, now, "Failed to fetch tonight venues")


@app.get("/venues/nearby", response_model=SelectionResponse)
def venues_nearby(
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = None,
    limit: int | None = None,
    category: str | None = None,
    sort: NearbySort | None = None,
    catalog: FrameCatalog = Depends(get_catalog),
    now: datetime = Depends(current_time),
) -> SelectionResponse:
    query = build_query(
        SelectionMode.nearby,
        lat=lat, lng=lng, radius=radius, limit=limit, category=category, sort=sort,
    )
    return _run(query, catalog, now, "Failed to fetch venues")


# ── Ranking periods ──────────────────────────────────────────────────────


@app.get("/rankings/monthly", response_model=SelectionResponse)
def rankings_monthly(
    period: str | None = None,
    month: int | None = None,
    year: int | None = None,
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = None,
    limit: int | None = None,
    category: str | None = None,
    catalog: FrameCatalog = Depends(get_catalog),
    now: datetime = Depends(current_time),
) -> SelectionResponse:
    query = build_query(
        SelectionMode.monthly,
        lat=lat, lng=lng, radius=radius, limit=limit, category=category,
        period=period, month=month, year=year,
    )
    return _run(query, catalog, now, "Failed to fetch rankings")


@app.get("/rankings/trending", response_model=SelectionResponse)
def rankings_trending(
    period: str | None = None,
    direction: TrendDirection | None = None,
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = None,
    limit: int | None = None,
    category: str | None = None,
    catalog: FrameCatalog = Depends(get_catalog),
    now: datetime = Depends(current_time),
) -> SelectionResponse:
    query = build_query(
        SelectionMode.trending,
        lat=lat, lng=lng, radius=radius, limit=limit, category=category,
        period=period, direction=direction,
    )
    return _run(query, catalog, now, "Failed to fetch trending venues")
