"""
Boundary validation for selection requests.

Query strings such as ``lat=nan`` or ``radius=inf`` parse as floats, and
would flow straight through the distance and score maths as NaN. Every
numeric parameter is checked here, before the pipeline runs.
"""
from __future__ import annotations

import math
from datetime import datetime

from ..geo.models import Coordinates
from ..trends.analyzer import format_period, parse_period
from ..trends.models import TrendDirection
from .config import DEFAULT_SELECTION_CONFIG, SelectionConfig
from .models import NearbySort, SelectionMode, SelectionQuery

LOCATION_REQUIRED = {SelectionMode.tonight, SelectionMode.nearby}


class InvalidQueryError(ValueError):
    """A request parameter is missing or malformed (client fault)."""


def require_finite(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise InvalidQueryError(f"{name} must be a finite number")
    return value


def resolve_location(
    lat: float | None,
    lng: float | None,
    required: bool,
) -> Coordinates | None:
    if lat is None and lng is None:
        if required:
            raise InvalidQueryError("Latitude and longitude are required")
        return None
    if lat is None or lng is None:
        raise InvalidQueryError("Latitude and longitude must be provided together")

    lat = require_finite("lat", lat)
    lng = require_finite("lng", lng)
    if not -90.0 <= lat <= 90.0:
        raise InvalidQueryError("lat must be between -90 and 90")
    if not -180.0 <= lng <= 180.0:
        raise InvalidQueryError("lng must be between -180 and 180")
    return Coordinates(latitude=lat, longitude=lng)


def resolve_radius(radius: float | None, default: float, maximum: float) -> float:
    if radius is None:
        return default
    radius = require_finite("radius", radius)
    if radius <= 0 or radius > maximum:
        raise InvalidQueryError(f"radius must be greater than 0 and at most {maximum:g} miles")
    return radius


def resolve_limit(limit: int | None, default: int, maximum: int) -> int:
    if limit is None:
        return default
    if limit < 1 or limit > maximum:
        raise InvalidQueryError(f"limit must be between 1 and {maximum}")
    return limit


def resolve_period(
    period: str | None,
    month: int | None = None,
    year: int | None = None,
    now: datetime | None = None,
) -> str | None:
    """
    Normalise ``period`` (``YYYY-MM``) or ``month``/``year`` into a period string.

    Returns ``None`` when nothing was requested; the pipeline then falls back
    to the catalog's latest period.
    """
    if period is not None:
        try:
            parse_period(period)
        except ValueError as exc:
            raise InvalidQueryError(str(exc)) from exc
        return period

    if month is None and year is None:
        return None
    if month is None:
        raise InvalidQueryError("month is required when year is given")
    if not 1 <= month <= 12:
        raise InvalidQueryError("month must be between 1 and 12")
    if year is None:
        year = (now or datetime.now()).year
    if not 1 <= year <= 9999:
        raise InvalidQueryError("year is out of range")
    return format_period(year, month)


def build_query(
    mode: SelectionMode,
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = None,
    limit: int | None = None,
    category: str | None = None,
    sort: NearbySort | None = None,
    period: str | None = None,
    month: int | None = None,
    year: int | None = None,
    direction: TrendDirection | None = None,
    config: SelectionConfig = DEFAULT_SELECTION_CONFIG,
) -> SelectionQuery:
    defaults = config.defaults_for(mode.value)

    location = resolve_location(lat, lng, required=mode in LOCATION_REQUIRED)
    radius_miles = resolve_radius(radius, defaults.radius_miles, config.max_radius_miles)
    resolved_limit = resolve_limit(limit, defaults.limit, config.max_limit)

    resolved_period = None
    if mode in (SelectionMode.monthly, SelectionMode.trending):
        resolved_period = resolve_period(period, month, year)

    category = category.strip() if category else None
    if category == "all":
        category = None

    return SelectionQuery(
        mode=mode,
        location=location,
        radius_miles=radius_miles,
        limit=resolved_limit,
        category=category or None,
        sort=sort or NearbySort.distance,
        period=resolved_period,
        direction=direction,
    )
