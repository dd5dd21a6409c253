from __future__ import annotations

import math

from .models import BoundingBox, Coordinates

EARTH_RADIUS_MILES = 3959.0
MILES_PER_DEGREE_LAT = 69.0


def _wrap_longitude(lng: float) -> float:
    if -180.0 <= lng <= 180.0:
        return lng
    return (lng + 180.0) % 360.0 - 180.0


def bounding_box(center: Coordinates, radius_miles: float) -> BoundingBox:
    """
    Return a lat/lng box that fully contains the circle of ``radius_miles``
    around ``center``.

    The box over-approximates the circle (corners included), so candidates
    found inside it must be re-filtered with :func:`distance`. Longitudes
    wrap across the antimeridian; a circle that reaches a pole gets the full
    longitude range.
    """
    lat_delta = radius_miles / MILES_PER_DEGREE_LAT
    min_lat = max(-90.0, center.latitude - lat_delta)
    max_lat = min(90.0, center.latitude + lat_delta)

    # Meridians converge towards the poles, so the circle is widest in
    # longitude at its latitude farthest from the equator.
    farthest_lat = abs(center.latitude) + lat_delta
    if farthest_lat >= 90.0:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=-180.0, max_lng=180.0)

    lng_delta = radius_miles / (MILES_PER_DEGREE_LAT * math.cos(math.radians(farthest_lat)))
    if lng_delta >= 180.0:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=-180.0, max_lng=180.0)

    return BoundingBox(
        min_lat=min_lat,
        max_lat=max_lat,
        min_lng=_wrap_longitude(center.longitude - lng_delta),
        max_lng=_wrap_longitude(center.longitude + lng_delta),
    )


def distance(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in miles (haversine), rounded to 2 decimals."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return round(EARTH_RADIUS_MILES * c, 2)
