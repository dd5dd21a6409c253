from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)


class BoundingBox(BaseModel):
    """
    Lat/lng rectangle inside the valid coordinate range.

    A box that crosses the antimeridian has ``min_lng > max_lng``: it covers
    ``[min_lng, 180]`` and ``[-180, max_lng]``.
    """

    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min_lng > self.max_lng

    def contains(self, latitude: float, longitude: float) -> bool:
        if not self.min_lat <= latitude <= self.max_lat:
            return False
        if self.crosses_antimeridian:
            return longitude >= self.min_lng or longitude <= self.max_lng
        return self.min_lng <= longitude <= self.max_lng
