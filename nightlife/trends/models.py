from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TrendDirection(str, Enum):
    up = "up"
    down = "down"
    stable = "stable"
    new = "new"


class Trend(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: TrendDirection
    magnitude: int = Field(default=0, ge=0)
