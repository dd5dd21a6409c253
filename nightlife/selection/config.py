from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ModeDefaults:
    radius_miles: float
    limit: int


@dataclass(frozen=True)
class SelectionConfig:
    tonight: ModeDefaults = field(default_factory=lambda: ModeDefaults(radius_miles=15.0, limit=10))
    nearby: ModeDefaults = field(default_factory=lambda: ModeDefaults(radius_miles=10.0, limit=50))
    monthly: ModeDefaults = field(default_factory=lambda: ModeDefaults(radius_miles=15.0, limit=50))
    trending: ModeDefaults = field(default_factory=lambda: ModeDefaults(radius_miles=15.0, limit=10))
    max_limit: int = 100
    max_radius_miles: float = 100.0
    timezone: str = os.getenv("NIGHTLIFE_TIMEZONE", "America/Chicago")

    def defaults_for(self, mode: str) -> ModeDefaults:
        return getattr(self, mode)


DEFAULT_SELECTION_CONFIG = SelectionConfig()
