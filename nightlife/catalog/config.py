from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    data_dir: Path = Path(os.getenv("NIGHTLIFE_DATA_DIR", str(_PACKAGED_DATA_DIR)))
    venues_filename: str = "venues.csv"
    ratings_filename: str = "ratings.csv"
    deals_filename: str = "deals.csv"
    events_filename: str = "events.csv"
    hours_filename: str = "hours.csv"
    rankings_filename: str = "rankings.csv"

    def path(self, filename: str) -> Path:
        return self.data_dir / filename


DEFAULT_CATALOG_CONFIG = CatalogConfig()
