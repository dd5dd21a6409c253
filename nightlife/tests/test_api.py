from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from nightlife.app import app, current_time
from nightlife.catalog.config import CatalogConfig
from nightlife.catalog.data_store import FrameCatalog, get_catalog

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
CATALOG = FrameCatalog.from_directory(CatalogConfig(data_dir=DATA_DIR))
# Tuesday 2026-10-20, 21:00 local
NOW = datetime(2026, 10, 20, 21, 0)

app.dependency_overrides[get_catalog] = lambda: CATALOG
app.dependency_overrides[current_time] = lambda: NOW

client = TestClient(app)

NW_SAN_ANTONIO = {"lat": 29.58, "lng": -98.62}


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ── Scoring ──────────────────────────────────────────────────────────────


def test_scoring_methodology():
    resp = client.get("/scoring")
    assert resp.status_code == 200
    body = resp.json()
    assert sum(w["percentage"] for w in body["weights"]) == 100
    assert set(body["categories"]) == {"quality", "engagement", "convenience", "special"}
    assert len(body["expert_picks"]) == 4


def test_scoring_calculate_worked_example():
    resp = client.post("/scoring/calculate", json={
        "venue_id": "example",
        "primary_rating": 4.5,
        "secondary_rating": 4.0,
        "recent_review_count": 50,
        "total_review_count": 500,
        "active_deals_count": 2,
        "has_happy_hour_now": True,
        "has_event_tonight": False,
        "is_open_now": True,
        "user_distance": 0.5,
        "previous_rank": 5,
        "current_rank": 3,
        "expert_boost_multiplier": 1.5,
        "social_buzz_score": None,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["power_score"] == 93.3
    assert body["breakdown"]["base_score"] == 62.2


def test_scoring_calculate_rejects_bad_rating():
    resp = client.post("/scoring/calculate", json={"venue_id": "x", "primary_rating": 7})
    assert resp.status_code == 422


@pytest.mark.parametrize("field", ["expert_boost_multiplier", "user_distance"])
def test_scoring_calculate_rejects_infinite_numbers(field):
    resp = client.post(
        "/scoring/calculate",
        content='{"venue_id": "x", "%s": Infinity}' % field,
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422


# ── Tonight ──────────────────────────────────────────────────────────────


def test_tonight_requires_location():
    resp = client.get("/venues/tonight")
    assert resp.status_code == 400
    assert "required" in resp.json()["detail"]


def test_tonight_rejects_non_finite_coordinates():
    resp = client.get("/venues/tonight", params={"lat": "nan", "lng": -98.62})
    assert resp.status_code in (400, 422)


def test_tonight_orders_deals_then_events():
    resp = client.get("/venues/tonight", params=NW_SAN_ANTONIO)
    assert resp.status_code == 200
    body = resp.json()
    assert body["mode"] == "tonight"

    venues = body["venues"]
    assert 0 < len(venues) <= 10
    flags = [(not v["has_deals_tonight"], not v["has_events_tonight"]) for v in venues]
    assert flags == sorted(flags)
    assert venues[0]["has_deals_tonight"]
    # Boerne is outside the default 15 mile radius.
    assert "v06" not in [v["id"] for v in venues]


def test_tonight_respects_limit():
    resp = client.get("/venues/tonight", params={**NW_SAN_ANTONIO, "limit": 2})
    body = resp.json()
    assert len(body["venues"]) == 2
    assert body["total_candidates"] >= 2


def test_tonight_rejects_bad_limit():
    resp = client.get("/venues/tonight", params={**NW_SAN_ANTONIO, "limit": 0})
    assert resp.status_code == 400


# ── Nearby ───────────────────────────────────────────────────────────────


def test_nearby_sorted_by_distance():
    resp = client.get("/venues/nearby", params={**NW_SAN_ANTONIO, "radius": 25})
    assert resp.status_code == 200
    distances = [v["distance"] for v in resp.json()["venues"]]
    assert distances == sorted(distances)
    assert all(d <= 25 for d in distances)


def test_nearby_sorted_by_score():
    resp = client.get("/venues/nearby", params={**NW_SAN_ANTONIO, "radius": 25, "sort": "score"})
    scores = [v["power_score"] for v in resp.json()["venues"]]
    assert scores == sorted(scores, reverse=True)


def test_nearby_rejects_unknown_sort():
    resp = client.get("/venues/nearby", params={**NW_SAN_ANTONIO, "sort": "vibes"})
    assert resp.status_code == 422


def test_nearby_explains_scores():
    resp = client.get("/venues/nearby", params=NW_SAN_ANTONIO)
    for venue in resp.json()["venues"]:
        assert venue["score_explanation"]
        assert venue["breakdown"]["total"] == venue["power_score"]


# ── Rankings ─────────────────────────────────────────────────────────────


def test_monthly_defaults_to_latest_period():
    resp = client.get("/rankings/monthly")
    assert resp.status_code == 200
    body = resp.json()
    assert body["period"] == "2026-10"
    ranks = [v["rank"] for v in body["venues"]]
    assert ranks == list(range(1, len(ranks) + 1))
    assert body["venues"][0]["id"] == "v01"


def test_monthly_by_month_and_year():
    resp = client.get("/rankings/monthly", params={"month": 9, "year": 2026})
    body = resp.json()
    assert body["period"] == "2026-09"
    assert all(v["trend"]["direction"] == "new" for v in body["venues"])


def test_monthly_requires_both_coordinates():
    resp = client.get("/rankings/monthly", params={"lat": 29.58})
    assert resp.status_code == 400


def test_monthly_rejects_bad_period():
    resp = client.get("/rankings/monthly", params={"period": "2026-13"})
    assert resp.status_code == 400


def test_trending_risers_first():
    resp = client.get("/rankings/trending")
    assert resp.status_code == 200
    ids = [v["id"] for v in resp.json()["venues"]]
    assert ids == ["v04", "v07", "v03", "v05", "v02", "v06"]


def test_trending_filters_by_direction():
    resp = client.get("/rankings/trending", params={"direction": "up"})
    venues = resp.json()["venues"]
    assert [v["id"] for v in venues] == ["v04", "v07"]
    assert [v["trend"]["magnitude"] for v in venues] == [4, 2]


def test_trending_first_period_has_no_movers():
    resp = client.get("/rankings/trending", params={"period": "2026-09"})
    assert resp.json()["venues"] == []


# ── Failures ─────────────────────────────────────────────────────────────


def test_pipeline_failure_returns_500():
    with patch("nightlife.app.select_venues", side_effect=RuntimeError("catalog offline")):
        resp = client.get("/venues/nearby", params=NW_SAN_ANTONIO)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to fetch venues"}
