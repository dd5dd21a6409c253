from __future__ import annotations

from typing import Any

from .config import DEFAULT_SCORING_CONFIG, ScoringConfig

_DESCRIPTIONS: list[tuple[str, str, str]] = [
    ("primary_rating", "{primary} Rating", "Average rating from {primary} reviews"),
    ("secondary_rating", "{secondary} Rating", "Average rating from {secondary} reviews"),
    ("review_velocity", "Review Momentum", "Recent review activity compared to historical average"),
    ("deals", "Deals & Specials", "Active happy hours and promotional offers"),
    ("events_tonight", "Events Tonight", "Live music, trivia, or special events happening now"),
    ("social_buzz", "Social Buzz", "Recent social media activity and mentions"),
    ("proximity", "Proximity", "Distance from your current location"),
    ("open_now", "Open Now", "Bonus for venues currently open"),
    ("expert_pick", "Expert Pick", "Curated recommendations from local experts"),
    ("trending", "Trending", "Month-over-month ranking momentum"),
]

_CATEGORIES: dict[str, list[str]] = {
    "quality": ["primary_rating", "secondary_rating", "review_velocity"],
    "engagement": ["deals", "events_tonight", "social_buzz"],
    "convenience": ["proximity", "open_now"],
    "special": ["expert_pick", "trending"],
}


def weight_explanation(config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> list[dict[str, Any]]:
    """The weight table as display rows, in the published order."""
    labels = {"primary": config.primary_label, "secondary": config.secondary_label}
    rows: list[dict[str, Any]] = []
    for key, name, description in _DESCRIPTIONS:
        weight = getattr(config.weights, key)
        rows.append({
            "key": key,
            "name": name.format(**labels),
            "weight": weight,
            "percentage": round(weight * 100),
            "description": description.format(**labels),
        })
    return rows


def methodology(config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> dict[str, Any]:
    weights = weight_explanation(config)
    by_key = {w["key"]: w for w in weights}

    return {
        "weights": weights,
        "categories": {
            category: [by_key[k] for k in keys]
            for category, keys in _CATEGORIES.items()
        },
        "expert_picks": [
            {
                "slug": slug,
                "boost_percentage": round((pick.boost - 1) * 100),
                "reason": pick.reason,
            }
            for slug, pick in config.expert_picks.items()
        ],
        "methodology": {
            "title": "Transparent Scoring Methodology",
            "description": (
                "Power rankings combine multiple data sources with fixed, published "
                "weights. Every factor is documented and the formula is public."
            ),
            "formula": "Power Score = (Weighted Factor Sum) × Expert Boost Multiplier",
        },
    }
