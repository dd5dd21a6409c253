"""
Geographic filtering.

Responsibilities:
- Hold the coordinate and bounding-box types shared across the service.
- Compute a bounding box that fully contains a search radius (cheap pre-filter).
- Compute exact great-circle distances in miles (precise re-filter).
"""
