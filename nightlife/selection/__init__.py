"""
Venue selection pipeline.

Responsibilities:
- Validate request parameters at the boundary (finite, in-range numbers).
- Pre-filter candidates by bounding box, then re-filter by exact distance.
- Attach today's active deals, events, happy hour and open-now flags.
- Score every candidate and order it for the requested view
  (tonight / nearby / monthly / trending), then apply the limit.
"""
