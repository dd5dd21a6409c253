"""
Venue catalog.

Responsibilities:
- Define the typed venue aggregate read by the ranking engine
  (ratings, deals, events, opening hours, current ranking).
- Load the catalog tables from CSV into pandas once, lazily.
- Answer bounding-box and ranking-period lookups.
- Decide whether a venue is open at a given moment (pluggable predicate).
- Persist monthly ranking snapshots.
"""
