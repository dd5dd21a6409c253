"""
Rank momentum.

Responsibilities:
- Derive trend direction and magnitude between two ranking snapshots.
- Assign contiguous, deterministic ranks to a scored period.
- Build and persist monthly ranking snapshots (offline job).
"""
