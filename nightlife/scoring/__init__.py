"""
Transparent power-score engine.

Responsibilities:
- Hold the fixed, auditable weight table and expert-pick registry.
- Normalise each raw venue signal onto a 0-100 factor score.
- Combine factor scores into a weighted base score and apply the expert boost.
- Explain every score as an ordered list of human-readable reasons.
"""
