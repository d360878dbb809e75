"""Growth metrics engine: interval and cumulative performance indices.

- ordering.py: canonical chronological order of a batch's samples
- interval.py: SGR, FCR, survival, daily gain, biomass per sample
- cumulative.py: batch-lifetime totals against the start state
- common.py: day counting, rounding, biomass
"""
