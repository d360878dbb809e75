from __future__ import annotations
from datetime import date, datetime
import math

_SECONDS_PER_DAY = 86400.0


def elapsed_days(start: date | datetime, end: date | datetime) -> int:
    """Whole days from start to end, rounded up and never below 1."""
    delta = end - start
    return max(1, math.ceil(delta.total_seconds() / _SECONDS_PER_DAY))


def round2(value: float) -> float:
    return round(float(value), 2)


def biomass_kg(avg_weight_g: float, count: int) -> float:
    return avg_weight_g * count / 1000.0
