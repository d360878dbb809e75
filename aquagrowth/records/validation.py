from __future__ import annotations
from typing import Any, Dict
import math

from aquagrowth.records.models import parse_date, pick


def _number(payload: Dict[str, Any], *keys: str) -> float:
    v = pick(payload, *keys)
    if v is None:
        raise ValueError(f"{keys[0]} is required")
    try:
        n = float(v)
    except (TypeError, ValueError):
        raise ValueError(f"{keys[0]} must be a number")
    if not math.isfinite(n):
        raise ValueError(f"{keys[0]} must be a finite number")
    return n


def _text(payload: Dict[str, Any], key: str) -> str:
    v = str(payload.get(key) or "").strip()
    if not v:
        raise ValueError(f"{key} is required")
    return v


def _date(payload: Dict[str, Any], *keys: str) -> None:
    raw = pick(payload, *keys)
    if raw is None:
        raise ValueError(f"{keys[0]} is required")
    try:
        parse_date(raw)
    except ValueError:
        raise ValueError(f"{keys[0]} must be a YYYY-MM-DD date")


def validate_batch(payload: Dict[str, Any]) -> None:
    """Form-level checks for a new batch. The metrics engine itself never validates."""
    _text(payload, "name")
    _text(payload, "species")
    _date(payload, "start_date", "startDate")
    count = _number(payload, "initial_count", "initialCount")
    if count < 1 or count != int(count):
        raise ValueError("initial_count must be a whole number of at least 1")
    if _number(payload, "initial_avg_weight", "initialAvgWeight") < 0.1:
        raise ValueError("initial_avg_weight must be at least 0.1 g")


def validate_sample(payload: Dict[str, Any]) -> None:
    _date(payload, "date")
    if _number(payload, "sample_weight", "sampleWeight") <= 0:
        raise ValueError("sample_weight must be greater than 0")
    if _number(payload, "total_feed_consumed", "totalFeedConsumed") < 0:
        raise ValueError("total_feed_consumed must not be negative")
    count = _number(payload, "current_count", "currentCount")
    if count < 0 or count != int(count):
        raise ValueError("current_count must be a whole number, not negative")
