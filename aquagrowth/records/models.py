from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def pick(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First of `keys` holding a value; None and blank strings count as missing."""
    for k in keys:
        v = payload.get(k)
        if v is None or (isinstance(v, str) and not v.strip()):
            continue
        return v
    return default


def as_int(value: Any) -> int:
    # form inputs may send whole numbers as "950.0"
    return int(float(value))


@dataclass(frozen=True)
class Batch:
    id: str
    name: str
    species: str
    start_date: date
    initial_count: int
    initial_avg_weight: float  # grams

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "Batch":
        return Batch(
            id=str(pick(payload, "id", default="")),
            name=str(pick(payload, "name", default="")),
            species=str(pick(payload, "species", default="")),
            start_date=parse_date(pick(payload, "start_date", "startDate")),
            initial_count=as_int(pick(payload, "initial_count", "initialCount")),
            initial_avg_weight=float(pick(payload, "initial_avg_weight", "initialAvgWeight")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "species": self.species,
            "start_date": self.start_date.isoformat(),
            "initial_count": self.initial_count,
            "initial_avg_weight": self.initial_avg_weight,
        }


@dataclass(frozen=True)
class Sample:
    id: str
    batch_id: str
    date: date
    sample_weight: float  # average individual weight, grams
    total_feed_consumed: float  # kg since the previous sample (or batch start)
    current_count: int
    notes: Optional[str] = None

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "Sample":
        notes = pick(payload, "notes")
        return Sample(
            id=str(pick(payload, "id", default="")),
            batch_id=str(pick(payload, "batch_id", "batchId", default="")),
            date=parse_date(pick(payload, "date")),
            sample_weight=float(pick(payload, "sample_weight", "sampleWeight")),
            total_feed_consumed=float(pick(payload, "total_feed_consumed", "totalFeedConsumed", default=0.0)),
            current_count=as_int(pick(payload, "current_count", "currentCount")),
            notes=str(notes) if notes is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "batch_id": self.batch_id,
            "date": self.date.isoformat(),
            "sample_weight": self.sample_weight,
            "total_feed_consumed": self.total_feed_consumed,
            "current_count": self.current_count,
            "notes": self.notes,
        }
