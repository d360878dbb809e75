from __future__ import annotations
from typing import Any, Dict, Iterable, List

from aquagrowth.metrics.common import biomass_kg, round2
from aquagrowth.metrics.interval import interval_series
from aquagrowth.records.models import Batch, Sample


def chart_series(batch: Batch, samples: Iterable[Sample]) -> List[Dict[str, Any]]:
    """Start point followed by one point per sample, chronological."""
    points: List[Dict[str, Any]] = [{
        "date": "start",
        "weight": batch.initial_avg_weight,
        "fcr": 0.0,
        "sgr": 0.0,
        "biomass": round2(biomass_kg(batch.initial_avg_weight, batch.initial_count)),
    }]
    for s, m in interval_series(batch, samples):
        points.append({
            "date": s.date.isoformat(),
            "weight": s.sample_weight,
            "fcr": m.fcr,
            "sgr": m.sgr,
            "biomass": m.biomass,
        })
    return points
