from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional, Tuple
import math

from aquagrowth.metrics.common import biomass_kg, elapsed_days, round2
from aquagrowth.metrics.errors import InvalidInput
from aquagrowth.metrics.ordering import order_samples, with_baselines
from aquagrowth.records.models import Batch, Sample


@dataclass(frozen=True)
class IntervalMetrics:
    sgr: float  # %/day
    fcr: float  # 0 when biomass did not grow
    survival_rate: float  # % of the batch's initial stocking count
    daily_weight_gain: float  # g/day
    biomass: float  # kg at the sample

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def specific_growth_rate(final_weight: float, start_weight: float, days: int) -> float:
    """SGR (%/day) = (ln(Wf) - ln(Wi)) / days * 100. Weights must be positive."""
    if final_weight <= 0 or start_weight <= 0:
        raise InvalidInput(
            f"weights must be positive for SGR (start={start_weight}, final={final_weight})"
        )
    return (math.log(final_weight) - math.log(start_weight)) / days * 100.0


def survival_rate(count: int, initial_count: int) -> float:
    if initial_count <= 0:
        raise InvalidInput(f"initial count must be positive, got {initial_count}")
    return count / initial_count * 100.0


def interval_metrics(batch: Batch, sample: Sample, baseline: Optional[Sample] = None) -> IntervalMetrics:
    """Metrics for `sample` over the span since `baseline`, or since batch start.

    Survival is always measured against batch.initial_count, not the
    baseline count.
    """
    if baseline is not None:
        start_weight, start_date, start_count = baseline.sample_weight, baseline.date, baseline.current_count
    else:
        start_weight, start_date, start_count = batch.initial_avg_weight, batch.start_date, batch.initial_count

    days = elapsed_days(start_date, sample.date)
    sgr = specific_growth_rate(sample.sample_weight, start_weight, days)
    dwg = (sample.sample_weight - start_weight) / days

    current = biomass_kg(sample.sample_weight, sample.current_count)
    gain = current - biomass_kg(start_weight, start_count)
    fcr = sample.total_feed_consumed / gain if gain > 0 else 0.0

    return IntervalMetrics(
        sgr=round2(sgr),
        fcr=round2(fcr),
        survival_rate=round2(survival_rate(sample.current_count, batch.initial_count)),
        daily_weight_gain=round2(dwg),
        biomass=round2(current),
    )


def interval_series(batch: Batch, samples: Iterable[Sample]) -> List[Tuple[Sample, IntervalMetrics]]:
    """Chronological (sample, metrics) pairs, each against its predecessor."""
    return [(s, interval_metrics(batch, s, prev)) for s, prev in with_baselines(samples)]


def latest_interval(batch: Batch, samples: Iterable[Sample]) -> Optional[IntervalMetrics]:
    ordered = order_samples(samples)
    if not ordered:
        return None
    prev = ordered[-2] if len(ordered) > 1 else None
    return interval_metrics(batch, ordered[-1], prev)
