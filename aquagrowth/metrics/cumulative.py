from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable

from aquagrowth.metrics.common import biomass_kg, elapsed_days, round2
from aquagrowth.metrics.interval import specific_growth_rate, survival_rate
from aquagrowth.metrics.ordering import order_samples
from aquagrowth.records.models import Batch, Sample


@dataclass(frozen=True)
class CumulativePerformance:
    days_of_culture: int
    current_biomass: float  # kg
    total_feed_consumed: float  # kg
    total_weight_gain: float  # kg, negative on net biomass decline
    cumulative_fcr: float
    overall_sgr: float  # %/day
    overall_survival_rate: float  # %
    average_daily_gain: float  # g/day

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def cumulative_performance(batch: Batch, samples: Iterable[Sample]) -> CumulativePerformance:
    """Lifetime-to-date performance from batch start to the latest-dated sample.

    Total feed is the sum over every sample, since each sample's feed field
    covers the span since its predecessor.
    """
    ordered = order_samples(samples)
    initial_biomass = biomass_kg(batch.initial_avg_weight, batch.initial_count)

    if not ordered:
        return CumulativePerformance(
            days_of_culture=0,
            current_biomass=initial_biomass,
            total_feed_consumed=0.0,
            total_weight_gain=0.0,
            cumulative_fcr=0.0,
            overall_sgr=0.0,
            overall_survival_rate=100.0,
            average_daily_gain=0.0,
        )

    latest = ordered[-1]
    days = elapsed_days(batch.start_date, latest.date)
    total_feed = sum(s.total_feed_consumed for s in ordered)
    current = biomass_kg(latest.sample_weight, latest.current_count)
    gain = current - initial_biomass
    fcr = total_feed / gain if gain > 0 else 0.0

    return CumulativePerformance(
        days_of_culture=days,
        current_biomass=round2(current),
        total_feed_consumed=round2(total_feed),
        total_weight_gain=round2(gain),
        cumulative_fcr=round2(fcr),
        overall_sgr=round2(specific_growth_rate(latest.sample_weight, batch.initial_avg_weight, days)),
        overall_survival_rate=round2(survival_rate(latest.current_count, batch.initial_count)),
        average_daily_gain=round2((latest.sample_weight - batch.initial_avg_weight) / days),
    )
