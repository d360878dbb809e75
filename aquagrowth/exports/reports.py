from __future__ import annotations
from typing import Optional

from aquagrowth.metrics.cumulative import CumulativePerformance
from aquagrowth.metrics.interval import IntervalMetrics
from aquagrowth.records.models import Batch


def performance_md(batch: Batch, perf: CumulativePerformance, latest: Optional[IntervalMetrics] = None) -> str:
    lines = [
        f"# {batch.name} ({batch.species})",
        "",
        f"- start_date: {batch.start_date.isoformat()}",
        f"- initial_count: {batch.initial_count}",
        f"- initial_avg_weight_g: {batch.initial_avg_weight}",
        "",
        "## Cumulative Performance",
        "",
    ]
    for k, v in perf.to_dict().items():
        lines.append(f"- {k}: {v}")
    if latest is not None:
        lines.append("\n## Latest Interval")
        lines.append("")
        for k, v in latest.to_dict().items():
            lines.append(f"- {k}: {v}")
    # FCR of 0 means not computable (no biomass gain), not perfect efficiency
    if perf.cumulative_fcr == 0 and perf.days_of_culture > 0:
        lines.append("\n## Notes")
        lines.append("- cumulative_fcr: not computable, biomass has not increased")
    return "\n".join(lines) + "\n"
