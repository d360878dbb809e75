from __future__ import annotations

from aquagrowth.metrics.cumulative import CumulativePerformance
from aquagrowth.metrics.interval import IntervalMetrics
from aquagrowth.records.models import Batch, Sample


def build_prompt(batch: Batch, latest: Sample, interval: IntervalMetrics, cumulative: CumulativePerformance) -> str:
    return "\n".join([
        "Act as a senior aquaculture specialist. Analyze the following fish growth data and provide actionable advice.",
        "",
        "Batch Info:",
        f"- Species: {batch.species}",
        f"- Age (DOC): {cumulative.days_of_culture} days",
        f"- Initial Weight: {batch.initial_avg_weight}g",
        f"- Current Weight: {latest.sample_weight}g",
        "",
        "Performance Indices (Cumulative):",
        f"- Overall FCR: {cumulative.cumulative_fcr}",
        f"- Overall SGR: {cumulative.overall_sgr}%/day",
        f"- Survival Rate: {cumulative.overall_survival_rate}%",
        f"- Total Feed Consumed: {cumulative.total_feed_consumed} kg",
        "",
        "Recent Interval Performance (Last Sample):",
        f"- Interval FCR: {interval.fcr}",
        f"- Interval SGR: {interval.sgr}%/day",
        f"- Daily Weight Gain: {interval.daily_weight_gain}g/day",
        "",
        "An FCR of 0 means the ratio could not be computed because biomass did not increase.",
        "Provide a concise assessment (3-4 sentences) on whether this performance is good for this species at this stage.",
        "Compare the recent interval performance to the overall trend if noteworthy (e.g., FCR spiking).",
        "Provide 2 specific technical recommendations to improve or maintain growth.",
        "",
        "Format the output as plain text with bullet points for recommendations.",
    ])
