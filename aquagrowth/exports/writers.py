from __future__ import annotations
from typing import List, Dict, Any, Iterable
import csv
import io
import re

from aquagrowth.metrics.interval import interval_series
from aquagrowth.records.models import Batch, Sample

SCHEMAS = {
    "growth_records": [
        "date","avg_weight_g","biomass_kg","feed_used_kg","est_count","survival_rate_pct","interval_fcr","interval_sgr_pct","notes"
    ],
}


def write_csv(rows: Iterable[Dict[str, Any]], columns: List[str]) -> str:
    buf = io.StringIO()
    w = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore")
    w.writeheader()
    for r in rows:
        w.writerow({k: r.get(k) for k in columns})
    return buf.getvalue()


def growth_record_rows(batch: Batch, samples: Iterable[Sample]) -> List[Dict[str, Any]]:
    """One row per sample, newest first; interval metrics use the chronological predecessor."""
    rows = []
    for s, m in reversed(interval_series(batch, samples)):
        rows.append({
            "date": s.date.isoformat(),
            "avg_weight_g": s.sample_weight,
            "biomass_kg": m.biomass,
            "feed_used_kg": s.total_feed_consumed,
            "est_count": s.current_count,
            "survival_rate_pct": m.survival_rate,
            "interval_fcr": m.fcr,
            "interval_sgr_pct": m.sgr,
            "notes": s.notes or "",
        })
    return rows


def batch_title(batch: Batch) -> str:
    return f"Batch: {batch.name} ({batch.species})"


def write_growth_records(batch: Batch, samples: Iterable[Sample]) -> str:
    """Title line, then the header and one row per sample."""
    buf = io.StringIO()
    csv.writer(buf).writerow([batch_title(batch)])
    return buf.getvalue() + write_csv(growth_record_rows(batch, samples), SCHEMAS["growth_records"])


def export_filename(batch: Batch) -> str:
    return re.sub(r"\s+", "_", batch.name) + "_data.csv"
