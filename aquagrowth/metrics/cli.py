import json
import sys
from pathlib import Path

from aquagrowth.metrics.cumulative import cumulative_performance
from aquagrowth.metrics.errors import InvalidInput
from aquagrowth.metrics.interval import interval_series
from aquagrowth.records.models import Batch, Sample


def main():
    if len(sys.argv) != 2:
        print("Usage: python -m aquagrowth.metrics.cli <batch.json>")
        sys.exit(2)
    data = json.loads(Path(sys.argv[1]).read_text())
    batch = Batch.from_dict(data["batch"])
    samples = [Sample.from_dict(s) for s in data.get("samples", [])]
    try:
        perf = cumulative_performance(batch, samples)
        series = interval_series(batch, samples)
    except InvalidInput as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps({
        "batch": batch.to_dict(),
        "performance": perf.to_dict(),
        "intervals": [
            {"sample_id": s.id, "date": s.date.isoformat(), **m.to_dict()}
            for s, m in series
        ],
    }, indent=2))


if __name__ == "__main__":
    main()
