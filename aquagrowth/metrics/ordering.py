from __future__ import annotations
from typing import Iterable, List, Optional, Tuple

from aquagrowth.records.models import Sample


def order_samples(samples: Iterable[Sample]) -> List[Sample]:
    """Ascending by sample date; equal dates keep the order they were supplied in."""
    return sorted(samples, key=lambda s: s.date)


def with_baselines(samples: Iterable[Sample]) -> List[Tuple[Sample, Optional[Sample]]]:
    """Pair each sample with its chronological predecessor (None for the first)."""
    ordered = order_samples(samples)
    return [(s, ordered[i - 1] if i > 0 else None) for i, s in enumerate(ordered)]
