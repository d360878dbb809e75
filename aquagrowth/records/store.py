from __future__ import annotations
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging
import threading
import uuid

from aquagrowth.records.models import Batch, Sample

logger = logging.getLogger(__name__)


class BatchStore:
    """Batches plus an append-only sample log per batch.

    Samples are never edited or removed individually; deleting a batch
    drops its whole log.
    """

    def __init__(self):
        self._batches: Dict[str, Batch] = {}
        self._samples: Dict[str, List[Sample]] = {}
        self._lock = threading.Lock()

    def create_batch(self, payload: Dict[str, Any]) -> Batch:
        batch = replace(Batch.from_dict({**payload, "id": "pending"}), id=f"b_{uuid.uuid4().hex[:8]}")
        with self._lock:
            self._batches[batch.id] = batch
            self._samples[batch.id] = []
        logger.info("created batch %s (%s)", batch.id, batch.name)
        return batch

    def get_batch(self, batch_id: str) -> Optional[Batch]:
        with self._lock:
            return self._batches.get(batch_id)

    def list_batches(self) -> List[Batch]:
        with self._lock:
            return list(self._batches.values())

    def delete_batch(self, batch_id: str) -> bool:
        with self._lock:
            found = self._batches.pop(batch_id, None) is not None
            dropped = self._samples.pop(batch_id, [])
        if found:
            logger.info("deleted batch %s with %d samples", batch_id, len(dropped))
        return found

    def add_sample(self, batch_id: str, payload: Dict[str, Any]) -> Sample:
        sample = Sample.from_dict({**payload, "batch_id": batch_id})
        sample = replace(sample, id=f"s_{uuid.uuid4().hex[:8]}")
        with self._lock:
            if batch_id not in self._batches:
                raise KeyError(batch_id)
            self._samples[batch_id].append(sample)
        logger.debug("batch %s: appended sample %s dated %s", batch_id, sample.id, sample.date)
        return sample

    def samples_for(self, batch_id: str) -> List[Sample]:
        """Samples in the order they were recorded."""
        with self._lock:
            return list(self._samples.get(batch_id, []))

    def save(self, path: str | Path) -> None:
        with self._lock:
            doc = {
                "batches": [b.to_dict() for b in self._batches.values()],
                "samples": {bid: [s.to_dict() for s in ss] for bid, ss in self._samples.items()},
            }
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(doc, indent=2))

    @staticmethod
    def load(path: str | Path) -> "BatchStore":
        store = BatchStore()
        p = Path(path)
        if not p.exists():
            return store
        doc = json.loads(p.read_text())
        for raw in doc.get("batches", []):
            b = Batch.from_dict(raw)
            store._batches[b.id] = b
            store._samples[b.id] = []
        for bid, rows in (doc.get("samples") or {}).items():
            if bid not in store._batches:
                logger.warning("skipping %d samples for unknown batch %s", len(rows), bid)
                continue
            store._samples[bid] = [Sample.from_dict(r) for r in rows]
        logger.info("loaded %d batches from %s", len(store._batches), p)
        return store
