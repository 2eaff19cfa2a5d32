from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, List, Optional
from uuid import uuid4

from flowpatch.errors import NotFound
from flowpatch.utils.helpers import utc_now


class BatchState(str, Enum):
    RECEIVED = "received"
    SCHEMA_VALIDATED = "schema_validated"
    POLICY_CHECKED = "policy_checked"
    LINTED = "linted"
    REJECTED = "rejected"
    APPLIED = "applied"
    REVERTED = "reverted"


# Allowed transitions of the per-batch lifecycle. Rejected is terminal;
# reverted may return to applied through redo.
_TRANSITIONS: Dict[BatchState, tuple] = {
    BatchState.RECEIVED: (BatchState.SCHEMA_VALIDATED, BatchState.REJECTED),
    BatchState.SCHEMA_VALIDATED: (BatchState.POLICY_CHECKED, BatchState.REJECTED),
    BatchState.POLICY_CHECKED: (BatchState.LINTED, BatchState.REJECTED),
    BatchState.LINTED: (BatchState.APPLIED, BatchState.REJECTED),
    BatchState.APPLIED: (BatchState.REVERTED,),
    BatchState.REVERTED: (BatchState.APPLIED,),
    BatchState.REJECTED: (),
}


@dataclass(frozen=True)
class BatchRecord:
    """
    Immutable lifecycle snapshot of one submitted batch.
    """

    batch_id: str
    graph_id: str
    state: BatchState
    op_count: int
    base_version: int
    new_version: Optional[int] = None
    undo_id: Optional[str] = None
    error_code: Optional[str] = None
    source: str = "caller"
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "graph_id": self.graph_id,
            "state": self.state.value,
            "op_count": self.op_count,
            "base_version": self.base_version,
            "new_version": self.new_version,
            "undo_id": self.undo_id,
            "error_code": self.error_code,
            "source": self.source,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class BatchJournal:
    """
    Append-only in-memory journal of batch lifecycles.

    Records are replaced, never edited, on each state transition. Only the
    newest ``max_records`` batches are kept; older ones are evicted.
    """

    def __init__(self, max_records: int = 10_000) -> None:
        if max_records < 1:
            raise ValueError("max_records must be positive")
        self.max_records = max_records
        self._records: Dict[str, BatchRecord] = {}
        self._order: Deque[str] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def open(
        self,
        *,
        graph_id: str,
        op_count: int,
        base_version: int,
        source: str = "caller",
    ) -> BatchRecord:
        record = BatchRecord(
            batch_id=f"batch_{uuid4().hex}",
            graph_id=graph_id,
            state=BatchState.RECEIVED,
            op_count=op_count,
            base_version=base_version,
            source=source,
        )
        with self._lock:
            if len(self._order) == self.max_records:
                self._records.pop(self._order[0], None)
            self._order.append(record.batch_id)
            self._records[record.batch_id] = record
        return record

    def advance(self, batch_id: str, state: BatchState, **changes: Any) -> BatchRecord:
        with self._lock:
            current = self._records.get(batch_id)
            if current is None:
                raise NotFound(f"batch '{batch_id}' not found")
            if state not in _TRANSITIONS[current.state]:
                raise ValueError(
                    f"illegal batch transition {current.state.value} -> {state.value}"
                )
            updated = replace(current, state=state, updated_at=utc_now(), **changes)
            self._records[batch_id] = updated
            return updated

    def get(self, batch_id: str) -> BatchRecord:
        record = self._records.get(batch_id)
        if record is None:
            raise NotFound(f"batch '{batch_id}' not found")
        return record

    def all(self) -> List[BatchRecord]:
        with self._lock:
            return [self._records[b] for b in self._order]

    def __len__(self) -> int:
        return len(self._order)

    def filter(
        self,
        *,
        graph_id: str | None = None,
        state: BatchState | None = None,
    ) -> List[BatchRecord]:

        results = self.all()

        if graph_id is not None:
            results = [r for r in results if r.graph_id == graph_id]

        if state is not None:
            results = [r for r in results if r.state == state]

        return results

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self._order.clear()
