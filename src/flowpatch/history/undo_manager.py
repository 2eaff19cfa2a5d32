from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from flowpatch.errors import GraphVersionConflict, NotFound
from flowpatch.graph.graph_diff import GraphDiff
from flowpatch.graph.graph_store import GraphStore
from flowpatch.utils.helpers import utc_now

logger = logging.getLogger("flowpatch.history")


@dataclass(frozen=True)
class UndoEntry:
    """
    Minimal inverse information for one accepted batch.

    Holds only the recorded diff, never a snapshot of the graph.
    """

    undo_id: str
    graph_id: str
    base_version: int
    diff: GraphDiff
    modified_before: datetime
    modified_after: datetime
    op_count: int
    batch_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    @staticmethod
    def create(
        *,
        graph_id: str,
        base_version: int,
        diff: GraphDiff,
        modified_before: datetime,
        modified_after: datetime,
        op_count: int,
        batch_id: Optional[str] = None,
    ) -> "UndoEntry":
        return UndoEntry(
            undo_id=f"undo_{uuid4().hex}",
            graph_id=graph_id,
            base_version=base_version,
            diff=diff,
            modified_before=modified_before,
            modified_after=modified_after,
            op_count=op_count,
            batch_id=batch_id,
        )


@dataclass(frozen=True)
class HistoryResult:
    graph_id: str
    new_version: int
    undo_id: str
    batch_id: Optional[str] = None


class UndoRedoManager:
    """
    Per-graph LIFO undo stack with a parallel redo stack.

    Stacks hold undo ids; entries live in a side table keyed by id.
    Recording a new entry clears the graph's redo stack.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store
        self._entries: Dict[str, UndoEntry] = {}
        self._undo: Dict[str, List[str]] = {}
        self._redo: Dict[str, List[str]] = {}
        store.on_import(self.forget)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, entry: UndoEntry) -> None:
        """
        Push an entry for a freshly committed batch.

        Callers must hold ``store.lock(entry.graph_id)``.
        """
        self._entries[entry.undo_id] = entry
        self._undo.setdefault(entry.graph_id, []).append(entry.undo_id)
        for dropped in self._redo.pop(entry.graph_id, []):
            self._entries.pop(dropped, None)

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self, graph_id: str, undo_id: Optional[str] = None) -> HistoryResult:
        self._require(graph_id)
        with self.store.lock(graph_id):
            graph = self.store.get(graph_id)
            stack = self._undo.get(graph_id, [])

            if undo_id is not None:
                entry = self._entries.get(undo_id)
                if entry is None or entry.graph_id != graph_id or undo_id not in stack:
                    raise NotFound(f"undo id '{undo_id}' not found for graph '{graph_id}'")
                if stack[-1] != undo_id:
                    raise GraphVersionConflict(
                        f"undo id '{undo_id}' is not the most recent batch; undo newer batches first",
                        current_version=graph.version,
                    )

            if not stack:
                raise NotFound(f"nothing to undo for graph '{graph_id}'")

            entry = self._entries[stack[-1]]
            if graph.version != entry.base_version + 1:
                raise GraphVersionConflict(
                    f"graph '{graph_id}' is at version {graph.version}; "
                    f"undo expects {entry.base_version + 1}",
                    current_version=graph.version,
                    expected_version=entry.base_version + 1,
                )

            working = graph.clone()
            entry.diff.revert(working)
            working.version = entry.base_version
            working.last_modified = entry.modified_before
            self.store.commit(working)

            stack.pop()
            self._redo.setdefault(graph_id, []).append(entry.undo_id)

        logger.info(
            "undo %s on graph %s -> version %s",
            entry.undo_id,
            graph_id,
            working.version,
        )
        return HistoryResult(
            graph_id=graph_id,
            new_version=working.version,
            undo_id=entry.undo_id,
            batch_id=entry.batch_id,
        )

    def redo(self, graph_id: str) -> HistoryResult:
        self._require(graph_id)
        with self.store.lock(graph_id):
            graph = self.store.get(graph_id)
            stack = self._redo.get(graph_id, [])
            if not stack:
                raise NotFound(f"nothing to redo for graph '{graph_id}'")

            entry = self._entries[stack[-1]]
            if graph.version != entry.base_version:
                raise GraphVersionConflict(
                    f"graph '{graph_id}' moved to version {graph.version} since undo",
                    current_version=graph.version,
                    expected_version=entry.base_version,
                )

            working = graph.clone()
            entry.diff.apply(working)
            working.version = entry.base_version + 1
            working.last_modified = entry.modified_after
            self.store.commit(working)

            stack.pop()
            self._undo.setdefault(graph_id, []).append(entry.undo_id)

        logger.info(
            "redo %s on graph %s -> version %s",
            entry.undo_id,
            graph_id,
            working.version,
        )
        return HistoryResult(
            graph_id=graph_id,
            new_version=working.version,
            undo_id=entry.undo_id,
            batch_id=entry.batch_id,
        )

    def _require(self, graph_id: str) -> None:
        # Unknown ids must not allocate a lock in the store.
        if not self.store.exists(graph_id):
            raise NotFound(f"graph '{graph_id}' not found")

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def stacks(self, graph_id: str) -> Dict[str, List[str]]:
        return {
            "undo": list(self._undo.get(graph_id, [])),
            "redo": list(self._redo.get(graph_id, [])),
        }

    def forget(self, graph_id: str) -> None:
        """
        Drop both stacks of one graph, e.g. after it was replaced wholesale.
        """
        dropped = self._undo.pop(graph_id, []) + self._redo.pop(graph_id, [])
        for undo_id in dropped:
            self._entries.pop(undo_id, None)
        if dropped:
            logger.info("cleared %s history entries of graph %s", len(dropped), graph_id)

    def reset(self) -> None:
        self._entries.clear()
        self._undo.clear()
        self._redo.clear()
