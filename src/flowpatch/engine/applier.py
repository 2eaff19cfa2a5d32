from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from flowpatch.config.settings import FlowpatchConfig
from flowpatch.errors import (
    FlowpatchError,
    GraphVersionConflict,
    NotFound,
    PrevalidationFailed,
)
from flowpatch.graph.graph_mutator import GraphMutator
from flowpatch.graph.graph_store import GraphStore
from flowpatch.history.journal import BatchJournal, BatchState
from flowpatch.history.undo_manager import UndoEntry, UndoRedoManager
from flowpatch.lint.findings import LintFinding, errors_only, warnings_only
from flowpatch.lint.prevalidator import Prevalidator
from flowpatch.operations.schema import OperationBatch
from flowpatch.operations.validator import OperationValidator
from flowpatch.policy.enforcer import PolicyEnforcer
from flowpatch.utils.helpers import utc_now

logger = logging.getLogger("flowpatch.applier")


@dataclass(frozen=True)
class ApplyResult:
    graph_id: str
    new_version: int
    undo_id: str
    batch_id: Optional[str] = None
    warnings: List[LintFinding] = field(default_factory=list)


class Applier:
    """
    Transactional executor turning a validated batch into a store commit.

    The whole pipeline runs on a working copy while the per-graph lock is
    held; the stored graph is replaced only after every check passes, so
    a batch is visible in full or not at all.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        history: UndoRedoManager,
        validator: OperationValidator,
        policy: PolicyEnforcer,
        prevalidator: Prevalidator,
        config: FlowpatchConfig,
        journal: Optional[BatchJournal] = None,
    ) -> None:
        self.store = store
        self.history = history
        self.validator = validator
        self.policy = policy
        self.prevalidator = prevalidator
        self.config = config
        self.journal = journal

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply(
        self,
        graph_id: str,
        expected_version: int,
        batch: Union[OperationBatch, Mapping[str, Any]],
        *,
        tolerate_existing: bool = False,
        source: str = "caller",
    ) -> ApplyResult:
        """
        Apply ``batch`` if the stored version still equals
        ``expected_version``.

        With ``tolerate_existing`` only errors the batch introduces are
        blocking; errors already present in the stored graph are not.
        """

        with self.store.lock(graph_id):
            graph = self.store.get_or_create(graph_id)
            batch_id = self._open(graph_id, batch, graph.version, source)

            try:
                # ---------------- Concurrency ----------------

                if graph.version != expected_version:
                    raise GraphVersionConflict(
                        f"graph '{graph_id}' is at version {graph.version}, "
                        f"expected {expected_version}",
                        current_version=graph.version,
                        expected_version=expected_version,
                    )

                # ---------------- Structure ----------------

                parsed = self.validator.validate(batch)
                self._advance(batch_id, BatchState.SCHEMA_VALIDATED)

                working = graph.clone()
                mutator = GraphMutator(working)
                diff = mutator.apply_batch(parsed)

                # ---------------- Governance ----------------

                self.policy.check(parsed, working, self.config.policy)
                self._advance(batch_id, BatchState.POLICY_CHECKED)

                # ---------------- Semantics ----------------

                findings = mutator.findings + self.prevalidator.lint(working)
                self._advance(batch_id, BatchState.LINTED)

                blocking = errors_only(findings)
                if tolerate_existing and blocking:
                    existing = {
                        f.key() for f in errors_only(self.prevalidator.lint(graph))
                    }
                    blocking = [f for f in blocking if f.key() not in existing]

                if blocking:
                    raise PrevalidationFailed(
                        f"batch produces {len(blocking)} blocking lint findings",
                        findings=findings,
                    )

            except FlowpatchError as exc:
                logger.warning(
                    "rejected batch for graph %s at version %s: %s",
                    graph_id,
                    graph.version,
                    exc.code,
                )
                self._advance(batch_id, BatchState.REJECTED, error_code=exc.code)
                raise
            except Exception:
                logger.exception(
                    "batch for graph %s failed unexpectedly at version %s",
                    graph_id,
                    graph.version,
                )
                self._advance(batch_id, BatchState.REJECTED, error_code="internal_error")
                raise

            # ---------------- Commit ----------------

            working.version = graph.version + 1
            working.last_modified = utc_now()
            self.store.commit(working)

            entry = UndoEntry.create(
                graph_id=graph_id,
                base_version=graph.version,
                diff=diff,
                modified_before=graph.last_modified,
                modified_after=working.last_modified,
                op_count=len(parsed.ops),
                batch_id=batch_id,
            )
            self.history.record(entry)
            self._advance(
                batch_id,
                BatchState.APPLIED,
                new_version=working.version,
                undo_id=entry.undo_id,
            )

        logger.info(
            "applied %s ops to graph %s: version %s -> %s, nodes %s (undo=%s)",
            len(parsed.ops),
            graph_id,
            entry.base_version,
            working.version,
            diff.touched_nodes(),
            entry.undo_id,
        )

        return ApplyResult(
            graph_id=graph_id,
            new_version=working.version,
            undo_id=entry.undo_id,
            batch_id=batch_id,
            warnings=warnings_only(findings),
        )

    def check(
        self,
        graph_id: str,
        batch: Union[OperationBatch, Mapping[str, Any]],
    ) -> List[LintFinding]:
        """
        Dry run of the validation pipeline against the stored graph.

        Raises on schema or policy failures like ``apply`` does; lint
        findings are returned instead of raised. Nothing is committed
        or recorded.
        """
        graph = self.store.snapshot(graph_id)

        parsed = self.validator.validate(batch)
        mutator = GraphMutator(graph)
        mutator.apply_batch(parsed)
        self.policy.check(parsed, graph, self.config.policy)

        return mutator.findings + self.prevalidator.lint(graph)

    # ------------------------------------------------------------------
    # Journal helpers
    # ------------------------------------------------------------------

    def _open(
        self,
        graph_id: str,
        batch: Union[OperationBatch, Mapping[str, Any]],
        base_version: int,
        source: str,
    ) -> Optional[str]:
        if self.journal is None:
            return None
        if isinstance(batch, OperationBatch):
            op_count = len(batch.ops)
        else:
            ops = batch.get("ops") if isinstance(batch, Mapping) else None
            op_count = len(ops) if isinstance(ops, list) else 0
        record = self.journal.open(
            graph_id=graph_id,
            op_count=op_count,
            base_version=base_version,
            source=source,
        )
        return record.batch_id

    def _advance(self, batch_id: Optional[str], state: BatchState, **changes: Any) -> None:
        if self.journal is None or batch_id is None:
            return
        try:
            self.journal.advance(batch_id, state, **changes)
        except NotFound:
            logger.warning("batch %s was evicted from the journal", batch_id)
