from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from flowpatch.catalog.node_catalog import NodeCatalog
from flowpatch.config.settings import FlowpatchConfig
from flowpatch.critic.critic import Critic, CriticReport
from flowpatch.errors import NotFound
from flowpatch.engine.applier import Applier, ApplyResult
from flowpatch.graph.graph_store import GraphStore
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.history.journal import BatchJournal, BatchRecord, BatchState
from flowpatch.history.undo_manager import HistoryResult, UndoRedoManager
from flowpatch.lint.findings import LintFinding, has_errors
from flowpatch.lint.prevalidator import Prevalidator
from flowpatch.operations.validator import OperationValidator
from flowpatch.policy.enforcer import PolicyEnforcer
from flowpatch.simulation.simulator import SimulationReport, Simulator

logger = logging.getLogger("flowpatch.service")


class WorkflowService:
    """
    Policy-aware orchestration layer for flowpatch.

    This is the ONLY place where:
    - config is interpreted
    - subsystems are wired
    - the batch journal follows undo and redo
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        catalog: NodeCatalog,
        history: UndoRedoManager,
        journal: BatchJournal,
        config: FlowpatchConfig,
    ) -> None:

        self.store = store
        self.catalog = catalog
        self.history = history
        self.journal = journal
        self.config = config

        # ---------------- Checks ----------------

        self.validator = OperationValidator(config.limits)
        self.policy = PolicyEnforcer(catalog)
        self.prevalidator = Prevalidator(catalog, config.lint)

        # ---------------- Applier ----------------

        self.applier = Applier(
            store=store,
            history=history,
            validator=self.validator,
            policy=self.policy,
            prevalidator=self.prevalidator,
            config=config,
            journal=journal,
        )

        # ---------------- Critic / Simulator ----------------

        self.critic = Critic(
            store=store,
            applier=self.applier,
            prevalidator=self.prevalidator,
            config=config.critic,
        )

        self.simulator = Simulator(
            store=store,
            catalog=catalog,
            prevalidator=self.prevalidator,
            config=config.simulator,
        )

    # ------------------------------------------------------------------
    # Change-sets
    # ------------------------------------------------------------------

    def submit_batch(
        self,
        graph_id: str,
        expected_version: int,
        batch: Mapping[str, Any],
    ) -> ApplyResult:
        return self.applier.apply(graph_id, expected_version, batch)

    def check_batch(self, graph_id: str, batch: Mapping[str, Any]) -> List[LintFinding]:
        return self.applier.check(graph_id, batch)

    def undo(self, graph_id: str, undo_id: Optional[str] = None) -> HistoryResult:
        result = self.history.undo(graph_id, undo_id)
        self._follow(result, BatchState.REVERTED)
        return result

    def redo(self, graph_id: str) -> HistoryResult:
        result = self.history.redo(graph_id)
        self._follow(result, BatchState.APPLIED)
        return result

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def validate(self, graph_id: str) -> List[LintFinding]:
        return self.prevalidator.lint(self.store.snapshot(graph_id))

    def simulate(
        self,
        graph_id: str,
        sample_input: Optional[Mapping[str, Any]] = None,
    ) -> SimulationReport:
        return self.simulator.simulate(graph_id, sample_input)

    def run_critic(self, graph_id: str) -> CriticReport:
        return self.critic.run(graph_id)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get_graph(self, graph_id: str) -> WorkflowGraph:
        return self.store.snapshot(graph_id)

    def list_graphs(self) -> List[Dict[str, Any]]:
        return [
            {"id": g.id, "name": g.name, "version": g.version, "nodes": g.node_count()}
            for g in self.store.list_graphs()
        ]

    def history_for(self, graph_id: str) -> List[BatchRecord]:
        return self.journal.filter(graph_id=graph_id)

    @staticmethod
    def is_valid(findings: List[LintFinding]) -> bool:
        return not has_errors(findings)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _follow(self, result: HistoryResult, state: BatchState) -> None:
        if result.batch_id is None:
            return
        try:
            self.journal.advance(result.batch_id, state)
        except (ValueError, NotFound):
            logger.warning(
                "journal out of sync for batch %s on graph %s",
                result.batch_id,
                result.graph_id,
            )
