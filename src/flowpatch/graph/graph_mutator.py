from __future__ import annotations

import logging
from typing import List, assert_never

from flowpatch.graph.graph_diff import GraphDiff, NodeStep, ConnectionStep, DiffStep
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.lint.findings import LintFinding, error
from flowpatch.operations.schema import (
    AddNodeOp,
    AnnotateOp,
    ConnectOp,
    DeleteOp,
    Operation,
    OperationBatch,
    SetParamsOp,
)

logger = logging.getLogger("flowpatch.mutator")


class GraphMutator:
    """
    Applies operations to a working copy, in order, recording an
    invertible diff.

    Operations whose target cannot be found are not applied; they are
    reported as error findings so the caller can reject the whole batch.
    """

    def __init__(self, graph: WorkflowGraph) -> None:
        self.graph = graph
        self.diff = GraphDiff()
        self.findings: List[LintFinding] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply_batch(self, batch: OperationBatch) -> GraphDiff:
        for index, op in enumerate(batch.ops):
            self.apply(op, index=index)
        return self.diff

    def apply(self, op: Operation, *, index: int = 0) -> None:
        match op:
            case AddNodeOp():
                self._add_node(op, index)
            case SetParamsOp():
                self._set_params(op, index)
            case ConnectOp():
                self._connect(op)
            case DeleteOp():
                self._delete(op, index)
            case AnnotateOp():
                self._annotate(op, index)
            case _:
                assert_never(op)

    # ------------------------------------------------------------------
    # Operation handlers
    # ------------------------------------------------------------------

    def _add_node(self, op: AddNodeOp, index: int) -> None:
        node = op.node.to_node()
        if self.graph.has_node(node.id):
            self.findings.append(
                error(
                    "duplicate_node_id",
                    f"Node id '{node.id}' already exists",
                    node_ref=node.id,
                    details={"opIndex": index},
                )
            )
            return
        self._do(
            NodeStep(
                node_id=node.id,
                before=None,
                after=node,
                slot=self.graph.node_count(),
            )
        )

    def _set_params(self, op: SetParamsOp, index: int) -> None:
        node = self.graph.find_node(op.name)
        if node is None:
            self._not_found(op.name, index)
            return
        self._do(
            NodeStep(
                node_id=node.id,
                before=node,
                after=node.with_parameters(op.parameters),
            )
        )

    def _connect(self, op: ConnectOp) -> None:
        conn = op.to_connection()
        if self.graph.has_connection(conn):
            logger.debug("skipping duplicate connection %s -> %s", conn.source, conn.target)
            return
        self._do(
            ConnectionStep(
                kind="insert",
                index=self.graph.connection_count(),
                connection=conn,
            )
        )

    def _delete(self, op: DeleteOp, index: int) -> None:
        node = self.graph.find_node(op.name)
        if node is None:
            self._not_found(op.name, index)
            return
        # Highest index first so earlier positions stay valid.
        for position, conn in reversed(self.graph.connections_touching(node)):
            self._do(ConnectionStep(kind="remove", index=position, connection=conn))
        self._do(
            NodeStep(
                node_id=node.id,
                before=node,
                after=None,
                slot=self.graph.node_index(node.id),
            )
        )

    def _annotate(self, op: AnnotateOp, index: int) -> None:
        node = self.graph.find_node(op.name)
        if node is None:
            self._not_found(op.name, index)
            return
        self._do(
            NodeStep(node_id=node.id, before=node, after=node.with_note(op.text))
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _do(self, step: DiffStep) -> None:
        step.forward(self.graph)
        self.diff.record(step)

    def _not_found(self, ref: str, index: int) -> None:
        self.findings.append(
            error(
                "node_not_found",
                f"Node '{ref}' does not exist and is not added earlier in the batch",
                node_ref=ref,
                details={"opIndex": index},
            )
        )
