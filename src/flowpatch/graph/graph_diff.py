from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from flowpatch.graph.graph_schema import Node, Connection
from flowpatch.graph.workflow_graph import WorkflowGraph


@dataclass(frozen=True)
class NodeStep:
    """
    Replacement of one node slot: ``before`` absent means insert,
    ``after`` absent means removal. ``slot`` is the position in node
    order the node occupies while present.
    """

    node_id: str
    before: Optional[Node]
    after: Optional[Node]
    slot: Optional[int] = None

    def forward(self, graph: WorkflowGraph) -> None:
        self._write(graph, self.after)

    def backward(self, graph: WorkflowGraph) -> None:
        self._write(graph, self.before)

    def _write(self, graph: WorkflowGraph, node: Optional[Node]) -> None:
        if node is None:
            graph.remove_node(self.node_id)
        elif self.slot is not None and not graph.has_node(node.id):
            graph.insert_node_at(self.slot, node)
        else:
            graph.put_node(node)


@dataclass(frozen=True)
class ConnectionStep:
    """
    Insertion or removal of a connection at a fixed list position.
    """

    kind: Literal["insert", "remove"]
    index: int
    connection: Connection

    def forward(self, graph: WorkflowGraph) -> None:
        if self.kind == "insert":
            graph.insert_connection(self.index, self.connection)
        else:
            graph.remove_connection_at(self.index)

    def backward(self, graph: WorkflowGraph) -> None:
        if self.kind == "insert":
            graph.remove_connection_at(self.index)
        else:
            graph.insert_connection(self.index, self.connection)


DiffStep = Union[NodeStep, ConnectionStep]


@dataclass
class GraphDiff:
    """
    Ordered primitive steps recorded while a batch was applied.

    Replaying forwards re-applies the batch; replaying backwards in
    reverse order restores the exact pre-batch structure.
    """

    steps: List[DiffStep] = field(default_factory=list)

    def record(self, step: DiffStep) -> None:
        self.steps.append(step)

    def apply(self, graph: WorkflowGraph) -> None:
        for step in self.steps:
            step.forward(graph)

    def revert(self, graph: WorkflowGraph) -> None:
        for step in reversed(self.steps):
            step.backward(graph)

    def touched_nodes(self) -> List[str]:
        seen: List[str] = []
        for step in self.steps:
            if isinstance(step, NodeStep) and step.node_id not in seen:
                seen.append(step.node_id)
        return seen

    def __len__(self) -> int:
        return len(self.steps)
