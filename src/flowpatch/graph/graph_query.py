from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from itertools import islice
from typing import Dict, List, Set

import networkx as nx

from flowpatch.catalog.node_catalog import NodeCatalog, is_trigger_type
from flowpatch.graph.workflow_graph import WorkflowGraph


@dataclass(frozen=True)
class TraversalResult:
    """
    Breadth-first visit order from the trigger nodes, with the
    resolved predecessors of every visited node.
    """

    order: List[str]
    predecessors: Dict[str, List[str]]


class GraphQueryEngine:
    """
    Read-only traversal over a workflow graph snapshot.
    """

    def __init__(self, graph: WorkflowGraph, catalog: NodeCatalog) -> None:
        self.graph = graph
        self.catalog = catalog
        self._nx = graph.to_networkx()

    def triggers(self) -> List[str]:
        return [
            n.id for n in self.graph.get_nodes()
            if is_trigger_type(self.catalog, n.type)
        ]

    def neighbors(self, node_id: str) -> List[str]:
        if node_id not in self._nx:
            return []
        return list(self._nx.successors(node_id))

    def predecessors(self, node_id: str) -> List[str]:
        if node_id not in self._nx:
            return []
        return list(self._nx.predecessors(node_id))

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self._nx)

    def bfs_from_triggers(self) -> TraversalResult:
        order: List[str] = []
        visited: Set[str] = set()
        frontier = deque(self.triggers())

        while frontier:
            node_id = frontier.popleft()
            if node_id in visited:
                continue
            visited.add(node_id)
            order.append(node_id)
            for nbr in self.neighbors(node_id):
                if nbr not in visited:
                    frontier.append(nbr)

        return TraversalResult(
            order=order,
            predecessors={n: self.predecessors(n) for n in order},
        )

    def dependency_order(self, nodes: List[str]) -> List[str]:
        """
        Order ``nodes`` so every node follows its predecessors among them,
        breaking ties by position in ``nodes``. Cyclic subgraphs keep the
        given order.
        """
        sub = self._nx.subgraph(nodes)
        if not nx.is_directed_acyclic_graph(sub):
            return list(nodes)
        rank = {node_id: i for i, node_id in enumerate(nodes)}
        return list(nx.lexicographical_topological_sort(sub, key=rank.__getitem__))

    def trigger_to_sink_paths(self, *, limit: int) -> List[List[str]]:
        """
        Simple paths from every trigger to every reachable sink, capped
        at ``limit`` paths in total.
        """
        paths: List[List[str]] = []
        seen: Set[tuple] = set()
        for trigger in self.triggers():
            if len(paths) >= limit:
                break
            sinks = [
                n for n in nx.descendants(self._nx, trigger)
                if self._nx.out_degree(n) == 0
            ]
            if not sinks:
                # Isolated trigger, or every branch loops back.
                paths.append([trigger])
                continue
            found = nx.all_simple_paths(self._nx, trigger, sinks)
            for path in islice(found, limit * 4):
                key = tuple(path)
                if key in seen:
                    continue
                seen.add(key)
                paths.append(path)
                if len(paths) >= limit:
                    break
        return paths
