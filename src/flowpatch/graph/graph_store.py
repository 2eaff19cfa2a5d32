from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List

from flowpatch.errors import NotFound
from flowpatch.graph.workflow_graph import WorkflowGraph

logger = logging.getLogger("flowpatch.store")


class GraphStore:
    """
    Authoritative, versioned in-memory store of workflow graphs.

    One re-entrant lock per graph id serializes check-and-commit for that
    graph; unrelated graph ids never contend. Stored graphs are replaced
    wholesale on commit and never mutated in place, so a snapshot handed
    to a reader stays consistent.
    """

    def __init__(self) -> None:
        self._graphs: Dict[str, WorkflowGraph] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._import_hooks: List[Callable[[str], None]] = []

    # -------------------- Locking --------------------

    def lock(self, graph_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(graph_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[graph_id] = lock
            return lock

    # -------------------- Reads --------------------

    def exists(self, graph_id: str) -> bool:
        return graph_id in self._graphs

    def get(self, graph_id: str) -> WorkflowGraph:
        graph = self._graphs.get(graph_id)
        if graph is None:
            raise NotFound(f"graph '{graph_id}' not found")
        return graph

    def snapshot(self, graph_id: str) -> WorkflowGraph:
        return self.get(graph_id).clone()

    def version(self, graph_id: str) -> int:
        return self.get(graph_id).version

    def list_graphs(self) -> List[WorkflowGraph]:
        return list(self._graphs.values())

    # -------------------- Writes --------------------

    def get_or_create(self, graph_id: str) -> WorkflowGraph:
        with self.lock(graph_id):
            graph = self._graphs.get(graph_id)
            if graph is None:
                graph = WorkflowGraph(graph_id)
                self._graphs[graph_id] = graph
                logger.info("created graph %s at version 0", graph_id)
            return graph

    def commit(self, graph: WorkflowGraph) -> None:
        """
        Replace the stored graph. Callers must hold ``lock(graph.id)``.
        """
        self._graphs[graph.id] = graph

    def on_import(self, hook: Callable[[str], None]) -> None:
        """
        Register ``hook(graph_id)``, called under the graph lock whenever
        a graph is replaced through ``import_graph``.
        """
        self._import_hooks.append(hook)

    def import_graph(self, graph: WorkflowGraph) -> None:
        """
        Seed a graph as-is, bypassing the change-set pipeline.
        """
        with self.lock(graph.id):
            self._graphs[graph.id] = graph.clone()
            for hook in self._import_hooks:
                hook(graph.id)
            logger.info(
                "imported graph %s (version=%s, nodes=%s)",
                graph.id,
                graph.version,
                graph.node_count(),
            )

    def reset(self) -> None:
        with self._registry_lock:
            self._graphs.clear()
            self._locks.clear()
