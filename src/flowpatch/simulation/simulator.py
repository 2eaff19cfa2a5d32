from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from flowpatch.catalog.node_catalog import NodeCatalog, is_trigger_type
from flowpatch.config.settings import SimulatorConfig
from flowpatch.graph.graph_query import GraphQueryEngine
from flowpatch.graph.graph_store import GraphStore
from flowpatch.lint.findings import LintFinding, warnings_only
from flowpatch.lint.prevalidator import Prevalidator
from flowpatch.simulation.profiles import LATENCY_MS, Shape, generator_for
from flowpatch.utils.helpers import percentile

logger = logging.getLogger("flowpatch.simulator")


@dataclass(frozen=True)
class SimulationReport:
    """
    Side-effect-free dry run result.

    data_shapes maps node id to the list of synthetic output items the
    node would emit; latency figures are in milliseconds.
    """

    graph_id: str
    version: int
    data_shapes: Dict[str, List[Shape]]
    p95_estimate_ms: float
    nodes_visited: List[str]
    estimated_duration_ms: float
    paths: List[List[str]] = field(default_factory=list)
    warnings: List[LintFinding] = field(default_factory=list)


class Simulator:
    """
    Walks a graph snapshot breadth-first from its triggers, producing
    synthetic output shapes and a latency percentile. Shapes are computed
    in dependency order so every node sees all of its upstream outputs.

    Never touches live credentials or the network, and never writes to
    the store.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        catalog: NodeCatalog,
        prevalidator: Prevalidator,
        config: SimulatorConfig,
        latencies: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.prevalidator = prevalidator
        self.config = config
        self.latencies = dict(LATENCY_MS if latencies is None else latencies)

    def latency_for(self, node_type: str) -> float:
        return self.latencies.get(node_type, self.config.default_latency_ms)

    def simulate(
        self,
        graph_id: str,
        sample_input: Optional[Mapping[str, Any]] = None,
    ) -> SimulationReport:
        graph = self.store.snapshot(graph_id)
        query = GraphQueryEngine(graph, self.catalog)

        traversal = query.bfs_from_triggers()

        # ---------------- Shapes ----------------

        data_shapes: Dict[str, List[Shape]] = {}
        for node_id in query.dependency_order(traversal.order):
            node = graph.get_node(node_id)
            upstream: List[Shape] = []
            for pred in traversal.predecessors.get(node_id, []):
                upstream.extend(data_shapes.get(pred, []))

            if is_trigger_type(self.catalog, node.type) and sample_input is not None:
                upstream = []

            generator = generator_for(node.type)
            data_shapes[node_id] = generator(node, upstream, sample_input)

        # ---------------- Latency ----------------

        paths = query.trigger_to_sink_paths(limit=self.config.max_paths)
        totals = [
            sum(self.latency_for(graph.get_node(n).type) for n in path)
            for path in paths
        ]
        p_estimate = percentile(totals, self.config.percentile)
        duration = float(max(totals)) if totals else 0.0

        warnings = warnings_only(self.prevalidator.lint(graph))

        logger.debug(
            "simulated %s@%s: visited=%s paths=%s p%s=%.1fms",
            graph_id,
            graph.version,
            len(traversal.order),
            len(paths),
            self.config.percentile,
            p_estimate,
        )

        return SimulationReport(
            graph_id=graph_id,
            version=graph.version,
            data_shapes=data_shapes,
            p95_estimate_ms=p_estimate,
            nodes_visited=traversal.order,
            estimated_duration_ms=duration,
            paths=paths,
            warnings=warnings,
        )
