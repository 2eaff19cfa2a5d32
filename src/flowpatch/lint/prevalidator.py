from __future__ import annotations

from collections import Counter
from typing import Any, List

from flowpatch.catalog.node_catalog import NodeCatalog, NodeSchema
from flowpatch.config.settings import LintConfig
from flowpatch.graph.graph_query import GraphQueryEngine
from flowpatch.graph.graph_schema import Node
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.lint.findings import LintFinding, error, warning


class Prevalidator:
    """
    Semantic, node-type-aware checks over a (tentative) graph.

    Pure: reads the graph and the catalog, never mutates either.
    """

    def __init__(
        self,
        catalog: NodeCatalog,
        config: LintConfig | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or LintConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def lint(self, graph: WorkflowGraph) -> List[LintFinding]:
        findings: List[LintFinding] = []

        for node in graph.get_nodes():
            schema = self.catalog.get_node_schema(node.type)
            if schema is None:
                findings.append(
                    warning(
                        "unknown_node_type",
                        f"Node '{node.name}' has unknown type '{node.type}'",
                        node_ref=node.id,
                    )
                )
                continue
            findings.extend(self._check_parameters(node, schema))
            findings.extend(self._check_credentials(node, schema))

        query = GraphQueryEngine(graph, self.catalog)

        findings.extend(self._check_connections(graph))
        findings.extend(self._check_trigger(query))

        if self.config.detect_cycles and query.has_cycle():
            findings.append(
                error("circular_dependency", "Workflow contains circular dependencies")
            )

        findings.extend(self._check_names(graph))

        if self.config.warn_unconnected:
            findings.extend(self._check_unconnected(graph, query))

        if self.config.warn_dangling:
            findings.extend(self._check_dangling(graph, query))

        # errors first, stable within a level
        return sorted(findings, key=lambda f: 0 if f.is_error else 1)

    # ------------------------------------------------------------------
    # Per-node checks
    # ------------------------------------------------------------------

    def _check_parameters(self, node: Node, schema: NodeSchema) -> List[LintFinding]:
        findings: List[LintFinding] = []

        for param in schema.required_params:
            if _is_blank(node.parameters.get(param)):
                details = {}
                if param in schema.defaults:
                    details["default"] = schema.defaults[param]
                findings.append(
                    error(
                        "missing_required_param",
                        f"Node '{node.name}' is missing required parameter '{param}'",
                        node_ref=node.id,
                        param=param,
                        details=details,
                    )
                )

        for param, allowed in schema.enum_constraints.items():
            if param not in node.parameters:
                continue
            value = node.parameters[param]
            if value not in allowed:
                findings.append(
                    error(
                        "invalid_enum",
                        f"Node '{node.name}' has invalid {param} '{value}'",
                        node_ref=node.id,
                        param=param,
                        details={"value": value, "allowed": list(allowed)},
                    )
                )

        return findings

    def _check_credentials(self, node: Node, schema: NodeSchema) -> List[LintFinding]:
        findings: List[LintFinding] = []

        for cred in schema.credentials:
            if cred not in node.credentials:
                findings.append(
                    warning(
                        "missing_credentials",
                        f"Node '{node.name}' requires credentials '{cred}'",
                        node_ref=node.id,
                        param=cred,
                    )
                )

        for cred, ref in node.credentials.items():
            if not isinstance(ref, str) or not ref.strip():
                findings.append(
                    error(
                        "invalid_credentials",
                        f"Node '{node.name}' has an empty reference for credentials '{cred}'",
                        node_ref=node.id,
                        param=cred,
                    )
                )

        return findings

    # ------------------------------------------------------------------
    # Whole-graph checks
    # ------------------------------------------------------------------

    def _check_connections(self, graph: WorkflowGraph) -> List[LintFinding]:
        findings: List[LintFinding] = []
        for index, conn in enumerate(graph.get_connections()):
            for side, ref in (("from", conn.source), ("to", conn.target)):
                if graph.resolve(ref) is None:
                    findings.append(
                        error(
                            "dangling_connection",
                            f"Connection {conn.source} -> {conn.target} references missing node '{ref}'",
                            node_ref=ref,
                            details={"connectionIndex": index, "side": side},
                        )
                    )
        return findings

    def _check_trigger(self, query: GraphQueryEngine) -> List[LintFinding]:
        if query.triggers():
            return []
        return [error("missing_trigger", "Workflow has no trigger node")]

    def _check_names(self, graph: WorkflowGraph) -> List[LintFinding]:
        counts = Counter(n.name for n in graph.get_nodes())
        return [
            warning(
                "duplicate_node_name",
                f"Node name '{name}' is used by {count} nodes; name references are ambiguous",
                node_ref=name,
            )
            for name, count in counts.items()
            if count > 1
        ]

    def _check_unconnected(
        self,
        graph: WorkflowGraph,
        query: GraphQueryEngine,
    ) -> List[LintFinding]:
        triggers = set(query.triggers())
        return [
            warning(
                "unconnected_node",
                f"Node '{node.name}' has no incoming connections",
                node_ref=node.id,
            )
            for node in graph.get_nodes()
            if node.id not in triggers and not query.predecessors(node.id)
        ]

    def _check_dangling(
        self,
        graph: WorkflowGraph,
        query: GraphQueryEngine,
    ) -> List[LintFinding]:
        triggers = set(query.triggers())
        return [
            warning(
                "dangling_branch",
                f"Node '{node.name}' has no outgoing connections",
                node_ref=node.id,
            )
            for node in graph.get_nodes()
            if node.id not in triggers and not query.neighbors(node.id)
        ]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False
