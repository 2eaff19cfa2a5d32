from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List

from flowpatch.catalog.node_catalog import NodeCatalog, is_trigger_type
from flowpatch.config.settings import PolicyConfig
from flowpatch.errors import PolicyViolation
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.operations.schema import AddNodeOp, OperationBatch, SetParamsOp
from flowpatch.utils.text import extract_host, host_matches

logger = logging.getLogger("flowpatch.policy")


class PolicyEnforcer:
    """
    Governance limits evaluated after structural validation and before
    semantic linting.

    ``graph`` is the tentative working copy with the batch applied, so
    graph-level rules see the state that would be committed.
    """

    def __init__(self, catalog: NodeCatalog) -> None:
        self.catalog = catalog

    def check(
        self,
        batch: OperationBatch,
        graph: WorkflowGraph,
        config: PolicyConfig,
    ) -> None:
        violations = self.evaluate(batch, graph, config)
        if violations:
            logger.warning(
                "policy rejected batch for graph %s: %s",
                graph.id,
                [v["code"] for v in violations],
            )
            raise PolicyViolation(
                "; ".join(v["message"] for v in violations),
                violations=violations,
            )

    def evaluate(
        self,
        batch: OperationBatch,
        graph: WorkflowGraph,
        config: PolicyConfig,
    ) -> List[Dict[str, Any]]:
        violations: List[Dict[str, Any]] = []

        # ---------------- Added nodes ----------------

        added = [op for op in batch.ops if isinstance(op, AddNodeOp)]
        if len(added) > config.max_nodes_added:
            violations.append(
                _violation(
                    "too_many_nodes_added",
                    f"Added nodes exceed {config.max_nodes_added}",
                    addedNodes=len(added),
                )
            )

        # ---------------- Node type lists ----------------

        rejected_types = sorted(
            {
                op.node.type
                for op in added
                if (config.node_whitelist and op.node.type not in config.node_whitelist)
                or op.node.type in config.node_blacklist
            }
        )
        if rejected_types:
            violations.append(
                _violation(
                    "node_type_not_allowed",
                    "Node types are not allowed by policy",
                    types=rejected_types,
                )
            )

        # ---------------- Domain blacklist ----------------

        if config.domain_blacklist:
            blocked = [
                value
                for value in self._parameter_strings(batch)
                if _is_blocked(value, config.domain_blacklist)
            ]
            if blocked:
                violations.append(
                    _violation(
                        "domain_blacklist",
                        "URLs match domain blacklist",
                        urls=blocked,
                    )
                )

        # ---------------- Trigger requirement ----------------

        if config.require_trigger and not any(
            is_trigger_type(self.catalog, n.type) for n in graph.get_nodes()
        ):
            violations.append(
                _violation(
                    "missing_trigger",
                    "Graph must contain at least one trigger node",
                )
            )

        return violations

    def _parameter_strings(self, batch: OperationBatch) -> Iterator[str]:
        for op in batch.ops:
            if isinstance(op, AddNodeOp):
                yield from _walk_strings(op.node.parameters)
            elif isinstance(op, SetParamsOp):
                yield from _walk_strings(op.parameters)


def _walk_strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for v in value.values():
            yield from _walk_strings(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _walk_strings(v)


def _is_blocked(value: str, patterns: tuple) -> bool:
    host = extract_host(value)
    if host is None:
        return False
    return any(host_matches(host, p) for p in patterns)


def _violation(code: str, message: str, **details: Any) -> Dict[str, Any]:
    return {"code": code, "message": message, "details": details}
