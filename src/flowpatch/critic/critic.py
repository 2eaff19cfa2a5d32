from __future__ import annotations

import logging
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Any, Dict, List, Optional, Sequence

from flowpatch.config.settings import CriticConfig
from flowpatch.engine.applier import Applier
from flowpatch.errors import GraphVersionConflict, PolicyViolation, PrevalidationFailed
from flowpatch.graph.graph_store import GraphStore
from flowpatch.lint.findings import LintFinding
from flowpatch.lint.prevalidator import Prevalidator
from flowpatch.operations.schema import OperationBatch, SetParamsOp
from flowpatch.utils.text import normalize_text

logger = logging.getLogger("flowpatch.critic")


@dataclass(frozen=True)
class CriticReport:
    """
    Outcome of one bounded auto-repair run.
    """

    graph_id: str
    before: List[LintFinding]
    after: List[LintFinding]
    fixed_count: int
    attempts: int
    undo_ids: List[str] = field(default_factory=list)
    stopped_reason: Optional[str] = None


class Critic:
    """
    Bounded auto-repair loop built on the linter and the applier.

    Fixable findings:
    - missing_required_param with a catalog default
    - invalid_enum with exactly one closest allowed value

    Corrective batches go through the regular applier path, so they are
    atomic and undoable like any caller batch.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        applier: Applier,
        prevalidator: Prevalidator,
        config: CriticConfig,
    ) -> None:
        self.store = store
        self.applier = applier
        self.prevalidator = prevalidator
        self.config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, graph_id: str) -> CriticReport:
        graph = self.store.snapshot(graph_id)
        before = self.prevalidator.lint(graph)

        findings = before
        fixed_count = 0
        attempts = 0
        undo_ids: List[str] = []
        stopped_reason: Optional[str] = None

        while attempts < self.config.max_tries:
            batch = self.build_fix_batch(findings)
            if batch is None:
                stopped_reason = "no_fixable_findings"
                break

            attempts += 1
            try:
                result = self.applier.apply(
                    graph_id,
                    graph.version,
                    batch,
                    tolerate_existing=True,
                    source="critic",
                )
            except GraphVersionConflict as exc:
                logger.info(
                    "critic attempt %s on %s lost a version race (now %s); retrying",
                    attempts,
                    graph_id,
                    exc.current_version,
                )
            except (PolicyViolation, PrevalidationFailed) as exc:
                logger.warning(
                    "critic fix batch for %s rejected: %s",
                    graph_id,
                    exc.code,
                )
                stopped_reason = exc.code
                break
            else:
                fixed_count += _fix_count(batch)
                undo_ids.append(result.undo_id)

            graph = self.store.snapshot(graph_id)
            findings = self.prevalidator.lint(graph)
        else:
            if self.build_fix_batch(findings) is None:
                stopped_reason = "no_fixable_findings"
            else:
                stopped_reason = "max_tries"

        after = self.prevalidator.lint(self.store.snapshot(graph_id))

        logger.info(
            "critic on %s: %s -> %s findings, fixed=%s, attempts=%s (%s)",
            graph_id,
            len(before),
            len(after),
            fixed_count,
            attempts,
            stopped_reason,
        )

        return CriticReport(
            graph_id=graph_id,
            before=before,
            after=after,
            fixed_count=fixed_count,
            attempts=attempts,
            undo_ids=undo_ids,
            stopped_reason=stopped_reason,
        )

    def build_fix_batch(self, findings: Sequence[LintFinding]) -> Optional[OperationBatch]:
        """
        One ``set_params`` per node, merging every fix found for it.
        """
        fixes: Dict[str, Dict[str, Any]] = {}

        for finding in findings:
            if finding.node_ref is None or finding.param is None:
                continue
            value = self.fix_for(finding)
            if value is _NO_FIX:
                continue
            fixes.setdefault(finding.node_ref, {})[finding.param] = value

        if not fixes:
            return None

        return OperationBatch(
            ops=[
                SetParamsOp(op="set_params", name=node_id, parameters=params)
                for node_id, params in fixes.items()
            ]
        )

    def fix_for(self, finding: LintFinding) -> Any:
        if finding.code == "missing_required_param":
            if "default" in finding.details:
                return finding.details["default"]
            return _NO_FIX

        if finding.code == "invalid_enum":
            match = closest_match(
                finding.details.get("value"),
                finding.details.get("allowed") or [],
                cutoff=self.config.enum_match_cutoff,
            )
            return _NO_FIX if match is None else match

        return _NO_FIX


class _NoFix:
    def __repr__(self) -> str:
        return "<no fix>"


_NO_FIX = _NoFix()


def closest_match(value: Any, allowed: Sequence[Any], *, cutoff: float) -> Optional[Any]:
    """
    Single unambiguous closest allowed value, or None.

    A case/whitespace-insensitive exact match wins outright; otherwise the
    best similarity ratio must reach ``cutoff`` and must not be tied.
    """
    if not allowed or value is None:
        return None

    needle = normalize_text(str(value))
    exact = [a for a in allowed if normalize_text(str(a)) == needle]
    if len(exact) == 1:
        return exact[0]
    if len(exact) > 1:
        return None

    scored = sorted(
        ((SequenceMatcher(None, needle, normalize_text(str(a))).ratio(), a) for a in allowed),
        key=lambda pair: pair[0],
        reverse=True,
    )
    best_score, best = scored[0]
    if best_score < cutoff:
        return None
    if len(scored) > 1 and scored[1][0] == best_score:
        return None
    return best


def _fix_count(batch: OperationBatch) -> int:
    return sum(len(op.parameters) for op in batch.ops if isinstance(op, SetParamsOp))
