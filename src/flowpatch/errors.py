from __future__ import annotations

from typing import Any, Dict, List, Optional


class FlowpatchError(Exception):
    """
    Base exception for every failure surfaced to callers.

    Each subclass carries a stable wire ``code`` and a structured
    ``details`` payload with enough context for the caller to act on.
    """

    code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidOperationBatch(FlowpatchError):
    """
    Structural failure: malformed or oversized batch. Never mutates.
    """

    code = "invalid_operation_batch"

    def __init__(self, message: str, *, issues: List[Dict[str, Any]]) -> None:
        super().__init__(message, details={"issues": issues})
        self.issues = issues


class PolicyViolation(FlowpatchError):
    """
    Governance failure. Terminal until configuration changes.
    """

    code = "policy_violation"

    def __init__(self, message: str, *, violations: List[Dict[str, Any]]) -> None:
        super().__init__(message, details={"violations": violations})
        self.violations = violations


class PrevalidationFailed(FlowpatchError):
    """
    Semantic failure: the tentative graph has blocking lint findings.
    """

    code = "prevalidation_failed"

    def __init__(self, message: str, *, findings: List[Any]) -> None:
        super().__init__(
            message,
            details={"findings": [f.to_dict() for f in findings]},
        )
        self.findings = findings


class GraphVersionConflict(FlowpatchError):
    """
    Optimistic concurrency failure. Caller must refetch and retry.
    """

    code = "conflict_graph_version"

    def __init__(
        self,
        message: str,
        *,
        current_version: int,
        expected_version: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            details={
                "currentVersion": current_version,
                "expectedVersion": expected_version,
            },
        )
        self.current_version = current_version
        self.expected_version = expected_version


class NotFound(FlowpatchError):
    """
    Unknown graph id, undo id, or empty history stack.
    """

    code = "not_found"
