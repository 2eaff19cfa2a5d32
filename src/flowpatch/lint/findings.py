from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

Level = Literal["error", "warning"]


@dataclass(frozen=True)
class LintFinding:
    """
    One graded observation about a graph.

    - error: blocks apply
    - warning: informational only
    """

    level: Level
    code: str
    message: str
    node_ref: Optional[str] = None
    param: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    def key(self) -> Tuple[str, Optional[str], Optional[str]]:
        return (self.code, self.node_ref, self.param)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "nodeRef": self.node_ref,
            "param": self.param,
            "details": dict(self.details),
        }


def error(code: str, message: str, **kwargs: Any) -> LintFinding:
    return LintFinding(level="error", code=code, message=message, **kwargs)


def warning(code: str, message: str, **kwargs: Any) -> LintFinding:
    return LintFinding(level="warning", code=code, message=message, **kwargs)


def has_errors(findings: Iterable[LintFinding]) -> bool:
    return any(f.is_error for f in findings)


def errors_only(findings: Iterable[LintFinding]) -> List[LintFinding]:
    return [f for f in findings if f.is_error]


def warnings_only(findings: Iterable[LintFinding]) -> List[LintFinding]:
    return [f for f in findings if not f.is_error]
