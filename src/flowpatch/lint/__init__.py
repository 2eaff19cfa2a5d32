"""
Semantic linting of workflow graphs.
"""

from flowpatch.lint.findings import (
    LintFinding,
    has_errors,
    errors_only,
    warnings_only,
)
from flowpatch.lint.prevalidator import Prevalidator

__all__ = [
    "LintFinding",
    "has_errors",
    "errors_only",
    "warnings_only",
    "Prevalidator",
]
