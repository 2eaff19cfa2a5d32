"""
Configuration layer for flowpatch.

This module defines the configuration contracts that control batch
limits, governance policy, linting, auto-repair and dry-run estimation.

Configuration in flowpatch is:
- Explicit (passed, not global)
- Typed (validated at construction time)
- Immutable once built
"""

from flowpatch.config.settings import (
    BatchLimitsConfig,
    PolicyConfig,
    LintConfig,
    CriticConfig,
    SimulatorConfig,
    FlowpatchConfig,
)

__all__ = [
    "BatchLimitsConfig",
    "PolicyConfig",
    "LintConfig",
    "CriticConfig",
    "SimulatorConfig",
    "FlowpatchConfig",
]
