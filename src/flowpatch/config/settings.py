from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

# ---------------------------------------------------------------------
# Structural batch limits
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class BatchLimitsConfig:
    """
    Hard structural limits applied before any graph is touched.
    """

    max_operations: int = 500
    max_payload_bytes: int = 256 * 1024


# ---------------------------------------------------------------------
# Governance
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PolicyConfig:
    """
    Governance rules evaluated against every submitted batch.

    An empty whitelist means every node type is allowed unless
    blacklisted.
    """

    max_nodes_added: int = 20
    node_whitelist: Tuple[str, ...] = ()
    node_blacklist: Tuple[str, ...] = ()
    domain_blacklist: Tuple[str, ...] = ()
    require_trigger: bool = True


# ---------------------------------------------------------------------
# Semantic linting
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LintConfig:
    detect_cycles: bool = True
    warn_unconnected: bool = True
    warn_dangling: bool = True


# ---------------------------------------------------------------------
# Auto-repair
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class CriticConfig:
    """
    Bounds the auto-repair loop.
    """

    max_tries: int = 3
    enum_match_cutoff: float = 0.6


# ---------------------------------------------------------------------
# Dry-run estimation
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class SimulatorConfig:
    default_latency_ms: float = 150.0
    percentile: float = 95.0
    max_paths: int = 1000


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class FlowpatchConfig:
    """
    Root configuration object for flowpatch.

    This object is intended to be:
    - constructed explicitly
    - passed through all major subsystems
    - treated as immutable system policy
    """

    limits: BatchLimitsConfig = field(default_factory=BatchLimitsConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    critic: CriticConfig = field(default_factory=CriticConfig)
    simulator: SimulatorConfig = field(default_factory=SimulatorConfig)
