"""
flowpatch
=========

A transactional change-set engine for automation-workflow graphs.

Callers (human editors or AI planners) propose batches of operations
against a versioned graph; a batch is either applied in full, with an
undo entry recorded, or rejected without touching the stored graph.

Core idea:
- Never trust a suggested edit until it has passed schema, policy and
  semantic checks on a working copy.

Public API:
- GraphStore
- Applier
- UndoRedoManager
- Critic
- Simulator
"""

from flowpatch.graph.graph_store import GraphStore
from flowpatch.engine.applier import Applier
from flowpatch.history.undo_manager import UndoRedoManager
from flowpatch.critic.critic import Critic
from flowpatch.simulation.simulator import Simulator

__all__ = [
    "GraphStore",
    "Applier",
    "UndoRedoManager",
    "Critic",
    "Simulator",
]

__version__ = "0.1.0"
