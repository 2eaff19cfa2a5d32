"""
History subsystem for flowpatch.

Implements undo/redo over recorded diffs and the batch lifecycle
journal.
"""

from flowpatch.history.undo_manager import UndoEntry, UndoRedoManager, HistoryResult
from flowpatch.history.journal import BatchJournal, BatchRecord, BatchState

__all__ = [
    "UndoEntry",
    "UndoRedoManager",
    "HistoryResult",
    "BatchJournal",
    "BatchRecord",
    "BatchState",
]
