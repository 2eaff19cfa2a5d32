"""
Change-set wire model and structural validation.
"""

from flowpatch.operations.schema import (
    NodeSpec,
    AddNodeOp,
    SetParamsOp,
    ConnectOp,
    DeleteOp,
    AnnotateOp,
    Operation,
    OperationBatch,
)
from flowpatch.operations.validator import OperationValidator

__all__ = [
    "NodeSpec",
    "AddNodeOp",
    "SetParamsOp",
    "ConnectOp",
    "DeleteOp",
    "AnnotateOp",
    "Operation",
    "OperationBatch",
    "OperationValidator",
]
