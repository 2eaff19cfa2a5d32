"""
Graph subsystem for flowpatch.

Defines the workflow graph model and the versioned store used for:
- optimistic, per-graph serialized commits
- invertible diffs for undo/redo
- read-only traversal for linting and simulation
"""

from flowpatch.graph.graph_schema import Node, Connection
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.graph.graph_store import GraphStore
from flowpatch.graph.graph_diff import GraphDiff, NodeStep, ConnectionStep
from flowpatch.graph.graph_query import GraphQueryEngine

__all__ = [
    "Node",
    "Connection",
    "WorkflowGraph",
    "GraphStore",
    "GraphDiff",
    "NodeStep",
    "ConnectionStep",
    "GraphQueryEngine",
]
