from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

from flowpatch.graph.graph_schema import Node, Connection
from flowpatch.utils.helpers import utc_now


class WorkflowGraph:
    """
    In-memory representation of one workflow graph.

    Nodes are keyed by id (insertion ordered); connections are an ordered
    list. Cloning is shallow because nodes and connections are immutable.
    """

    def __init__(
        self,
        graph_id: str,
        *,
        name: Optional[str] = None,
        version: int = 0,
        last_modified: Optional[datetime] = None,
    ) -> None:
        self.id = graph_id
        self.name = name or graph_id
        self.version = version
        self.last_modified = last_modified or utc_now()
        self._nodes: Dict[str, Node] = {}
        self._connections: List[Connection] = []

    # -------------------- Nodes --------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def add_node(self, node: Node) -> None:
        if node.id in self._nodes:
            raise ValueError(f"node id '{node.id}' already exists")
        self._nodes[node.id] = node

    def put_node(self, node: Node) -> None:
        self._nodes[node.id] = node

    def insert_node_at(self, index: int, node: Node) -> None:
        items = [(k, v) for k, v in self._nodes.items() if k != node.id]
        items.insert(index, (node.id, node))
        self._nodes = dict(items)

    def node_index(self, node_id: str) -> int:
        for i, key in enumerate(self._nodes):
            if key == node_id:
                return i
        raise KeyError(node_id)

    def get_node(self, node_id: str) -> Node:
        return self._nodes[node_id]

    def remove_node(self, node_id: str) -> Node:
        return self._nodes.pop(node_id)

    def get_nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def node_count(self) -> int:
        return len(self._nodes)

    def resolve(self, ref: str) -> Optional[str]:
        """
        Resolve a node reference (id first, then name) to a node id.
        """
        if ref in self._nodes:
            return ref
        for node in self._nodes.values():
            if node.name == ref:
                return node.id
        return None

    def find_node(self, ref: str) -> Optional[Node]:
        node_id = self.resolve(ref)
        if node_id is None:
            return None
        return self._nodes[node_id]

    # -------------------- Connections --------------------

    def get_connections(self) -> List[Connection]:
        return list(self._connections)

    def connection_count(self) -> int:
        return len(self._connections)

    def has_connection(self, connection: Connection) -> bool:
        key = connection.key()
        return any(c.key() == key for c in self._connections)

    def insert_connection(self, index: int, connection: Connection) -> None:
        self._connections.insert(index, connection)

    def remove_connection_at(self, index: int) -> Connection:
        return self._connections.pop(index)

    def connections_touching(self, node: Node) -> List[Tuple[int, Connection]]:
        refs = {node.id, node.name}
        return [
            (i, c)
            for i, c in enumerate(self._connections)
            if c.source in refs or c.target in refs
        ]

    # -------------------- Analytics --------------------

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Build a directed multigraph over node ids.

        Connections whose endpoints do not resolve are left out.
        """
        g = nx.MultiDiGraph()
        for node_id, node in self._nodes.items():
            g.add_node(node_id, data=node)
        for conn in self._connections:
            source = self.resolve(conn.source)
            target = self.resolve(conn.target)
            if source is None or target is None:
                continue
            g.add_edge(source, target, data=conn)
        return g

    # -------------------- Cloning --------------------

    def clone(self) -> "WorkflowGraph":
        g = WorkflowGraph(
            self.id,
            name=self.name,
            version=self.version,
            last_modified=self.last_modified,
        )
        g._nodes = dict(self._nodes)
        g._connections = list(self._connections)
        return g

    def same_structure(self, other: "WorkflowGraph") -> bool:
        return (
            self._nodes == other._nodes
            and self._connections == other._connections
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "lastModified": self.last_modified.isoformat(),
            "nodes": [n.to_dict() for n in self._nodes.values()],
            "connections": [c.to_dict() for c in self._connections],
        }
