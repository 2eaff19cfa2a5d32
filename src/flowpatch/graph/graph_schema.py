from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """
    Single step of an automation workflow.

    Nodes are immutable; every mutation produces a new instance so that
    history entries can hold references without copying.
    """

    id: str
    name: str
    type: str
    type_version: int = 1
    position: Tuple[float, float] = (0.0, 0.0)
    parameters: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, str] = field(default_factory=dict)
    notes: Tuple[str, ...] = ()

    def with_parameters(self, parameters: Dict[str, Any]) -> "Node":
        merged = dict(self.parameters)
        merged.update(parameters)
        return replace(self, parameters=merged)

    def with_note(self, text: str) -> "Node":
        return replace(self, notes=self.notes + (text,))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "typeVersion": self.type_version,
            "position": list(self.position),
            "parameters": dict(self.parameters),
            "credentials": dict(self.credentials),
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class Connection:
    """
    Directed link between two nodes.

    ``source`` and ``target`` hold a node id or a node name, exactly as
    submitted; resolution happens against the graph at read time.
    """

    source: str
    target: str
    output_index: Optional[int] = None
    input_index: Optional[int] = None

    def key(self) -> Tuple[str, str, int, int]:
        return (
            self.source,
            self.target,
            self.output_index or 0,
            self.input_index or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"from": self.source, "to": self.target}
        if self.output_index is not None:
            payload["outputIndex"] = self.output_index
        if self.input_index is not None:
            payload["inputIndex"] = self.input_index
        return payload
