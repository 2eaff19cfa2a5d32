from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from flowpatch.graph.graph_schema import Node, Connection

NonEmptyStr = Annotated[str, Field(min_length=1, pattern=r"\S")]


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class NodeSpec(_WireModel):
    """
    Node payload carried by ``add_node``.
    """

    id: NonEmptyStr
    name: NonEmptyStr
    type: NonEmptyStr
    type_version: int = Field(default=1, ge=1, alias="typeVersion")
    position: Tuple[float, float] = (0.0, 0.0)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    credentials: Dict[str, str] = Field(default_factory=dict)

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            name=self.name,
            type=self.type,
            type_version=self.type_version,
            position=self.position,
            parameters=dict(self.parameters),
            credentials=dict(self.credentials),
        )


class AddNodeOp(_WireModel):
    op: Literal["add_node"]
    node: NodeSpec


class SetParamsOp(_WireModel):
    op: Literal["set_params"]
    name: NonEmptyStr
    parameters: Dict[str, Any]


class ConnectOp(_WireModel):
    op: Literal["connect"]
    from_: NonEmptyStr = Field(alias="from")
    to: NonEmptyStr
    output_index: Optional[int] = Field(default=None, ge=0, alias="outputIndex")
    input_index: Optional[int] = Field(default=None, ge=0, alias="inputIndex")

    def to_connection(self) -> Connection:
        return Connection(
            source=self.from_,
            target=self.to,
            output_index=self.output_index,
            input_index=self.input_index,
        )


class DeleteOp(_WireModel):
    op: Literal["delete"]
    name: NonEmptyStr


class AnnotateOp(_WireModel):
    op: Literal["annotate"]
    name: NonEmptyStr
    text: NonEmptyStr


Operation = Annotated[
    Union[AddNodeOp, SetParamsOp, ConnectOp, DeleteOp, AnnotateOp],
    Field(discriminator="op"),
]


class OperationBatch(_WireModel):
    """
    Ordered, size-bounded list of operations applied as one unit.
    """

    version: Literal["v1"] = "v1"
    ops: List[Operation]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def count(self, op: str) -> int:
        return sum(1 for o in self.ops if o.op == op)
