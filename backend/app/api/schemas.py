from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------- Requests ----------------


class SubmitBatchRequest(CamelModel):
    expected_version: int = Field(ge=0)
    batch: Dict[str, Any]


class CheckBatchRequest(CamelModel):
    batch: Dict[str, Any]


class UndoRequest(CamelModel):
    undo_id: Optional[str] = None


class SimulateRequest(CamelModel):
    sample_input: Optional[Dict[str, Any]] = None


# ---------------- Responses ----------------


class Finding(CamelModel):
    level: str
    code: str
    message: str
    node_ref: Optional[str] = None
    param: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class SubmitBatchResponse(CamelModel):
    new_version: int
    undo_id: str
    batch_id: Optional[str] = None
    warnings: List[Finding]


class FindingsResponse(CamelModel):
    valid: bool
    findings: List[Finding]


class HistoryResponse(CamelModel):
    new_version: int
    undo_id: str


class SimulateResponse(CamelModel):
    data_shapes: Dict[str, List[Dict[str, str]]]
    p95_estimate_ms: float
    nodes_visited: List[str]
    estimated_duration_ms: float
    paths: List[List[str]]
    warnings: List[Finding]


class CriticResponse(CamelModel):
    before: List[Finding]
    after: List[Finding]
    fixed_count: int
    attempts: int
    undo_ids: List[str]
    stopped_reason: Optional[str] = None


class GraphDocument(CamelModel):
    id: str
    name: Optional[str] = None
    version: int
    last_modified: str
    nodes: List[Dict[str, Any]]
    connections: List[Dict[str, Any]]


class GraphSummary(CamelModel):
    id: str
    name: Optional[str] = None
    version: int
    nodes: int


class BatchRecordSummary(CamelModel):
    batch_id: str
    graph_id: str
    state: str
    op_count: int
    base_version: int
    new_version: Optional[int] = None
    undo_id: Optional[str] = None
    error_code: Optional[str] = None
    source: str
    created_at: str
    updated_at: str
