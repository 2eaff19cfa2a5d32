from typing import List, Optional

from fastapi import APIRouter, Depends

from backend.app.api.schemas import (
    BatchRecordSummary,
    CheckBatchRequest,
    CriticResponse,
    Finding,
    FindingsResponse,
    GraphDocument,
    GraphSummary,
    HistoryResponse,
    SimulateRequest,
    SimulateResponse,
    SubmitBatchRequest,
    SubmitBatchResponse,
    UndoRequest,
)
from backend.app.dependencies import get_workflow_service
from backend.app.services.workflow_service import WorkflowService

router = APIRouter()


def _findings(findings) -> List[Finding]:
    return [Finding.model_validate(f.to_dict()) for f in findings]


@router.get("/", response_model=List[GraphSummary])
def list_graphs(service: WorkflowService = Depends(get_workflow_service)):
    return [GraphSummary(**g) for g in service.list_graphs()]


@router.get("/{graph_id}", response_model=GraphDocument)
def get_graph(
    graph_id: str,
    service: WorkflowService = Depends(get_workflow_service),
):
    return GraphDocument.model_validate(service.get_graph(graph_id).to_dict())


@router.get("/{graph_id}/history", response_model=List[BatchRecordSummary])
def graph_history(
    graph_id: str,
    service: WorkflowService = Depends(get_workflow_service),
):
    return [
        BatchRecordSummary.model_validate(r.to_dict())
        for r in service.history_for(graph_id)
    ]


# ---------------- Change-sets ----------------


@router.post("/{graph_id}/batch", response_model=SubmitBatchResponse)
def submit_batch(
    graph_id: str,
    request: SubmitBatchRequest,
    service: WorkflowService = Depends(get_workflow_service),
):
    result = service.submit_batch(graph_id, request.expected_version, request.batch)
    return SubmitBatchResponse(
        new_version=result.new_version,
        undo_id=result.undo_id,
        batch_id=result.batch_id,
        warnings=_findings(result.warnings),
    )


@router.post("/{graph_id}/batch/check", response_model=FindingsResponse)
def check_batch(
    graph_id: str,
    request: CheckBatchRequest,
    service: WorkflowService = Depends(get_workflow_service),
):
    findings = service.check_batch(graph_id, request.batch)
    return FindingsResponse(valid=service.is_valid(findings), findings=_findings(findings))


@router.post("/{graph_id}/undo", response_model=HistoryResponse)
def undo(
    graph_id: str,
    request: Optional[UndoRequest] = None,
    service: WorkflowService = Depends(get_workflow_service),
):
    undo_id = request.undo_id if request is not None else None
    result = service.undo(graph_id, undo_id)
    return HistoryResponse(new_version=result.new_version, undo_id=result.undo_id)


@router.post("/{graph_id}/redo", response_model=HistoryResponse)
def redo(
    graph_id: str,
    service: WorkflowService = Depends(get_workflow_service),
):
    result = service.redo(graph_id)
    return HistoryResponse(new_version=result.new_version, undo_id=result.undo_id)


# ---------------- Analysis ----------------


@router.post("/{graph_id}/validate", response_model=FindingsResponse)
def validate(
    graph_id: str,
    service: WorkflowService = Depends(get_workflow_service),
):
    findings = service.validate(graph_id)
    return FindingsResponse(valid=service.is_valid(findings), findings=_findings(findings))


@router.post("/{graph_id}/simulate", response_model=SimulateResponse)
def simulate(
    graph_id: str,
    request: Optional[SimulateRequest] = None,
    service: WorkflowService = Depends(get_workflow_service),
):
    sample_input = request.sample_input if request is not None else None
    report = service.simulate(graph_id, sample_input)
    return SimulateResponse(
        data_shapes=report.data_shapes,
        p95_estimate_ms=report.p95_estimate_ms,
        nodes_visited=report.nodes_visited,
        estimated_duration_ms=report.estimated_duration_ms,
        paths=report.paths,
        warnings=_findings(report.warnings),
    )


@router.post("/{graph_id}/critic", response_model=CriticResponse)
def critic(
    graph_id: str,
    service: WorkflowService = Depends(get_workflow_service),
):
    report = service.run_critic(graph_id)
    return CriticResponse(
        before=_findings(report.before),
        after=_findings(report.after),
        fixed_count=report.fixed_count,
        attempts=report.attempts,
        undo_ids=report.undo_ids,
        stopped_reason=report.stopped_reason,
    )
