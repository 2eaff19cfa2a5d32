from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from flowpatch.errors import FlowpatchError, InvalidOperationBatch

from backend.app.config import AppConfig
from backend.app.api.routes_graph import router as graph_router
from backend.app.dependencies import (
    get_graph_store,
    get_node_catalog,
    get_workflow_service,
)

HTTP_STATUS = {
    "invalid_operation_batch": 400,
    "policy_violation": 403,
    "not_found": 404,
    "conflict_graph_version": 409,
    "prevalidation_failed": 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Builds the shared store, catalog and service once at startup.
    """
    # Force initialization
    get_graph_store()
    get_node_catalog()
    get_workflow_service()

    yield


async def flowpatch_error_handler(request: Request, exc: FlowpatchError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS.get(exc.code, 500),
        content=exc.to_dict(),
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    issues = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    error = InvalidOperationBatch("malformed request body", issues=issues)
    return await flowpatch_error_handler(request, error)


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.add_exception_handler(FlowpatchError, flowpatch_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(
        graph_router,
        prefix=f"{config.api_prefix}/graph",
        tags=["graph"],
    )

    return app


config = AppConfig()
app = create_app(config)
