from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_workflow_service
from backend.app.services.workflow_service import WorkflowService

from flowpatch.catalog.node_catalog import StaticNodeCatalog
from flowpatch.config.settings import FlowpatchConfig
from flowpatch.graph.graph_store import GraphStore
from flowpatch.history.journal import BatchJournal
from flowpatch.history.undo_manager import UndoRedoManager


@pytest.fixture()
def config() -> FlowpatchConfig:
    return FlowpatchConfig()


@pytest.fixture()
def catalog() -> StaticNodeCatalog:
    return StaticNodeCatalog()


@pytest.fixture()
def store() -> GraphStore:
    return GraphStore()


@pytest.fixture()
def history(store: GraphStore) -> UndoRedoManager:
    return UndoRedoManager(store)


@pytest.fixture()
def journal() -> BatchJournal:
    return BatchJournal()


@pytest.fixture()
def service(
    store: GraphStore,
    catalog: StaticNodeCatalog,
    history: UndoRedoManager,
    journal: BatchJournal,
    config: FlowpatchConfig,
) -> WorkflowService:
    return WorkflowService(
        store=store,
        catalog=catalog,
        history=history,
        journal=journal,
        config=config,
    )


@pytest.fixture()
def applier(service: WorkflowService):
    return service.applier


@pytest.fixture()
def client(service: WorkflowService):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    app.dependency_overrides[get_workflow_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
