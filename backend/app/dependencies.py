from functools import lru_cache
import logging

from flowpatch.catalog.node_catalog import StaticNodeCatalog
from flowpatch.graph.graph_store import GraphStore
from flowpatch.history.journal import BatchJournal
from flowpatch.history.undo_manager import UndoRedoManager

from backend.app.config import AppConfig
from backend.app.services.workflow_service import WorkflowService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_graph_store() -> GraphStore:
    logging.getLogger("flowpatch.startup").info("[startup] graph store ready")
    return GraphStore()


@lru_cache
def get_node_catalog() -> StaticNodeCatalog:
    catalog = StaticNodeCatalog()
    logging.getLogger("flowpatch.startup").info(
        "[startup] node catalog with %s types",
        len(catalog.types()),
    )
    return catalog


@lru_cache
def get_history() -> UndoRedoManager:
    return UndoRedoManager(get_graph_store())


@lru_cache
def get_journal() -> BatchJournal:
    return BatchJournal(max_records=get_config().journal_max_records)


@lru_cache
def get_workflow_service() -> WorkflowService:
    config = get_config()

    return WorkflowService(
        store=get_graph_store(),
        catalog=get_node_catalog(),
        history=get_history(),
        journal=get_journal(),
        config=config.flowpatch,
    )

