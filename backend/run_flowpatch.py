import json
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from flowpatch.errors import FlowpatchError  # noqa: E402

from backend.app.config import AppConfig  # noqa: E402
from backend.app.dependencies import (  # noqa: E402
    get_graph_store,
    get_history,
    get_journal,
    get_node_catalog,
)
from backend.app.services.workflow_service import WorkflowService  # noqa: E402


def main() -> None:
    config = AppConfig()
    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("flowpatch.run")
    start = time.perf_counter()

    service = WorkflowService(
        store=get_graph_store(),
        catalog=get_node_catalog(),
        history=get_history(),
        journal=get_journal(),
        config=config.flowpatch,
    )

    graph_id = "demo"

    def submit(label: str, expected_version: int, ops) -> None:
        try:
            result = service.submit_batch(
                graph_id,
                expected_version,
                {"version": "v1", "ops": ops},
            )
        except FlowpatchError as exc:
            logger.warning("[%s] rejected: %s", label, json.dumps(exc.to_dict(), indent=2))
            return
        logger.info(
            "[%s] accepted: version=%s undo=%s warnings=%s",
            label,
            result.new_version,
            result.undo_id,
            [w.code for w in result.warnings],
        )

    # Two connected nodes on a fresh graph.
    submit(
        "create",
        0,
        [
            {
                "op": "add_node",
                "node": {
                    "id": "trigger",
                    "name": "Manual Trigger",
                    "type": "n8n-nodes-base.manualTrigger",
                    "typeVersion": 1,
                    "position": [0, 0],
                    "parameters": {},
                },
            },
            {
                "op": "add_node",
                "node": {
                    "id": "fetch",
                    "name": "Fetch Users",
                    "type": "n8n-nodes-base.httpRequest",
                    "typeVersion": 4,
                    "position": [250, 0],
                    "parameters": {"url": "https://api.example.org/users", "method": "GET"},
                },
            },
            {"op": "connect", "from": "trigger", "to": "fetch"},
        ],
    )

    # Stale resubmission against version 0.
    submit("stale", 0, [{"op": "annotate", "name": "fetch", "text": "retry later"}])

    report = service.simulate(graph_id, {"userId": 1})
    logger.info(
        "[simulate] p%s=%.1fms visited=%s",
        config.flowpatch.simulator.percentile,
        report.p95_estimate_ms,
        report.nodes_visited,
    )

    undone = service.undo(graph_id)
    logger.info("[undo] %s -> version %s", undone.undo_id, undone.new_version)

    redone = service.redo(graph_id)
    logger.info("[redo] %s -> version %s", redone.undo_id, redone.new_version)

    logger.info("done in %.3fs", time.perf_counter() - start)


if __name__ == "__main__":
    main()
