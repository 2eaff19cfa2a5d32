from __future__ import annotations

from typing import Any, Dict, List, Optional

WEBHOOK = "n8n-nodes-base.webhook"
SLACK = "n8n-nodes-base.slack"
HTTP = "n8n-nodes-base.httpRequest"
MANUAL = "n8n-nodes-base.manualTrigger"
SET = "n8n-nodes-base.set"


def add_node(
    node_id: str,
    node_type: str,
    *,
    name: Optional[str] = None,
    parameters: Optional[Dict[str, Any]] = None,
    credentials: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "id": node_id,
        "name": name or node_id,
        "type": node_type,
        "typeVersion": 1,
        "position": [0, 0],
        "parameters": parameters or {},
    }
    if credentials is not None:
        node["credentials"] = credentials
    return {"op": "add_node", "node": node}


def webhook(node_id: str = "n1", **kwargs: Any) -> Dict[str, Any]:
    kwargs.setdefault("parameters", {"path": "incoming", "httpMethod": "POST"})
    return add_node(node_id, WEBHOOK, **kwargs)


def slack(node_id: str = "n2", **kwargs: Any) -> Dict[str, Any]:
    kwargs.setdefault("parameters", {"channel": "#alerts", "text": "hello"})
    return add_node(node_id, SLACK, **kwargs)


def connect(source: str, target: str, **indexes: int) -> Dict[str, Any]:
    op: Dict[str, Any] = {"op": "connect", "from": source, "to": target}
    op.update(indexes)
    return op


def set_params(name: str, **parameters: Any) -> Dict[str, Any]:
    return {"op": "set_params", "name": name, "parameters": parameters}


def delete(name: str) -> Dict[str, Any]:
    return {"op": "delete", "name": name}


def annotate(name: str, text: str) -> Dict[str, Any]:
    return {"op": "annotate", "name": name, "text": text}


def batch(*ops: Dict[str, Any]) -> Dict[str, Any]:
    return {"version": "v1", "ops": list(ops)}


def batch_of(ops: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"version": "v1", "ops": ops}


def scenario_a() -> Dict[str, Any]:
    return batch(webhook("n1"), slack("n2"), connect("n1", "n2"))
