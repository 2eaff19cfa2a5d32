from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from flowpatch.graph.graph_schema import Node

Shape = Dict[str, str]
ShapeGenerator = Callable[[Node, List[Shape], Optional[Mapping[str, Any]]], List[Shape]]

# Static per-type latency estimates in milliseconds.
LATENCY_MS: Dict[str, float] = {
    "n8n-nodes-base.manualTrigger": 5.0,
    "n8n-nodes-base.scheduleTrigger": 5.0,
    "n8n-nodes-base.webhook": 20.0,
    "n8n-nodes-base.httpRequest": 350.0,
    "n8n-nodes-base.slack": 250.0,
    "n8n-nodes-base.emailSend": 400.0,
    "n8n-nodes-base.set": 2.0,
    "n8n-nodes-base.code": 40.0,
    "n8n-nodes-base.if": 2.0,
}


def shape_of(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    if value is None:
        return "null"
    return "any"


def shape_from_sample(sample: Optional[Mapping[str, Any]]) -> Shape:
    if not sample:
        return {}
    return {str(k): shape_of(v) for k, v in sample.items()}


def merge_shapes(shapes: List[Shape]) -> Shape:
    merged: Shape = {}
    for shape in shapes:
        for key, kind in shape.items():
            if key in merged and merged[key] != kind:
                merged[key] = "any"
            else:
                merged.setdefault(key, kind)
    return merged


# ---------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------


def _echo(node: Node, upstream: List[Shape], sample: Optional[Mapping[str, Any]]) -> List[Shape]:
    if upstream:
        return [merge_shapes(upstream)]
    return [shape_from_sample(sample)]


def _manual_trigger(node, upstream, sample):
    return [shape_from_sample(sample) or {"timestamp": "string"}]


def _webhook(node, upstream, sample):
    return [{"body": "object", "headers": "object", "query": "object"}]


def _schedule(node, upstream, sample):
    return [{"timestamp": "string", "interval": "string"}]


def _http_request(node, upstream, sample):
    if node.parameters.get("responseFormat") in ("text", "binary"):
        return [{"data": "string", "statusCode": "number"}]
    return [{"id": "number", "name": "string", "email": "string"}]


def _slack(node, upstream, sample):
    return [{"ok": "boolean", "channel": "string", "ts": "string"}]


def _email(node, upstream, sample):
    return [{"accepted": "array", "messageId": "string"}]


def _set(node, upstream, sample):
    shape = merge_shapes(upstream)
    values = node.parameters.get("values")
    if isinstance(values, dict):
        shape.update({str(k): shape_of(v) for k, v in values.items()})
    return [shape]


def _code(node, upstream, sample):
    return [{"result": "any"}]


SHAPE_GENERATORS: Dict[str, ShapeGenerator] = {
    "n8n-nodes-base.manualTrigger": _manual_trigger,
    "n8n-nodes-base.scheduleTrigger": _schedule,
    "n8n-nodes-base.webhook": _webhook,
    "n8n-nodes-base.httpRequest": _http_request,
    "n8n-nodes-base.slack": _slack,
    "n8n-nodes-base.emailSend": _email,
    "n8n-nodes-base.set": _set,
    "n8n-nodes-base.code": _code,
}


def generator_for(node_type: str) -> ShapeGenerator:
    return SHAPE_GENERATORS.get(node_type, _echo)
