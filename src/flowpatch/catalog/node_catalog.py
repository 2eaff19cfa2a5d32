from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple


@dataclass(frozen=True)
class NodeSchema:
    """
    Per-node-type parameter rules supplied by the node catalog.
    """

    type: str
    required_params: Tuple[str, ...] = ()
    enum_constraints: Dict[str, Tuple[Any, ...]] = field(default_factory=dict)
    defaults: Dict[str, Any] = field(default_factory=dict)
    is_trigger: bool = False
    credentials: Tuple[str, ...] = ()


class NodeCatalog(Protocol):
    """
    Boundary to the external node-type catalog.
    """

    def get_node_schema(self, node_type: str) -> Optional[NodeSchema]:
        ...


class StaticNodeCatalog:
    """
    In-process catalog backed by a dict of schemas.

    Ships the built-in schemas by default; further types can be
    registered at startup or in tests.
    """

    def __init__(self, schemas: Iterable[NodeSchema] | None = None) -> None:
        self._schemas: Dict[str, NodeSchema] = {}
        self.register_many(BUILTIN_SCHEMAS if schemas is None else schemas)

    def register(self, schema: NodeSchema) -> None:
        self._schemas[schema.type] = schema

    def register_many(self, schemas: Iterable[NodeSchema]) -> None:
        for schema in schemas:
            self.register(schema)

    def get_node_schema(self, node_type: str) -> Optional[NodeSchema]:
        return self._schemas.get(node_type)

    def types(self) -> List[str]:
        return sorted(self._schemas)


def is_trigger_type(catalog: NodeCatalog, node_type: str) -> bool:
    """
    Trigger capability from the catalog, with a naming heuristic for
    types the catalog does not know.
    """
    schema = catalog.get_node_schema(node_type)
    if schema is not None:
        return schema.is_trigger
    lowered = node_type.lower()
    return "trigger" in lowered or lowered.endswith("webhook")


# ---------------------------------------------------------------------
# Built-in schemas
# ---------------------------------------------------------------------

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

BUILTIN_SCHEMAS: Tuple[NodeSchema, ...] = (
    NodeSchema(
        type="n8n-nodes-base.manualTrigger",
        is_trigger=True,
    ),
    NodeSchema(
        type="n8n-nodes-base.scheduleTrigger",
        required_params=("interval",),
        defaults={"interval": "1h"},
        is_trigger=True,
    ),
    NodeSchema(
        type="n8n-nodes-base.webhook",
        required_params=("path",),
        enum_constraints={"httpMethod": HTTP_METHODS},
        defaults={"path": "webhook-endpoint", "httpMethod": "POST"},
        is_trigger=True,
    ),
    NodeSchema(
        type="n8n-nodes-base.httpRequest",
        required_params=("url",),
        enum_constraints={
            "method": HTTP_METHODS,
            "responseFormat": ("json", "text", "binary"),
        },
        defaults={"url": "https://example.com", "method": "GET", "responseFormat": "json"},
    ),
    NodeSchema(
        type="n8n-nodes-base.slack",
        required_params=("channel", "text"),
        enum_constraints={"resource": ("message", "channel", "user")},
        defaults={"channel": "#general", "resource": "message"},
        credentials=("slackApi",),
    ),
    NodeSchema(
        type="n8n-nodes-base.emailSend",
        required_params=("toEmail", "subject"),
        enum_constraints={"emailFormat": ("text", "html", "both")},
        defaults={"emailFormat": "text"},
        credentials=("smtp",),
    ),
    NodeSchema(
        type="n8n-nodes-base.set",
        enum_constraints={"mode": ("manual", "raw")},
        defaults={"mode": "manual"},
    ),
    NodeSchema(
        type="n8n-nodes-base.code",
        required_params=("jsCode",),
        enum_constraints={"mode": ("runOnceForAllItems", "runOnceForEachItem")},
        defaults={"jsCode": "return items;", "mode": "runOnceForAllItems"},
    ),
    NodeSchema(
        type="n8n-nodes-base.if",
        required_params=("conditions",),
        enum_constraints={"combinator": ("and", "or")},
        defaults={"combinator": "and"},
    ),
)
