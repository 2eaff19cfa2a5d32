from flowpatch.catalog.node_catalog import (
    NodeSchema,
    NodeCatalog,
    StaticNodeCatalog,
    BUILTIN_SCHEMAS,
    is_trigger_type,
)

__all__ = [
    "NodeSchema",
    "NodeCatalog",
    "StaticNodeCatalog",
    "BUILTIN_SCHEMAS",
    "is_trigger_type",
]
