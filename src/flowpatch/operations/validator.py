from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from pydantic import ValidationError

from flowpatch.config.settings import BatchLimitsConfig
from flowpatch.errors import InvalidOperationBatch
from flowpatch.operations.schema import OperationBatch
from flowpatch.utils.helpers import serialized_size


class OperationValidator:
    """
    Purely structural validation of an incoming change-set.

    Knows nothing about node-type semantics; that is the linter's job.
    """

    def __init__(self, limits: BatchLimitsConfig | None = None) -> None:
        self.limits = limits or BatchLimitsConfig()

    def validate(self, batch: Union[OperationBatch, Mapping[str, Any]]) -> OperationBatch:
        if isinstance(batch, OperationBatch):
            payload: Any = batch.to_payload()
        else:
            payload = batch

        if not isinstance(payload, Mapping):
            raise InvalidOperationBatch(
                "operation batch must be an object",
                issues=[_issue([], "expected an object", "type_error")],
            )

        # Cheap limits first so oversized payloads are never parsed.

        ops = payload.get("ops")
        if isinstance(ops, list) and len(ops) > self.limits.max_operations:
            raise InvalidOperationBatch(
                f"batch has {len(ops)} operations; limit is {self.limits.max_operations}",
                issues=[
                    _issue(
                        ["ops"],
                        f"at most {self.limits.max_operations} operations allowed",
                        "too_many_operations",
                    )
                ],
            )

        size = serialized_size(payload)
        if size > self.limits.max_payload_bytes:
            raise InvalidOperationBatch(
                f"batch payload is {size} bytes; limit is {self.limits.max_payload_bytes}",
                issues=[
                    _issue(
                        [],
                        f"serialized batch exceeds {self.limits.max_payload_bytes} bytes",
                        "payload_too_large",
                    )
                ],
            )

        if isinstance(batch, OperationBatch):
            return batch

        try:
            return OperationBatch.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidOperationBatch(
                f"operation batch failed schema validation ({exc.error_count()} issues)",
                issues=[
                    _issue(list(err["loc"]), err["msg"], err["type"])
                    for err in exc.errors()
                ],
            ) from exc


def _issue(loc: List[Any], msg: str, kind: str) -> Dict[str, Any]:
    return {"loc": loc, "msg": msg, "type": kind}
