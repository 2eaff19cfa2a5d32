from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable

import numpy as np


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def serialized_size(payload: Any) -> int:
    """
    Size in bytes of the compact UTF-8 JSON encoding of ``payload``.
    """
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
    return len(text.encode("utf-8"))


def percentile(values: Iterable[float], q: float) -> float:
    vals = list(values)
    if not vals:
        return 0.0
    return float(np.percentile(vals, q))
