from __future__ import annotations

import hashlib
import json
import math
from enum import Enum
from typing import Any, Iterable


def _canonical(obj: Any) -> Any:
    """Plain JSON value with floats rounded to 12 significant digits.

    Objects exposing ``to_dict`` (operations, rooms, nodes) hash by their
    serialized form; tuples and lists hash alike.
    """
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return _canonical(obj.to_dict())
    if isinstance(obj, Enum):
        return _canonical(obj.value)
    if isinstance(obj, dict):
        return {str(k): _canonical(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_canonical(v) for v in obj]
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError("NaN/Inf not allowed in a floor document")
        return float(f"{obj:.12g}")
    return obj


def canonical_json(obj: Any) -> str:
    return json.dumps(_canonical(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _digest(obj: Any) -> str:
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


def document_hash(document: Any) -> str:
    """Content hash of a whole document; key order does not matter."""
    return _digest(document)


def batch_hash(ops: Iterable[Any]) -> str:
    """Content hash of an operation batch; operation order matters."""
    return _digest(list(ops))
