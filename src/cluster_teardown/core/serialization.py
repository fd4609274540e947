from __future__ import annotations

import json
from enum import Enum
from typing import Any


def _normalize(obj: Any) -> Any:
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize(v) for v in obj]
    describe = getattr(obj, "describe", None)
    if callable(describe):
        return _normalize(describe())
    return repr(obj)


def dump_to_json_safe(snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a resource snapshot into a JSON safe dict.

    The raw field holds a provider object. It is rendered with describe when the
    handle offers it, otherwise with repr. This is for display only and cannot
    be turned back into a handle.
    """
    normalized = _normalize(snapshot)
    if not isinstance(normalized, dict):
        raise TypeError("expected dict after normalization")
    return normalized


def snapshots_to_json(snapshots: dict[str, dict[str, Any]]) -> str:
    """
    Dry run report transport shape.

    Keys are resource keys, values are JSON safe snapshots.
    """
    payload = {key: dump_to_json_safe(snap) for key, snap in snapshots.items()}
    return json.dumps({"resources": payload}, sort_keys=True)
