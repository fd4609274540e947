"""
Core types.

This file defines the shared data structures used across the engine.

Important design choice
We keep these types provider neutral.

Provider neutral means:
A Resource describes one discovered entity by kind and id, and carries the
behaviors needed to delete or dump it. The provider native handle rides along
in obj, but only the bound behaviors ever look inside it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


Deleter = Callable[[Any, "Resource"], None]
Dumper = Callable[["Resource"], Dict[str, Any]]


@dataclass(frozen=True)
class Resource:
    """
    A tracked cloud resource.

    name
    Human readable identifier.

    id
    Stable identifier within its kind. May equal name.

    kind
    Kind tag such as VM. Behaviors are registered per kind.

    deleter
    Bound deletion behavior, called as deleter(cloud, resource).

    dumper
    Bound inspection behavior, called as dumper(resource).

    obj
    Provider native handle. Owned by this record for its lifetime.
    """

    name: str
    id: str
    kind: str
    deleter: Optional[Deleter] = None
    dumper: Optional[Dumper] = None
    obj: Any = None

    @property
    def key(self) -> str:
        return resource_key(self)


def resource_key(r: Resource) -> str:
    """Return the dedup key kind:id."""
    return r.kind + ":" + r.id
