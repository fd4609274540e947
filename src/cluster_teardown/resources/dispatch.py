"""
Deletion and inspection dispatch.

These are the only entry points callers use to act on a Resource.
Kind specific rules, such as power off before destroy, live in the bound
behaviors and not here.
"""

from __future__ import annotations

from typing import Any

from cluster_teardown.core.errors import DeleterMissing, DumperMissing
from cluster_teardown.core.types import Resource
from cluster_teardown.providers.base import CloudProvider


def delete_resource(cloud: CloudProvider, r: Resource) -> None:
    """
    Delete a resource through its bound deleter.

    A record without a deleter is a wiring bug. We raise instead of skipping it
    so teardown never reports success while the resource is still there.
    """
    if r.deleter is None:
        raise DeleterMissing(f"{r.key}: no deleter bound for kind {r.kind!r}")
    r.deleter(cloud, r)


def dump_resource(r: Resource) -> dict[str, Any]:
    """Return the bound dumper snapshot. Never touches provider state."""
    if r.dumper is None:
        raise DumperMissing(f"{r.key}: no dumper bound for kind {r.kind!r}")
    return r.dumper(r)
