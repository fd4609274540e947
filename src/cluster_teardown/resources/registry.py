"""
Kind registry.

Every resource kind maps to exactly one pair of behaviors: how to delete it and
how to dump it. Discovery functions bind that pair onto each record at creation
time by looking the kind up here.

Keeping the mapping in one place makes the set of kinds auditable. Adding a
kind means writing a discovery function plus a deleter and dumper, and
registering them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from cluster_teardown.core.errors import UnknownResourceKind
from cluster_teardown.core.types import Deleter, Dumper, Resource
from cluster_teardown.resources.vsphere import TYPE_VM, delete_vm, dump_vm_info


@dataclass(frozen=True)
class KindBehavior:
    """Deletion and inspection behavior for one kind."""

    deleter: Deleter
    dumper: Dumper


class KindRegistry:
    """Lookup from kind tag to KindBehavior."""

    def __init__(self) -> None:
        self._behaviors: Dict[str, KindBehavior] = {}

    def register(self, kind: str, deleter: Deleter, dumper: Dumper) -> None:
        """Register a kind, replacing any existing behavior for it."""
        self._behaviors[kind] = KindBehavior(deleter=deleter, dumper=dumper)

    def behavior_for(self, kind: str) -> KindBehavior:
        behavior = self._behaviors.get(kind)
        if behavior is None:
            raise UnknownResourceKind(f"no behavior registered for kind {kind!r}")
        return behavior

    def kinds(self) -> List[str]:
        """Return registered kinds in registration order."""
        return list(self._behaviors.keys())

    def bind(self, kind: str, name: str, id: str, obj: Any) -> Resource:
        """Build a Resource with the registered behaviors for kind."""
        behavior = self.behavior_for(kind)
        return Resource(
            name=name,
            id=id,
            kind=kind,
            deleter=behavior.deleter,
            dumper=behavior.dumper,
            obj=obj,
        )


def default_registry() -> KindRegistry:
    """Return a registry with every built in kind registered."""
    registry = KindRegistry()
    registry.register(TYPE_VM, delete_vm, dump_vm_info)
    return registry
