"""
Discovery interfaces.

Goal
Provide pluggable per kind discovery so the orchestrator is kind agnostic.

A discovery function receives a ClusterDiscovery context and returns the
resources of one kind that belong to the cluster. It must not change provider
state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from cluster_teardown.core.types import Resource
from cluster_teardown.providers.base import CloudProvider
from cluster_teardown.resources.registry import KindRegistry, default_registry


@dataclass(frozen=True)
class ClusterDiscovery:
    """
    Context shared by all discovery functions of one pass.

    cloud
    Provider handle used for queries.

    cluster_name
    Used to build ownership name patterns.

    registry
    Supplies the behaviors bound onto each discovered record.
    """

    cloud: CloudProvider
    cluster_name: str
    registry: KindRegistry = field(default_factory=default_registry)


DiscoveryFn = Callable[[ClusterDiscovery], list[Resource]]
