"""
Discovery orchestrator.

Runs every registered discovery function for a cluster and merges the results
into one map keyed by kind:id.

Determinism and safety
Functions run sequentially in registration order, so the merge is repeatable.
The pass is all or nothing. The first error propagates unchanged and no partial
map is returned, because a partial list would look like a complete teardown
plan while the provider is half broken.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import structlog

from cluster_teardown.core.types import Resource, resource_key
from cluster_teardown.discovery.base import ClusterDiscovery, DiscoveryFn
from cluster_teardown.providers.base import CloudProvider
from cluster_teardown.resources.registry import KindRegistry, default_registry
from cluster_teardown.resources.vsphere import list_vms

logger = structlog.get_logger(__name__)

DEFAULT_DISCOVERY: tuple[DiscoveryFn, ...] = (list_vms,)


class ClusterResources:
    """
    Resource discovery for one cluster.

    cloud
    Provider handle used for every query of the pass.

    cluster_name
    Name the ownership patterns are built from.

    discovery_fns
    Discovery functions in the order they run. Defaults to every built in kind.

    registry
    Kind registry used to bind behaviors onto records.
    """

    def __init__(
        self,
        cloud: CloudProvider,
        cluster_name: str,
        discovery_fns: Optional[Sequence[DiscoveryFn]] = None,
        registry: Optional[KindRegistry] = None,
    ) -> None:
        self.cloud = cloud
        self.cluster_name = cluster_name
        self._discovery_fns = tuple(discovery_fns) if discovery_fns is not None else DEFAULT_DISCOVERY
        self._registry = registry or default_registry()

    def list_resources(self) -> Dict[str, Resource]:
        """
        Run one discovery pass.

        Returns a complete map of key to Resource, or raises the first error.
        On a duplicate key the later record wins.
        """
        d = ClusterDiscovery(
            cloud=self.cloud,
            cluster_name=self.cluster_name,
            registry=self._registry,
        )

        resources: Dict[str, Resource] = {}
        for fn in self._discovery_fns:
            for r in fn(d):
                key = resource_key(r)
                if key in resources:
                    logger.warning(
                        "duplicate resource key",
                        cluster=self.cluster_name,
                        key=key,
                        discovery=getattr(fn, "__name__", repr(fn)),
                    )
                resources[key] = r

        return resources


def list_resources(
    cloud: CloudProvider,
    cluster_name: str,
    discovery_fns: Optional[Sequence[DiscoveryFn]] = None,
) -> Dict[str, Resource]:
    """List every resource a cluster owns, keyed by kind:id."""
    return ClusterResources(cloud, cluster_name, discovery_fns=discovery_fns).list_resources()
