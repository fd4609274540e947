"""
vSphere virtual machine resources.

Discovery
Cluster machines are found by name. Masters and nodes follow different naming
schemes, so their patterns are sent in one query and the provider returns the
union.

Deletion
A machine must be powered off before it can be destroyed:

  running or unknown -> powering off -> powered off -> destroying -> destroyed

Between the two phases we remove the cloud init ISO that bootstrapped the
machine. That step is best effort. A leftover ISO is cheap, a leftover machine
is not.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from cluster_teardown.core.errors import (
    NotFoundError,
    OperationStartFailed,
    ResourceTypeMismatch,
    UnrecoverableDeletionError,
)
from cluster_teardown.core.types import Resource
from cluster_teardown.providers.base import CloudProvider, VirtualMachine

if TYPE_CHECKING:
    from cluster_teardown.discovery.base import ClusterDiscovery

logger = structlog.get_logger(__name__)

TYPE_VM = "VM"


def vm_name_patterns(cluster_name: str) -> list[str]:
    """
    Return the master and node name patterns for a cluster.

    Every pattern ends with a dot after the cluster name, so "prod" never
    matches machines of "production" or "prod2".
    """
    return [
        f"masters.{cluster_name}.*",
        f"*.masters.{cluster_name}.*",
        f"nodes.{cluster_name}.*",
    ]


def list_vms(d: ClusterDiscovery) -> list[Resource]:
    """
    Discover the virtual machines owned by a cluster.

    NotFoundError means the cluster has no machines and yields an empty list.
    Any other provider error propagates and aborts the discovery pass.
    """
    patterns = vm_name_patterns(d.cluster_name)

    try:
        vms = d.cloud.find_entities(patterns, TYPE_VM)
    except NotFoundError as exc:
        logger.warning(
            "no virtual machines matched",
            cluster=d.cluster_name,
            patterns=patterns,
            error=str(exc),
        )
        return []

    resources: list[Resource] = []
    for vm in vms:
        name = vm.name()
        resources.append(d.registry.bind(TYPE_VM, name=name, id=name, obj=vm))
    return resources


def _vm_handle(r: Resource) -> VirtualMachine:
    if not isinstance(r.obj, VirtualMachine):
        raise ResourceTypeMismatch(
            f"{r.key}: expected a virtual machine handle, got {type(r.obj).__name__}"
        )
    return r.obj


def delete_vm(cloud: CloudProvider, r: Resource) -> None:
    """
    Power off and destroy a virtual machine.

    Raises
    OperationStartFailed when power off or destroy cannot start.
    The machine is left as it was and the call may be retried.

    UnrecoverableDeletionError when destroy started but failed.
    The machine is in an unknown state and must not be retried blindly.
    """
    vm = _vm_handle(r)
    log = logger.bind(key=r.key)

    log.info("powering off virtual machine")
    try:
        task = vm.power_off()
    except Exception as exc:
        raise OperationStartFailed(r.key, "power_off", str(exc)) from exc

    try:
        task.wait()
    except Exception as exc:
        # an already powered off machine fails here and can still be destroyed
        log.warning("power off did not complete cleanly", error=str(exc))

    try:
        cloud.delete_cloud_init_iso(vm.name())
    except Exception as exc:
        log.warning("failed to delete cloud init iso", error=str(exc))

    log.info("destroying virtual machine")
    try:
        task = vm.destroy()
    except Exception as exc:
        raise OperationStartFailed(r.key, "destroy", str(exc)) from exc

    try:
        task.wait()
    except Exception as exc:
        log.critical("destroy failed after start", error=str(exc))
        raise UnrecoverableDeletionError(r.key, "destroy", str(exc)) from exc

    log.info("virtual machine destroyed")


def dump_vm_info(r: Resource) -> dict[str, Any]:
    """Snapshot a machine record for dry run review."""
    data: dict[str, Any] = {}
    data["id"] = r.id
    data["type"] = r.kind
    data["raw"] = r.obj
    return data
