"""
In memory cloud provider.

This provider is used for tests and local simulations.
It behaves like a tiny inventory of virtual machines keyed by name.

Features
- Glob style name matching for find_entities, the union of all patterns
- Power off and destroy tasks that update internal state on completion
- Fault injection per machine and per phase
- A call log so tests can assert the order of lifecycle calls
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Callable, Optional

from cluster_teardown.core.errors import NotFoundError, TaskFailed
from cluster_teardown.providers.base import CloudProvider, ProviderTask, VirtualMachine

POWERED_ON = "poweredOn"
POWERED_OFF = "poweredOff"

# fault phases accepted in InMemoryCloud.faults
POWER_OFF_START = "power_off_start"
POWER_OFF_WAIT = "power_off_wait"
DESTROY_START = "destroy_start"
DESTROY_WAIT = "destroy_wait"
CLOUD_INIT_ISO = "cloud_init_iso"


@dataclass
class InMemoryTask(ProviderTask):
    """
    Task that completes when waited on.

    error
    Raised from wait instead of completing.

    on_complete
    Applied to provider state when the task completes successfully.
    """

    error: Optional[Exception] = None
    on_complete: Optional[Callable[[], None]] = None

    def wait(self) -> None:
        if self.error is not None:
            raise self.error
        if self.on_complete is not None:
            self.on_complete()


@dataclass(eq=False)
class InMemoryVM(VirtualMachine):
    """Virtual machine handle backed by an InMemoryCloud."""

    vm_name: str
    cloud: InMemoryCloud = field(repr=False)
    power_state: str = POWERED_ON

    def name(self) -> str:
        return self.vm_name

    def power_off(self) -> ProviderTask:
        self.cloud.calls.append(("power_off", self.vm_name))
        self.cloud.require(self.vm_name)
        self.cloud.raise_fault(self.vm_name, POWER_OFF_START)

        error = self.cloud.fault(self.vm_name, POWER_OFF_WAIT)
        if error is None and self.power_state == POWERED_OFF:
            error = TaskFailed(f"vm {self.vm_name} is already powered off")

        def complete() -> None:
            self.power_state = POWERED_OFF
            self.cloud.calls.append(("power_off_complete", self.vm_name))

        return InMemoryTask(error=error, on_complete=complete)

    def destroy(self) -> ProviderTask:
        self.cloud.calls.append(("destroy", self.vm_name))
        self.cloud.require(self.vm_name)
        self.cloud.raise_fault(self.vm_name, DESTROY_START)

        def complete() -> None:
            self.cloud.vms.pop(self.vm_name, None)
            self.cloud.calls.append(("destroy_complete", self.vm_name))

        return InMemoryTask(
            error=self.cloud.fault(self.vm_name, DESTROY_WAIT),
            on_complete=complete,
        )

    def describe(self) -> dict[str, Any]:
        return {"name": self.vm_name, "power_state": self.power_state}


@dataclass
class InMemoryCloud(CloudProvider):
    """
    In memory cloud.

    faults
    Optional mapping of machine name to phase to exception.
    Start phases raise from the lifecycle call itself.
    Wait phases raise from the returned task.

    query_error
    When set, find_entities raises it for every query.
    This simulates a provider outage during discovery.
    """

    vms: dict[str, InMemoryVM] = field(default_factory=dict)
    faults: dict[str, dict[str, Exception]] = field(default_factory=dict)
    query_error: Optional[Exception] = None
    calls: list[tuple[str, str]] = field(default_factory=list)
    deleted_isos: list[str] = field(default_factory=list)

    def add_vm(self, name: str, power_state: str = POWERED_ON) -> InMemoryVM:
        """Add or replace a machine."""
        vm = InMemoryVM(vm_name=name, cloud=self, power_state=power_state)
        self.vms[name] = vm
        return vm

    def find_entities(self, patterns: list[str], kind: str) -> list[Any]:
        self.calls.append(("find_entities", ",".join(patterns)))
        if self.query_error is not None:
            raise self.query_error

        matches: list[Any] = []
        if kind == "VM":
            for vm_name, vm in self.vms.items():
                if any(fnmatchcase(vm_name, p) for p in patterns):
                    matches.append(vm)

        if not matches:
            raise NotFoundError(f"{kind} {patterns!r} not found")
        return matches

    def delete_cloud_init_iso(self, vm_name: str) -> None:
        self.calls.append(("delete_cloud_init_iso", vm_name))
        self.raise_fault(vm_name, CLOUD_INIT_ISO)
        self.deleted_isos.append(vm_name)

    def require(self, vm_name: str) -> None:
        """Raise NotFoundError when the machine no longer exists."""
        if vm_name not in self.vms:
            raise NotFoundError(f"vm {vm_name} not found")

    def fault(self, vm_name: str, phase: str) -> Optional[Exception]:
        return self.faults.get(vm_name, {}).get(phase)

    def raise_fault(self, vm_name: str, phase: str) -> None:
        error = self.fault(vm_name, phase)
        if error is not None:
            raise error

    def count(self, call: str) -> int:
        """Number of logged calls with the given name."""
        return sum(1 for name, _ in self.calls if name == call)
