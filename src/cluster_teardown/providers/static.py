"""
Static cloud provider.

Reads a local json file that lists virtual machines and loads them into an
InMemoryCloud. This is useful for dev, tests, and dry run demos.

Schema example
{
  "vms": [
    {"name": "masters.prod.i-1", "power_state": "poweredOn"},
    {"name": "nodes.prod.i-2"}
  ],
  "faults": {
    "nodes.prod.i-2": {"destroy_wait": "datastore busy"}
  }
}

faults is optional. Each message becomes a TaskFailed for wait phases and a
ProviderError for start phases.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cluster_teardown.core.errors import ProviderError, TaskFailed
from cluster_teardown.providers.mock import (
    DESTROY_WAIT,
    POWER_OFF_WAIT,
    POWERED_ON,
    InMemoryCloud,
)


def _fault_from_message(phase: str, message: str) -> Exception:
    if phase in (POWER_OFF_WAIT, DESTROY_WAIT):
        return TaskFailed(message)
    return ProviderError(message)


def _faults_from_dict(obj: dict[str, Any]) -> dict[str, dict[str, Exception]]:
    faults: dict[str, dict[str, Exception]] = {}
    for vm_name, phases in obj.items():
        if not isinstance(phases, dict):
            continue
        faults[str(vm_name)] = {
            str(phase): _fault_from_message(str(phase), str(msg)) for phase, msg in phases.items()
        }
    return faults


@dataclass(frozen=True)
class StaticCloudProvider:
    """
    Load a cloud from a local json file.

    path points to a json file that matches the schema described in the module docstring.
    """

    path: Path

    def load(self) -> InMemoryCloud:
        data = json.loads(self.path.read_text(encoding="utf-8"))

        cloud = InMemoryCloud()
        vms = data.get("vms", [])
        if isinstance(vms, list):
            for obj in vms:
                if isinstance(obj, dict) and obj.get("name"):
                    cloud.add_vm(
                        name=str(obj["name"]),
                        power_state=str(obj.get("power_state", POWERED_ON)),
                    )

        faults = data.get("faults", {}) or {}
        if isinstance(faults, dict):
            cloud.faults = _faults_from_dict(faults)

        return cloud
