from __future__ import annotations

import json
from pathlib import Path

from cluster_teardown.core.errors import ProviderError, TaskFailed
from cluster_teardown.providers.mock import DESTROY_WAIT, POWER_OFF_START, POWERED_OFF
from cluster_teardown.providers.static import StaticCloudProvider
from cluster_teardown.teardown import DeletionStatus, ExecutionMode, TeardownConfig, TeardownEngine


def write_cloud(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "cloud.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_static_provider_loads_vms_and_faults(tmp_path: Path):
    path = write_cloud(
        tmp_path,
        {
            "vms": [
                {"name": "masters.prod.i-1", "power_state": "poweredOff"},
                {"name": "nodes.prod.i-2"},
                {"power_state": "poweredOn"},
            ],
            "faults": {
                "nodes.prod.i-2": {
                    "destroy_wait": "datastore busy",
                    "power_off_start": "permission denied",
                }
            },
        },
    )

    cloud = StaticCloudProvider(path=path).load()

    assert list(cloud.vms) == ["masters.prod.i-1", "nodes.prod.i-2"]
    assert cloud.vms["masters.prod.i-1"].power_state == POWERED_OFF
    faults = cloud.faults["nodes.prod.i-2"]
    assert isinstance(faults[DESTROY_WAIT], TaskFailed)
    assert type(faults[POWER_OFF_START]) is ProviderError


def test_static_cloud_runs_through_the_engine(tmp_path: Path):
    path = write_cloud(
        tmp_path,
        {
            "vms": [{"name": "masters.prod.i-1"}, {"name": "nodes.prod.i-2"}],
            "faults": {"nodes.prod.i-2": {"destroy_wait": "datastore busy"}},
        },
    )
    cloud = StaticCloudProvider(path=path).load()

    result = TeardownEngine(cloud, config=TeardownConfig(mode=ExecutionMode.apply)).run("prod")

    assert [o.status for o in result.outcomes] == [
        DeletionStatus.deleted,
        DeletionStatus.unrecoverable,
    ]
