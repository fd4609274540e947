import pytest
from structlog.testing import capture_logs

from cluster_teardown.core.errors import NotFoundError, ProviderError
from cluster_teardown.discovery.base import ClusterDiscovery
from cluster_teardown.discovery.orchestrator import list_resources
from cluster_teardown.providers.mock import InMemoryCloud
from cluster_teardown.resources.vsphere import (
    TYPE_VM,
    delete_vm,
    dump_vm_info,
    list_vms,
    vm_name_patterns,
)


def make_cloud() -> InMemoryCloud:
    cloud = InMemoryCloud()
    cloud.add_vm("masters.prod.i-1")
    cloud.add_vm("nodes.prod.i-2")
    cloud.add_vm("nodes.staging.i-3")
    cloud.add_vm("bastion.prod.i-4")
    return cloud


def test_list_resources_returns_master_and_node_vms():
    resources = list_resources(make_cloud(), "prod")

    assert sorted(resources) == ["VM:masters.prod.i-1", "VM:nodes.prod.i-2"]


def test_two_vm_cluster_yields_two_keys():
    cloud = InMemoryCloud()
    cloud.add_vm("masters.prod.i-1")
    cloud.add_vm("nodes.prod.i-2")

    resources = list_resources(cloud, "prod")

    assert len(resources) == 2
    assert set(resources) == {"VM:masters.prod.i-1", "VM:nodes.prod.i-2"}


def test_discovered_vm_record_is_bound_to_vm_behaviors():
    cloud = make_cloud()
    resources = list_vms(ClusterDiscovery(cloud=cloud, cluster_name="prod"))

    r = next(x for x in resources if x.id == "masters.prod.i-1")
    assert r.name == "masters.prod.i-1"
    assert r.kind == TYPE_VM
    assert r.deleter is delete_vm
    assert r.dumper is dump_vm_info
    assert r.obj is cloud.vms["masters.prod.i-1"]


def test_vm_patterns_cover_prefixed_masters():
    cloud = InMemoryCloud()
    cloud.add_vm("us-east-1a.masters.prod.i-9")

    resources = list_resources(cloud, "prod")

    assert list(resources) == ["VM:us-east-1a.masters.prod.i-9"]


def test_vm_matching_both_patterns_is_listed_once():
    cloud = InMemoryCloud()
    cloud.add_vm("nodes.prod.masters.prod")

    resources = list_vms(ClusterDiscovery(cloud=cloud, cluster_name="prod"))

    assert len(resources) == 1


def test_patterns_are_sent_in_one_query():
    cloud = make_cloud()
    list_resources(cloud, "prod")

    assert cloud.calls == [("find_entities", ",".join(vm_name_patterns("prod")))]


def test_not_found_yields_empty_result_and_warning():
    cloud = InMemoryCloud()

    with capture_logs() as logs:
        resources = list_resources(cloud, "empty")

    assert resources == {}
    assert any(
        e["event"] == "no virtual machines matched" and e["log_level"] == "warning"
        for e in logs
    )


def test_not_found_raised_by_provider_is_not_an_error():
    cloud = make_cloud()
    cloud.query_error = NotFoundError("vm '*' not found")

    assert list_vms(ClusterDiscovery(cloud=cloud, cluster_name="prod")) == []


def test_query_failure_propagates():
    cloud = make_cloud()
    boom = ProviderError("connection reset")
    cloud.query_error = boom

    with pytest.raises(ProviderError) as info:
        list_resources(cloud, "prod")

    assert info.value is boom


@pytest.mark.parametrize(
    "name",
    ["nodes.production.i-9", "masters.prod2.i-3", "postmasters.prod.i-1"],
)
def test_similarly_named_vms_of_other_clusters_are_not_listed(name: str):
    cloud = InMemoryCloud()
    cloud.add_vm("nodes.prod.i-2")
    cloud.add_vm(name)

    resources = list_resources(cloud, "prod")

    assert list(resources) == ["VM:nodes.prod.i-2"]
