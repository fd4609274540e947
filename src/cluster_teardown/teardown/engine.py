"""
Teardown engine.

This engine coordinates:
discovery, dry run inspection or deletion, per resource outcome collection,
optional verification by rediscovery, and alert emission.

Failure handling
A discovery error propagates unchanged. Nothing is deleted and nothing is
reported, because a partial resource list would be misleading.

OperationStartFailed, and any other error a deleter raises, is per resource.
It is recorded and sibling deletions continue.

UnrecoverableDeletionError halts the batch. The remaining resources are marked
skipped and a critical alert is attached so an operator can inspect the half
destroyed resource before anything else runs.

A failing rediscovery after deletion is reported as a warning alert. The
deletion outcomes are still returned.

Ordering
Resources are deleted in sorted key order. Dependencies between kinds are not
modelled here; callers that need them should group resources and run the
engine per group.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, Optional, Sequence

import structlog

from cluster_teardown.core.audit import AuditLogger
from cluster_teardown.core.errors import (
    DeleterMissing,
    NotFoundError,
    OperationStartFailed,
    UnrecoverableDeletionError,
)
from cluster_teardown.core.types import Resource
from cluster_teardown.discovery.base import DiscoveryFn
from cluster_teardown.discovery.orchestrator import ClusterResources
from cluster_teardown.providers.base import CloudProvider
from cluster_teardown.resources.dispatch import delete_resource, dump_resource
from cluster_teardown.resources.registry import KindRegistry
from cluster_teardown.teardown.execution_mode import ExecutionMode

logger = structlog.get_logger(__name__)


class DeletionStatus(StrEnum):
    """Outcome of one deletion attempt."""

    deleted = "deleted"
    already_gone = "already_gone"
    failed = "failed"
    unrecoverable = "unrecoverable"
    skipped = "skipped"


@dataclass(frozen=True)
class DeletionOutcome:
    """
    Result of deleting one resource.

    phase
    The lifecycle phase that failed. Empty on success.

    error
    Error message. Empty on success.
    """

    key: str
    status: DeletionStatus
    phase: str = ""
    error: str = ""


@dataclass(frozen=True)
class TeardownAlert:
    """
    Alert produced by a failed teardown run.

    severity
    warning when resources failed to delete, remain afterwards, or could not
    be verified.
    critical when a resource was left half destroyed.

    failed_keys
    Keys an operator should look at first.
    """

    severity: str
    summary: str
    failed_keys: list[str]


@dataclass(frozen=True)
class TeardownConfig:
    """
    Engine configuration.

    mode
    dry_run by default so deletion is always an explicit choice.

    treat_not_found_as_deleted
    When True, a resource that vanished before its deletion started counts as
    deleted. This makes repeated runs converge.

    verify_after_delete
    When True, rerun discovery after deleting and report what is left.

    audit_path
    When set, append one JSON line per deletion outcome.
    """

    mode: ExecutionMode = ExecutionMode.dry_run
    treat_not_found_as_deleted: bool = True
    verify_after_delete: bool = False
    audit_path: Optional[Path] = None


@dataclass(frozen=True)
class TeardownResult:
    ok: bool
    mode: ExecutionMode
    resources: dict[str, Resource]
    snapshots: dict[str, dict[str, Any]] = field(default_factory=dict)
    outcomes: list[DeletionOutcome] = field(default_factory=list)
    leftover: list[str] = field(default_factory=list)
    alert: Optional[TeardownAlert] = None


class TeardownEngine:
    """
    Teardown engine.

    cloud
    Provider handle used for discovery and deletion.

    config
    Mode and policy switches.

    discovery_fns and registry
    Override the built in kinds. Mostly useful in tests.
    """

    def __init__(
        self,
        cloud: CloudProvider,
        config: TeardownConfig | None = None,
        discovery_fns: Sequence[DiscoveryFn] | None = None,
        registry: KindRegistry | None = None,
    ) -> None:
        self._cloud = cloud
        self._config = config or TeardownConfig()
        self._discovery_fns = discovery_fns
        self._registry = registry

    def discover(self, cluster_name: str) -> dict[str, Resource]:
        """Run one discovery pass for the cluster."""
        cluster = ClusterResources(
            self._cloud,
            cluster_name,
            discovery_fns=self._discovery_fns,
            registry=self._registry,
        )
        return cluster.list_resources()

    def run(self, cluster_name: str) -> TeardownResult:
        """
        Tear down a single cluster.

        Steps
        1) discover
        2) dump every resource in dry run mode, or
        3) delete every resource in apply mode
        4) optionally rediscover to find leftovers
        """
        log = logger.bind(cluster=cluster_name, mode=self._config.mode.value)
        resources = self.discover(cluster_name)
        log.info("discovery complete", count=len(resources))

        if self._config.mode == ExecutionMode.dry_run:
            snapshots = {key: dump_resource(resources[key]) for key in sorted(resources)}
            return TeardownResult(
                ok=True,
                mode=self._config.mode,
                resources=resources,
                snapshots=snapshots,
            )

        outcomes = self._delete_all(cluster_name, resources)

        leftover: list[str] = []
        verify_error = ""
        if self._config.verify_after_delete:
            # outcomes are kept even when rediscovery fails
            try:
                leftover = sorted(self.discover(cluster_name))
            except Exception as exc:
                verify_error = str(exc)
                log.warning("verification failed", error=verify_error)
            if leftover:
                log.warning("resources remain after teardown", leftover=leftover)

        alert = self._build_alert(outcomes, leftover, verify_error)
        return TeardownResult(
            ok=alert is None,
            mode=self._config.mode,
            resources=resources,
            outcomes=outcomes,
            leftover=leftover,
            alert=alert,
        )

    def _delete_all(
        self,
        cluster_name: str,
        resources: dict[str, Resource],
    ) -> list[DeletionOutcome]:
        keys = sorted(resources)

        # fail before the first destructive call rather than halfway through
        for key in keys:
            if resources[key].deleter is None:
                raise DeleterMissing(f"{key}: no deleter bound for kind {resources[key].kind!r}")

        audit = None
        if self._config.audit_path is not None:
            audit = AuditLogger(path=self._config.audit_path, cluster_name=cluster_name)

        outcomes: list[DeletionOutcome] = []
        halted = False
        for key in keys:
            if halted:
                outcome = DeletionOutcome(key=key, status=DeletionStatus.skipped)
            else:
                outcome = self._delete_one(resources[key])
                halted = outcome.status == DeletionStatus.unrecoverable

            outcomes.append(outcome)
            if audit is not None:
                audit.record(outcome)

        return outcomes

    def _delete_one(self, r: Resource) -> DeletionOutcome:
        try:
            delete_resource(self._cloud, r)
        except OperationStartFailed as exc:
            if self._config.treat_not_found_as_deleted and isinstance(exc.__cause__, NotFoundError):
                logger.info("resource already gone", key=r.key, phase=exc.phase)
                return DeletionOutcome(key=r.key, status=DeletionStatus.already_gone)
            logger.error("deletion failed to start", key=r.key, phase=exc.phase, error=str(exc))
            return DeletionOutcome(
                key=r.key,
                status=DeletionStatus.failed,
                phase=exc.phase,
                error=str(exc),
            )
        except UnrecoverableDeletionError as exc:
            logger.critical("teardown halted", key=r.key, phase=exc.phase, error=str(exc))
            return DeletionOutcome(
                key=r.key,
                status=DeletionStatus.unrecoverable,
                phase=exc.phase,
                error=str(exc),
            )
        except Exception as exc:
            phase = getattr(exc, "phase", "")
            logger.error("deletion failed", key=r.key, phase=phase, error=str(exc))
            return DeletionOutcome(
                key=r.key,
                status=DeletionStatus.failed,
                phase=phase,
                error=str(exc),
            )

        return DeletionOutcome(key=r.key, status=DeletionStatus.deleted)

    def _build_alert(
        self,
        outcomes: list[DeletionOutcome],
        leftover: list[str],
        verify_error: str = "",
    ) -> TeardownAlert | None:
        unrecoverable = [o.key for o in outcomes if o.status == DeletionStatus.unrecoverable]
        if unrecoverable:
            return TeardownAlert(
                severity="critical",
                summary="destroy failed after start, teardown halted",
                failed_keys=unrecoverable,
            )

        failed = [o.key for o in outcomes if o.status == DeletionStatus.failed]
        if failed:
            return TeardownAlert(
                severity="warning",
                summary=f"{len(failed)} resources failed to delete",
                failed_keys=failed,
            )

        if verify_error:
            return TeardownAlert(
                severity="warning",
                summary=f"verification failed: {verify_error}",
                failed_keys=[],
            )

        if leftover:
            return TeardownAlert(
                severity="warning",
                summary="resources remain after teardown",
                failed_keys=leftover,
            )

        return None
