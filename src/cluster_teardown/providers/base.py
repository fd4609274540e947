"""
Provider interfaces.

Goal
Define the narrow surface the teardown core needs from a cloud provider without
binding the engine to a specific SDK.

Real implementations will wrap a provider library such as a vSphere client.
Connection setup, credentials, rate limiting, retries and timeouts all live
behind these interfaces, not in the core.

Error contract
find_entities raises NotFoundError when nothing matched, so callers can tell an
empty cluster apart from a failing provider. Any other exception is a hard
query failure.

power_off and destroy raise when the call cannot start. The returned task
raises from wait when the operation started but did not complete.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class ProviderTask(Protocol):
    """
    Awaitable handle for a started provider operation.

    wait blocks until the operation completes and raises TaskFailed if it
    completed with an error.
    """

    def wait(self) -> None:
        """Block until the operation completes."""


@runtime_checkable
class VirtualMachine(Protocol):
    """Minimal virtual machine handle."""

    def name(self) -> str:
        """Return the provider name of the machine."""

    def power_off(self) -> ProviderTask:
        """Start a power off operation."""

    def destroy(self) -> ProviderTask:
        """Start a destroy operation."""

    def describe(self) -> dict[str, Any]:
        """Return a display friendly view of the machine."""


class CloudProvider(Protocol):
    """
    Cloud handle consumed by discovery and deletion.

    find_entities
    Return entities of the given kind whose names match any of the patterns.
    Pattern syntax is provider specific and passed through untouched.

    delete_cloud_init_iso
    Remove the bootstrap medium that was attached to a machine.
    """

    def find_entities(self, patterns: list[str], kind: str) -> list[Any]:
        """Query entities by name pattern."""

    def delete_cloud_init_iso(self, vm_name: str) -> None:
        """Remove the cloud init ISO for a machine."""
