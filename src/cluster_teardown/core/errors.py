"""
Error taxonomy.

We separate error types so callers can react correctly.
Example:
NotFoundError during discovery means the cluster owns nothing of that kind.
OperationStartFailed leaves the resource untouched and is safe to retry.
UnrecoverableDeletionError leaves the resource half destroyed and must halt the batch.
DeleterMissing is a wiring bug, never a "nothing to do" signal.
"""

from __future__ import annotations


class TeardownError(Exception):
    """Base class for all teardown exceptions."""


class ProviderError(TeardownError):
    """Raised by a provider collaborator when a query or lifecycle call fails."""


class NotFoundError(ProviderError):
    """Raised by a provider when no entity matched the request."""


class TaskFailed(ProviderError):
    """Raised when an awaited provider task reports failure."""


class UnknownResourceKind(TeardownError):
    """Raised when a kind has no registered behavior."""


class DeleterMissing(TeardownError):
    """Raised when delete is dispatched on a record with no bound deleter."""


class DumperMissing(TeardownError):
    """Raised when dump is dispatched on a record with no bound dumper."""


class ResourceTypeMismatch(TeardownError):
    """Raised when a record carries a handle of the wrong type for its kind."""


class DeletionFailed(TeardownError):
    """
    Base class for deletion failures tied to one resource and one phase.

    key
    The resource key that failed.

    phase
    The lifecycle phase that failed, such as power_off or destroy.
    """

    def __init__(self, key: str, phase: str, message: str) -> None:
        super().__init__(f"{key}: {phase}: {message}")
        self.key = key
        self.phase = phase


class OperationStartFailed(DeletionFailed):
    """
    Raised when a lifecycle call fails to begin.

    The resource is left in its prior state and the call is safe to retry.
    """


class UnrecoverableDeletionError(DeletionFailed):
    """
    Raised when an operation fails after it has started.

    The resource is in an indeterminate state. Callers must stop the batch and
    alert an operator instead of retrying.
    """
