"""
Teardown package.

This makes the teardown folder an explicit package so both Python and mypy
resolve modules consistently.
"""

from cluster_teardown.teardown.engine import (
    DeletionOutcome,
    DeletionStatus,
    TeardownAlert,
    TeardownConfig,
    TeardownEngine,
    TeardownResult,
)
from cluster_teardown.teardown.execution_mode import ExecutionMode

__all__ = [
    "DeletionOutcome",
    "DeletionStatus",
    "ExecutionMode",
    "TeardownAlert",
    "TeardownConfig",
    "TeardownEngine",
    "TeardownResult",
]
