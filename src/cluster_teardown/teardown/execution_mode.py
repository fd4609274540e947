"""
Execution modes.

apply
Delete every discovered resource.

dry_run
Discover and dump every resource, but do not delete anything.
"""

from __future__ import annotations

from enum import StrEnum


class ExecutionMode(StrEnum):
    apply = "apply"
    dry_run = "dry_run"
