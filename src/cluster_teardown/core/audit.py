"""
Teardown audit trail.

One JSON object per line, one line per deletion outcome. Operators read this
after a partial teardown to see which resource failed in which phase.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cluster_teardown.teardown.engine import DeletionOutcome


@dataclass(frozen=True)
class AuditLogger:
    """
    JSON line audit logger.

    path
    File to append to. Parent directories are created on first write.

    cluster_name
    Stamped on every line so several clusters can share one file.
    """

    path: Path
    cluster_name: str = ""

    def record(self, outcome: DeletionOutcome) -> None:
        """Append one deletion outcome."""
        self._append(
            {
                "cluster": self.cluster_name,
                "key": outcome.key,
                "status": outcome.status.value,
                "phase": outcome.phase,
                "error": outcome.error,
            }
        )

    def _append(self, event: dict[str, Any]) -> None:
        payload = dict(event)
        payload["ts_unix"] = int(time.time())
        line = json.dumps(payload, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
