from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from application.ports.run_log_store import RunLogStorePort
from domain.run_log import RunLogEntry
from infrastructure.logging.bound_logger import BoundLogger


@dataclass(frozen=True)
class RunLogLogger(BoundLogger):
    """Collects every event of one chain run into the run log store."""

    run_id: str = field(kw_only=True)
    log_store: RunLogStorePort = field(kw_only=True)

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        entry = RunLogEntry(
            timestamp=datetime.now(timezone.utc),
            event=event,
            level=payload["level"],
            fields=payload,
        )
        self.log_store.append(self.run_id, entry)
