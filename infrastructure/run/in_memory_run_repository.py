from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional

from application.ports.run_repository import RunRepositoryPort
from domain.exceptions import RunStateError
from domain.run import ChainRunStatus
from domain.run_record import ChainRunRecord


class InMemoryRunRepository(RunRepositoryPort):
    def __init__(self) -> None:
        self._runs: Dict[str, ChainRunRecord] = {}
        self._lock = Lock()

    def create(self, record: ChainRunRecord) -> None:
        with self._lock:
            if record.run_id in self._runs:
                raise RunStateError(f"Run already exists: {record.run_id}")
            self._runs[record.run_id] = record

    def get(self, run_id: str) -> Optional[ChainRunRecord]:
        with self._lock:
            return self._runs.get(run_id)

    def finish(
        self,
        run_id: str,
        status: ChainRunStatus,
        steps_completed: int = 0,
        cart: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        error_detail: Optional[Dict[str, Any]] = None,
    ) -> ChainRunRecord:
        with self._lock:
            record = self._runs.get(run_id)
            if record is None:
                raise RunStateError(f"Run not found: {run_id}")
            if record.status is not None:
                raise RunStateError(
                    f"Run already finished: {run_id} ({record.status.value})"
                )
            updated = record.finish(
                status=status,
                updated_at=datetime.now(timezone.utc),
                steps_completed=steps_completed,
                cart=cart,
                error=error,
                error_detail=error_detail,
            )
            self._runs[run_id] = updated
            return updated

    def list_by_chain(self, chain_name: str) -> List[ChainRunRecord]:
        with self._lock:
            records = [r for r in self._runs.values() if r.chain_name == chain_name]
        return sorted(records, key=lambda r: r.created_at)

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()
