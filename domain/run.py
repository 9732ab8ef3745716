# domain/run.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChainRunStatus(str, Enum):
    COMMITTED = "committed"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class ChainRunResult:
    run_id: str
    status: ChainRunStatus
    steps_completed: int
    stopped_step: Optional[str] = None
    stop_reason: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.status == ChainRunStatus.COMMITTED
