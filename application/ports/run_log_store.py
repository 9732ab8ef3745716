from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from domain.run_log import RunLogEntry


class RunLogStorePort(ABC):
    @abstractmethod
    def append(self, run_id: str, entry: RunLogEntry) -> None:
        ...

    @abstractmethod
    def list(self, run_id: str, event: Optional[str] = None) -> List[RunLogEntry]:
        """Entries of one run in append order, optionally limited to one event name."""
        ...
