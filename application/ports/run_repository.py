from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from domain.run import ChainRunStatus
from domain.run_record import ChainRunRecord


class RunRepositoryPort(ABC):
    @abstractmethod
    def create(self, record: ChainRunRecord) -> None:
        ...

    @abstractmethod
    def get(self, run_id: str) -> Optional[ChainRunRecord]:
        ...

    @abstractmethod
    def finish(
        self,
        run_id: str,
        status: ChainRunStatus,
        steps_completed: int = 0,
        cart: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        error_detail: Optional[Dict[str, Any]] = None,
    ) -> ChainRunRecord:
        ...

    @abstractmethod
    def list_by_chain(self, chain_name: str) -> List[ChainRunRecord]:
        ...
