from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from domain.run import ChainRunStatus


@dataclass(frozen=True)
class ChainRunRecord:
    run_id: str
    chain_name: str
    status: Optional[ChainRunStatus]  # None while running
    created_at: datetime
    updated_at: datetime
    steps_completed: int = 0
    cart: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_detail: Optional[Dict[str, Any]] = None

    def finish(
        self,
        status: ChainRunStatus,
        updated_at: datetime,
        steps_completed: int = 0,
        cart: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        error_detail: Optional[Dict[str, Any]] = None,
    ) -> "ChainRunRecord":
        return replace(
            self,
            status=status,
            updated_at=updated_at,
            steps_completed=steps_completed,
            cart=cart if cart is not None else self.cart,
            error=error,
            error_detail=error_detail,
        )
