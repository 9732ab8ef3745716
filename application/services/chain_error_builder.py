# application/services/chain_error_builder.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from application.exceptions import ChainBusyError, InvalidStepOutcomeError


@dataclass(frozen=True)
class ChainErrorDetail:
    code: str
    message: str
    error_type: str
    step_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ChainErrorBuilder:
    def build_from_exception(self, exc: BaseException, step_name: Optional[str] = None) -> ChainErrorDetail:
        if isinstance(exc, ChainBusyError):
            code = "chain_busy"
        elif isinstance(exc, InvalidStepOutcomeError):
            code = "invalid_outcome"
            step_name = step_name or exc.step_name
        else:
            code = "step_failed"
        return ChainErrorDetail(
            code=code,
            message=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
            step_name=step_name,
        )
