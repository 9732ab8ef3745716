# infrastructure/logging/console_logger.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict

from infrastructure.logging.bound_logger import BoundLogger


@dataclass(frozen=True)
class ConsoleLogger(BoundLogger):
    level: str = "INFO"

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        print(f"{event} {json.dumps(payload, ensure_ascii=False, default=str)}")
