# infrastructure/logging/bound_logger.py
from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict

from application.ports.logger import LoggerPort

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


@dataclass(frozen=True)
class BoundLogger(LoggerPort):
    """Shared bind/level handling for the structured loggers."""

    level: str = "DEBUG"
    bound: Dict[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "BoundLogger":
        merged = dict(self.bound)
        merged.update(fields)
        return replace(self, bound=merged)

    def debug(self, event: str, **fields: Any) -> None:
        self._log("DEBUG", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log("INFO", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log("WARNING", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log("ERROR", event, fields)

    def _log(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        if LEVELS[level] < LEVELS.get(self.level.upper(), 0):
            return
        payload = dict(self.bound)
        payload.update(fields)
        payload.setdefault("type", event)
        payload.setdefault("level", level.lower())
        self._emit(event, payload)

    @abstractmethod
    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        ...
