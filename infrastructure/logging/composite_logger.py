from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from application.ports.logger import LoggerPort


@dataclass(frozen=True)
class CompositeLogger(LoggerPort):
    loggers: Sequence[LoggerPort]

    def bind(self, **fields: Any) -> "CompositeLogger":
        return CompositeLogger(tuple(logger.bind(**fields) for logger in self.loggers))

    def debug(self, event: str, **fields: Any) -> None:
        for logger in self.loggers:
            logger.debug(event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        for logger in self.loggers:
            logger.info(event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        for logger in self.loggers:
            logger.warning(event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        for logger in self.loggers:
            logger.error(event, **fields)
