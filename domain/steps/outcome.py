# domain/steps/outcome.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

S = TypeVar("S")


@dataclass(frozen=True)
class Continue(Generic[S]):
    state: S


@dataclass(frozen=True)
class Stop:
    reason: Optional[str] = None


StepOutcome = Union[Continue[S], Stop]


def proceed(state: S) -> Continue[S]:
    return Continue(state)


def stop(reason: Optional[str] = None) -> Stop:
    return Stop(reason)
