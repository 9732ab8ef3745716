# domain/steps/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from domain.steps.outcome import StepOutcome

S = TypeVar("S")

StepAction = Callable[[S], Awaitable[StepOutcome[S]]]


@dataclass(frozen=True)
class ChainStep(Generic[S]):
    name: str  # diagnostics only
    action: StepAction[S]
