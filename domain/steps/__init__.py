from domain.steps.base import ChainStep, StepAction
from domain.steps.outcome import Continue, Stop, StepOutcome, proceed, stop

__all__ = [
    "ChainStep",
    "StepAction",
    "Continue",
    "Stop",
    "StepOutcome",
    "proceed",
    "stop",
]
