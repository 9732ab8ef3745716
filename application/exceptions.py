from __future__ import annotations


class ApplicationError(Exception):
    """Base class for application-level failures."""


class ChainBusyError(ApplicationError):
    def __init__(self, chain_name: str) -> None:
        super().__init__(f"Chain is already running: {chain_name}")
        self.chain_name = chain_name


class InvalidStepOutcomeError(ApplicationError):
    def __init__(self, step_name: str, outcome: object) -> None:
        super().__init__(
            f"Step returned an invalid outcome: step={step_name}, outcome={type(outcome).__name__}"
        )
        self.step_name = step_name
        self.outcome = outcome


class CartNotFoundError(ApplicationError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Cart not found: {token}")
        self.token = token
