# application/executor/chain_executor.py
from __future__ import annotations

import time
import uuid
from typing import Generic, List, Optional, Tuple, TypeVar

from application.exceptions import ChainBusyError, InvalidStepOutcomeError
from application.ports.logger import LoggerPort
from domain.run import ChainRunResult, ChainRunStatus
from domain.steps.base import ChainStep
from domain.steps.outcome import Continue, Stop

S = TypeVar("S")


class ChainExecutor(Generic[S]):
    """
    Runs registered steps one after another, threading the state through them.

    The committed result is replaced only when every step continues. A stopped
    or failed run leaves the previous result in place. Step side effects are
    never undone.

    Overlapping runs on the same instance are rejected with ChainBusyError.
    """

    def __init__(self, logger: LoggerPort, name: str = "chain") -> None:
        self._logger = logger
        self._name = name
        self._steps: List[ChainStep[S]] = []
        self._result: Optional[S] = None
        self._running = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def steps(self) -> Tuple[ChainStep[S], ...]:
        return tuple(self._steps)

    @property
    def is_running(self) -> bool:
        return self._running

    def add_step(self, step: ChainStep[S]) -> None:
        self._steps.append(step)

    def get_result(self) -> Optional[S]:
        return self._result

    async def run(
        self,
        initial_state: S,
        *,
        run_id: Optional[str] = None,
        logger: Optional[LoggerPort] = None,
    ) -> ChainRunResult:
        run_id = run_id or uuid.uuid4().hex
        log = (logger or self._logger).bind(chain=self._name, run_id=run_id)

        if self._running:
            log.warning("chain.busy")
            raise ChainBusyError(self._name)

        self._running = True
        try:
            return await self._run_steps(initial_state, run_id, log)
        finally:
            self._running = False

    async def _run_steps(self, initial_state: S, run_id: str, log: LoggerPort) -> ChainRunResult:
        log.info("chain.start", step_count=len(self._steps))

        current = initial_state
        for index, step in enumerate(self._steps):
            log.info("step.start", step_name=step.name, step_index=index)
            t0 = time.perf_counter()

            try:
                outcome = await step.action(current)
            except Exception as e:
                log.error(
                    "step.failed",
                    step_name=step.name,
                    step_index=index,
                    error=str(e),
                    error_type=type(e).__name__,
                    elapsed_ms=int((time.perf_counter() - t0) * 1000),
                )
                raise

            elapsed_ms = int((time.perf_counter() - t0) * 1000)

            if isinstance(outcome, Stop):
                log.info("step.end", step_name=step.name, outcome="stop", elapsed_ms=elapsed_ms)
                log.info("chain.stopped", step_name=step.name, reason=outcome.reason)
                return ChainRunResult(
                    run_id=run_id,
                    status=ChainRunStatus.STOPPED,
                    steps_completed=index,
                    stopped_step=step.name,
                    stop_reason=outcome.reason,
                )

            if not isinstance(outcome, Continue):
                log.error(
                    "step.failed",
                    step_name=step.name,
                    step_index=index,
                    error="invalid outcome",
                    error_type=type(outcome).__name__,
                    elapsed_ms=elapsed_ms,
                )
                raise InvalidStepOutcomeError(step.name, outcome)

            log.info("step.end", step_name=step.name, outcome="continue", elapsed_ms=elapsed_ms)
            current = outcome.state

        self._result = current
        log.info("chain.committed", steps_completed=len(self._steps))
        return ChainRunResult(
            run_id=run_id,
            status=ChainRunStatus.COMMITTED,
            steps_completed=len(self._steps),
        )
