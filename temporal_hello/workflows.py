"""Hello workflow definitions executed by the worker.

All three workflow types share one shape: resolve the input name, optionally
suspend, then produce the greeting. The only difference between them is the
suspension policy, so the terminal computation lives in a single place.
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import List, Optional

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from .constants import (
        DELAY_WORKFLOW_NAME,
        QUERY_STAGE,
        SCHEDULE_WORKFLOW_NAME,
        SIGNAL_UPDATE_NAME,
        WORKFLOW_NAME,
    )
    from .contracts import DelayInput, HelloInput, ScheduleInput
    from .greeting import (
        apply_name_override,
        clamp_delay_minutes,
        format_greeting,
        resolve_name,
    )


class SuspensionPolicy(str, Enum):
    """How a workflow suspends before computing its greeting."""

    NONE = "none"
    SIGNAL_WAIT = "signal_wait"
    DELAY_THEN_SIGNAL_WAIT = "delay_then_signal_wait"

    @property
    def delays(self) -> bool:
        return self is SuspensionPolicy.DELAY_THEN_SIGNAL_WAIT

    @property
    def waits_for_signal(self) -> bool:
        return self is not SuspensionPolicy.NONE


class WorkflowStage(str, Enum):
    STARTED = "started"
    DELAY_WAIT = "delay_wait"
    SIGNAL_WAIT = "signal_wait"
    COMPLETED = "completed"


class SignalOutcome(str, Enum):
    RECEIVED = "received"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class SignalWaitResult:
    outcome: SignalOutcome
    payload: Optional[str] = None


class GreetingWorkflowBase:
    """State and handlers shared by every hello workflow type."""

    def __init__(self) -> None:
        self._stage = WorkflowStage.STARTED
        self._pending: List[str] = []
        self._consumed = False

    @workflow.signal(name=SIGNAL_UPDATE_NAME)
    def update_name(self, new_name: str) -> None:
        # Only the first delivery is consumed; later ones have no receiver.
        if self._consumed:
            workflow.logger.info(
                f"Ignoring signal '{SIGNAL_UPDATE_NAME}' with value {new_name!r}: "
                "no consumer waiting"
            )
            return
        self._pending.append(new_name)

    @workflow.query(name=QUERY_STAGE)
    def stage(self) -> str:
        return self._stage.value

    async def _wait_for_signal(
        self, timeout: Optional[timedelta] = None
    ) -> SignalWaitResult:
        """Suspend until the first ``update-name`` signal or ``timeout``.

        Cancellation is not caught here; it propagates and ends the execution
        as Canceled.
        """
        self._stage = WorkflowStage.SIGNAL_WAIT
        workflow.logger.info(
            f"Waiting for signal '{SIGNAL_UPDATE_NAME}' to update name..."
        )
        try:
            await workflow.wait_condition(lambda: bool(self._pending), timeout=timeout)
        except asyncio.TimeoutError:
            self._consumed = True
            return SignalWaitResult(SignalOutcome.TIMED_OUT)

        self._consumed = True
        if len(self._pending) > 1:
            workflow.logger.info(
                f"Dropping {len(self._pending) - 1} extra '{SIGNAL_UPDATE_NAME}' signal(s)"
            )
        return SignalWaitResult(SignalOutcome.RECEIVED, self._pending[0])

    async def _execute(
        self,
        name: str,
        policy: SuspensionPolicy,
        delay_minutes: int = 0,
        signal_timeout_seconds: Optional[float] = None,
    ) -> str:
        name = resolve_name(name)

        if policy.delays:
            minutes = clamp_delay_minutes(delay_minutes)
            self._stage = WorkflowStage.DELAY_WAIT
            workflow.logger.info(f"Waiting for delay of {minutes} minute(s)")
            await asyncio.sleep(timedelta(minutes=minutes).total_seconds())
            workflow.logger.info(f"Delay completed, now waiting for signal name={name}")

        if policy.waits_for_signal:
            timeout = (
                timedelta(seconds=signal_timeout_seconds)
                if signal_timeout_seconds is not None
                else None
            )
            result = await self._wait_for_signal(timeout)
            if result.outcome is SignalOutcome.RECEIVED:
                workflow.logger.info(f"Received signal newName={result.payload!r}")
                name = apply_name_override(name, result.payload)
            else:
                workflow.logger.info("Signal wait timed out, keeping current name")
        else:
            workflow.logger.info("Auto-start mode: executing without waiting for signal")

        greeting = format_greeting(name)
        self._stage = WorkflowStage.COMPLETED
        workflow.logger.info(f"Completing workflow result={greeting}")
        return greeting


@workflow.defn(name=WORKFLOW_NAME)
class HelloWorkflow(GreetingWorkflowBase):
    """Signal-gated greeting, or immediate when ``auto_start`` is set."""

    @workflow.run
    async def run(self, params: HelloInput) -> str:
        workflow.logger.info(
            f"HelloWorkflow started name={params.name!r} auto_start={params.auto_start}"
        )
        policy = (
            SuspensionPolicy.NONE if params.auto_start else SuspensionPolicy.SIGNAL_WAIT
        )
        return await self._execute(
            params.name, policy, signal_timeout_seconds=params.signal_timeout_seconds
        )


@workflow.defn(name=SCHEDULE_WORKFLOW_NAME)
class ScheduleWorkflow(GreetingWorkflowBase):
    """Started by schedules; never waits since no client is there to signal."""

    @workflow.run
    async def run(self, params: ScheduleInput) -> str:
        workflow.logger.info(f"ScheduleWorkflow started name={params.name!r}")
        return await self._execute(params.name, SuspensionPolicy.NONE)


@workflow.defn(name=DELAY_WORKFLOW_NAME)
class DelayWorkflow(GreetingWorkflowBase):
    """Sleeps for the requested minutes, then behaves like the signal-gated run."""

    @workflow.run
    async def run(self, params: DelayInput) -> str:
        workflow.logger.info(
            f"DelayWorkflow started delay_minutes={params.delay_minutes} "
            f"name={params.name!r}"
        )
        return await self._execute(
            params.name,
            SuspensionPolicy.DELAY_THEN_SIGNAL_WAIT,
            delay_minutes=params.delay_minutes,
            signal_timeout_seconds=params.signal_timeout_seconds,
        )


WORKFLOWS = [HelloWorkflow, ScheduleWorkflow, DelayWorkflow]
