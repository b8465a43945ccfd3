"""Schedule lifecycle management for the hello workflow."""

from __future__ import annotations

import logging
import re
from typing import AsyncIterator, Optional

from temporalio import client as temporal_client

from .client import HelloClient, engine_errors, new_execution_id
from .constants import DEFAULT_RPC_TIMEOUT, DEFAULT_WORKFLOW_NAME, SCHEDULE_WORKFLOW_NAME
from .contracts import (
    ScheduleDetails,
    ScheduleInput,
    ScheduleSpec,
    ScheduleState,
    ScheduleSummary,
)
from .errors import InvalidCronError

logger = logging.getLogger(__name__)

CRON_MEMO_KEY = "cron_expression"

_CRON_FIELD = re.compile(r"^[0-9A-Za-z*/,\-?LW#]+$")


def validate_cron(expression: str) -> str:
    """Check that ``expression`` is a single standard cron expression.

    Five whitespace separated fields are required, or one of the ``@``
    descriptors such as ``@hourly``. The engine performs the full check.

    Raises:
        InvalidCronError: If the expression is obviously malformed.
    """

    expression = (expression or "").strip()
    if not expression:
        raise InvalidCronError("Cron expression must not be empty")
    if expression.startswith("@"):
        if " " in expression:
            raise InvalidCronError(f"Invalid cron descriptor: {expression!r}")
        return expression
    fields = expression.split()
    if len(fields) != 5:
        raise InvalidCronError(
            f"Cron expression {expression!r} must have 5 fields, got {len(fields)}"
        )
    for field in fields:
        if not _CRON_FIELD.match(field):
            raise InvalidCronError(
                f"Invalid cron field {field!r} in expression {expression!r}"
            )
    return expression


class ScheduleManager:
    """Create, inspect and toggle schedules that start ``ScheduleWorkflow``.

    Every schedule-fired run uses the immediate variant, so no signal is ever
    needed to complete it.
    """

    def __init__(self, client: HelloClient) -> None:
        self._hello = client

    @property
    def _client(self) -> temporal_client.Client:
        return self._hello.temporal

    async def create(
        self,
        schedule_id: str,
        cron_expression: str,
        workflow_id: Optional[str] = None,
        task_queue: Optional[str] = None,
        name: str = DEFAULT_WORKFLOW_NAME,
    ) -> ScheduleSpec:
        """Register a schedule firing ``ScheduleWorkflow`` on ``cron_expression``.

        The expression is checked by the engine; a rejected one raises
        :class:`InvalidCronError`. Use :func:`validate_cron` to reject obviously
        malformed input without a round trip.
        """
        workflow_id = workflow_id or new_execution_id()
        task_queue = task_queue or self._hello.task_queue

        schedule = temporal_client.Schedule(
            action=temporal_client.ScheduleActionStartWorkflow(
                SCHEDULE_WORKFLOW_NAME,
                ScheduleInput(name=name),
                id=workflow_id,
                task_queue=task_queue,
            ),
            spec=temporal_client.ScheduleSpec(cron_expressions=[cron_expression]),
        )
        with engine_errors(f"Schedule {schedule_id}", invalid_argument=InvalidCronError):
            await self._client.create_schedule(
                schedule_id,
                schedule,
                memo={CRON_MEMO_KEY: cron_expression},
                rpc_timeout=DEFAULT_RPC_TIMEOUT,
            )
        logger.info(f"Schedule created: {schedule_id} cron={cron_expression!r}")
        return ScheduleSpec(
            schedule_id=schedule_id,
            cron_expression=cron_expression,
            workflow_id=workflow_id,
            workflow_type=SCHEDULE_WORKFLOW_NAME,
            task_queue=task_queue,
        )

    async def list(self) -> AsyncIterator[ScheduleSummary]:
        """Yield every schedule in the namespace.

        Pages are fetched transparently; the sequence reflects the engine's
        state when iteration starts and cannot be restarted.
        """
        with engine_errors("Schedule list"):
            iterator = await self._client.list_schedules(rpc_timeout=DEFAULT_RPC_TIMEOUT)
            async for entry in iterator:
                yield ScheduleSummary(schedule_id=entry.id)

    async def pause(self, schedule_id: str, note: Optional[str] = None) -> None:
        handle = self._client.get_schedule_handle(schedule_id)
        with engine_errors(f"Schedule {schedule_id}"):
            await handle.pause(note=note, rpc_timeout=DEFAULT_RPC_TIMEOUT)
        logger.info(f"Schedule paused: {schedule_id}")

    async def resume(self, schedule_id: str, note: Optional[str] = None) -> None:
        handle = self._client.get_schedule_handle(schedule_id)
        with engine_errors(f"Schedule {schedule_id}"):
            await handle.unpause(note=note, rpc_timeout=DEFAULT_RPC_TIMEOUT)
        logger.info(f"Schedule resumed: {schedule_id}")

    async def delete(self, schedule_id: str) -> None:
        handle = self._client.get_schedule_handle(schedule_id)
        with engine_errors(f"Schedule {schedule_id}"):
            await handle.delete(rpc_timeout=DEFAULT_RPC_TIMEOUT)
        logger.info(f"Schedule deleted: {schedule_id}")

    async def describe(self, schedule_id: str) -> ScheduleDetails:
        handle = self._client.get_schedule_handle(schedule_id)
        with engine_errors(f"Schedule {schedule_id}"):
            description = await handle.describe(rpc_timeout=DEFAULT_RPC_TIMEOUT)
            # The server rewrites cron strings into calendar specs, so the
            # submitted expression is read back from the memo.
            cron_expressions = description.schedule.spec.cron_expressions
            if cron_expressions:
                cron_expression = cron_expressions[0]
            else:
                cron_expression = await description.memo_value(CRON_MEMO_KEY, None)

        schedule = description.schedule
        details = ScheduleDetails(
            schedule_id=schedule_id,
            state=ScheduleState.PAUSED if schedule.state.paused else ScheduleState.ACTIVE,
            cron_expression=cron_expression,
            note=schedule.state.note,
        )
        action = schedule.action
        if isinstance(action, temporal_client.ScheduleActionStartWorkflow):
            details.workflow_id = action.id
            details.task_queue = action.task_queue
            details.workflow_type = action.workflow
        return details
