"""Payloads and result records exchanged with the workflow engine."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .constants import DEFAULT_WORKFLOW_NAME


class HelloInput(BaseModel):
    """Input accepted by ``HelloWorkflow``.

    ``auto_start`` runs the workflow to completion without waiting for a
    signal, which is how schedule-fired runs behave.
    """

    name: str = DEFAULT_WORKFLOW_NAME
    auto_start: bool = False
    signal_timeout_seconds: Optional[float] = Field(default=None, gt=0)


class ScheduleInput(BaseModel):
    """Input accepted by ``ScheduleWorkflow``."""

    name: str = DEFAULT_WORKFLOW_NAME


class DelayInput(BaseModel):
    """Input accepted by ``DelayWorkflow``."""

    delay_minutes: int
    name: str = DEFAULT_WORKFLOW_NAME
    signal_timeout_seconds: Optional[float] = Field(default=None, gt=0)


class ExecutionStatus(str, Enum):
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    TIMED_OUT = "TimedOut"
    CANCELED = "Canceled"
    TERMINATED = "Terminated"
    CONTINUED_AS_NEW = "ContinuedAsNew"

    @property
    def is_terminal(self) -> bool:
        return self is not ExecutionStatus.RUNNING


class StartedExecution(BaseModel):
    """Identifiers returned when an execution is started."""

    execution_id: str
    run_id: Optional[str] = None


class ExecutionSnapshot(BaseModel):
    """Point-in-time status of an execution."""

    execution_id: str
    run_id: Optional[str] = None
    status: ExecutionStatus


class ScheduleState(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"


class ScheduleSpec(BaseModel):
    """A recurring trigger that starts the immediate workflow variant."""

    schedule_id: str
    cron_expression: str
    workflow_id: str
    workflow_type: str
    task_queue: str
    paused: bool = False


class ScheduleSummary(BaseModel):
    schedule_id: str


class ScheduleDetails(BaseModel):
    """Read-only view of a schedule as reported by the engine."""

    schedule_id: str
    state: ScheduleState
    cron_expression: Optional[str] = None
    workflow_id: Optional[str] = None
    task_queue: Optional[str] = None
    workflow_type: Optional[str] = None
    note: Optional[str] = Field(default=None, description="Last pause/resume note")
