"""temporal_hello: a durable hello workflow client and worker on Temporal."""

from .client import HelloClient
from .config import HelloConfig, load_config
from .contracts import (
    DelayInput,
    ExecutionSnapshot,
    ExecutionStatus,
    HelloInput,
    ScheduleDetails,
    ScheduleInput,
    ScheduleSpec,
    ScheduleState,
    StartedExecution,
)
from .schedules import ScheduleManager

__version__ = "0.1.0"
__all__ = [
    "HelloClient",
    "HelloConfig",
    "load_config",
    "HelloInput",
    "ScheduleInput",
    "DelayInput",
    "ExecutionStatus",
    "ExecutionSnapshot",
    "StartedExecution",
    "ScheduleSpec",
    "ScheduleState",
    "ScheduleDetails",
    "ScheduleManager",
]
