"""Shared names and defaults for the hello workflows."""

from datetime import timedelta

# Workflow types registered on the worker
WORKFLOW_NAME = "HelloWorkflow"
SCHEDULE_WORKFLOW_NAME = "ScheduleWorkflow"
DELAY_WORKFLOW_NAME = "DelayWorkflow"

ACTIVITY_NAME = "SayHello"

WORKFLOW_ID_PREFIX = "hello-workflow-"
DELAY_WORKFLOW_ID_PREFIX = WORKFLOW_ID_PREFIX + "delay-"

DEFAULT_WORKFLOW_NAME = "Temporal User"

SIGNAL_UPDATE_NAME = "update-name"
QUERY_STAGE = "stage"

GREETING_TEMPLATE = "Hello, {name} from Temporal Worker on AWS!"

DEFAULT_WORKFLOW_TIMEOUT = timedelta(hours=24)
DEFAULT_WORKFLOW_RUN_TIMEOUT = timedelta(hours=24)
DEFAULT_RPC_TIMEOUT = timedelta(seconds=30)

MIN_DELAY_MINUTES = 1
