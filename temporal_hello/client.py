"""Typed handle over the Temporal client used by the CLI and schedules."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Iterator, Optional, Type

from pydantic import BaseModel
from temporalio import exceptions as temporal_exceptions
from temporalio.client import (
    Client,
    ScheduleAlreadyRunningError,
    WorkflowExecutionStatus,
    WorkflowFailureError,
)
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.exceptions import WorkflowAlreadyStartedError
from temporalio.service import RPCError, RPCStatusCode

from .config import HelloConfig
from .constants import (
    DEFAULT_RPC_TIMEOUT,
    DEFAULT_WORKFLOW_NAME,
    DEFAULT_WORKFLOW_RUN_TIMEOUT,
    DEFAULT_WORKFLOW_TIMEOUT,
    DELAY_WORKFLOW_ID_PREFIX,
    DELAY_WORKFLOW_NAME,
    QUERY_STAGE,
    SIGNAL_UPDATE_NAME,
    WORKFLOW_ID_PREFIX,
    WORKFLOW_NAME,
)
from .contracts import (
    DelayInput,
    ExecutionSnapshot,
    ExecutionStatus,
    HelloInput,
    StartedExecution,
)
from .errors import (
    AlreadyExistsError,
    BackendConnectionError,
    HelloTemporalError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    WorkflowExecutionStatus.RUNNING: ExecutionStatus.RUNNING,
    WorkflowExecutionStatus.COMPLETED: ExecutionStatus.COMPLETED,
    WorkflowExecutionStatus.FAILED: ExecutionStatus.FAILED,
    WorkflowExecutionStatus.CANCELED: ExecutionStatus.CANCELED,
    WorkflowExecutionStatus.TERMINATED: ExecutionStatus.TERMINATED,
    WorkflowExecutionStatus.CONTINUED_AS_NEW: ExecutionStatus.CONTINUED_AS_NEW,
    WorkflowExecutionStatus.TIMED_OUT: ExecutionStatus.TIMED_OUT,
}


def new_execution_id(
    prefix: str = WORKFLOW_ID_PREFIX, now: Optional[float] = None
) -> str:
    """Return ``<prefix><unix-ts>``."""
    timestamp = int(time.time() if now is None else now)
    return f"{prefix}{timestamp}"


@contextmanager
def engine_errors(
    subject: str, invalid_argument: Type[ValidationError] = ValidationError
) -> Iterator[None]:
    """Translate Temporal client errors raised inside the block.

    Errors without a counterpart in :mod:`temporal_hello.errors` are
    re-raised unchanged.
    """

    try:
        yield
    except (WorkflowAlreadyStartedError, ScheduleAlreadyRunningError) as exc:
        raise AlreadyExistsError(f"{subject} already exists") from exc
    except RPCError as exc:
        if exc.status == RPCStatusCode.NOT_FOUND:
            raise NotFoundError(f"{subject} not found: {exc.message}") from exc
        if exc.status == RPCStatusCode.ALREADY_EXISTS:
            raise AlreadyExistsError(f"{subject} already exists: {exc.message}") from exc
        if exc.status in (RPCStatusCode.UNAVAILABLE, RPCStatusCode.DEADLINE_EXCEEDED):
            raise BackendConnectionError(
                f"Temporal service unavailable while accessing {subject}: {exc.message}"
            ) from exc
        if exc.status == RPCStatusCode.INVALID_ARGUMENT:
            raise invalid_argument(f"Invalid request for {subject}: {exc.message}") from exc
        raise


def _terminal_status(cause: Optional[BaseException]) -> ExecutionStatus:
    if isinstance(cause, temporal_exceptions.CancelledError):
        return ExecutionStatus.CANCELED
    if isinstance(cause, temporal_exceptions.TerminatedError):
        return ExecutionStatus.TERMINATED
    if isinstance(cause, temporal_exceptions.TimeoutError):
        return ExecutionStatus.TIMED_OUT
    return ExecutionStatus.FAILED


class HelloClient:
    """Remote handle for starting, signalling and inspecting hello workflows.

    The engine owns all execution state; this class keeps nothing besides the
    underlying client and the default task queue.
    """

    def __init__(self, client: Client, task_queue: str) -> None:
        self._client = client
        self.task_queue = task_queue

    @classmethod
    async def connect(cls, config: HelloConfig) -> "HelloClient":
        """Dial Temporal using ``config``.

        Raises:
            BackendConnectionError: If the service cannot be reached.
        """
        try:
            client = await Client.connect(
                config.address,
                namespace=config.namespace,
                api_key=config.api_key,
                tls=config.tls,
                data_converter=pydantic_data_converter,
            )
        except RuntimeError as exc:
            raise BackendConnectionError(
                f"Failed to connect to Temporal at {config.address}: {exc}"
            ) from exc
        logger.info(f"Client connected to {config.address} namespace={config.namespace}")
        return cls(client, config.task_queue)

    @property
    def temporal(self) -> Client:
        return self._client

    async def start(
        self,
        workflow_type: str,
        payload: BaseModel,
        execution_id: Optional[str] = None,
        task_queue: Optional[str] = None,
        execution_timeout: timedelta = DEFAULT_WORKFLOW_TIMEOUT,
        run_timeout: timedelta = DEFAULT_WORKFLOW_RUN_TIMEOUT,
    ) -> StartedExecution:
        """Start ``workflow_type`` with ``payload`` and return its identifiers."""
        execution_id = execution_id or new_execution_id()
        logger.info(f"Starting {workflow_type}: {execution_id}")
        with engine_errors(f"Workflow {execution_id}"):
            handle = await self._client.start_workflow(
                workflow_type,
                payload,
                id=execution_id,
                task_queue=task_queue or self.task_queue,
                execution_timeout=execution_timeout,
                run_timeout=run_timeout,
                rpc_timeout=DEFAULT_RPC_TIMEOUT,
            )
        return StartedExecution(
            execution_id=handle.id, run_id=handle.first_execution_run_id
        )

    async def start_hello(
        self,
        name: str = DEFAULT_WORKFLOW_NAME,
        auto_start: bool = False,
        execution_id: Optional[str] = None,
    ) -> StartedExecution:
        return await self.start(
            WORKFLOW_NAME,
            HelloInput(name=name, auto_start=auto_start),
            execution_id=execution_id,
        )

    async def start_delay(
        self,
        delay_minutes: int,
        name: str = DEFAULT_WORKFLOW_NAME,
        execution_id: Optional[str] = None,
    ) -> StartedExecution:
        if delay_minutes <= 0:
            raise ValidationError(
                f"Invalid minutes: {delay_minutes}. Must be a positive integer"
            )
        return await self.start(
            DELAY_WORKFLOW_NAME,
            DelayInput(delay_minutes=delay_minutes, name=name),
            execution_id=execution_id or new_execution_id(DELAY_WORKFLOW_ID_PREFIX),
        )

    async def signal(
        self,
        execution_id: str,
        payload: str,
        signal_name: str = SIGNAL_UPDATE_NAME,
    ) -> None:
        """Deliver ``signal_name`` to the latest run of ``execution_id``.

        The engine buffers the signal when nothing is waiting for it. Signalling
        an execution that already finished is a no-op.

        Raises:
            NotFoundError: If ``execution_id`` never existed.
        """
        handle = self._client.get_workflow_handle(execution_id)
        try:
            with engine_errors(f"Workflow {execution_id}"):
                await handle.signal(signal_name, payload, rpc_timeout=DEFAULT_RPC_TIMEOUT)
        except NotFoundError:
            # The engine answers NOT_FOUND for closed runs too.
            snapshot = await self.describe_status(execution_id)
            if not snapshot.status.is_terminal:
                raise
            logger.info(
                f"Signal '{signal_name}' not delivered: {execution_id} already "
                f"{snapshot.status.value}"
            )
            return
        logger.info(f"Sent signal '{signal_name}' to {execution_id}")

    async def await_result(self, execution_id: str) -> Any:
        """Block until ``execution_id`` finishes and return its result.

        Raises:
            TerminalStateError: If the execution failed, timed out, was
                canceled or was terminated.
        """
        handle = self._client.get_workflow_handle(execution_id)
        try:
            with engine_errors(f"Workflow {execution_id}"):
                return await handle.result()
        except WorkflowFailureError as exc:
            status = _terminal_status(exc.cause)
            raise TerminalStateError(execution_id, status.value, exc.cause) from exc

    async def describe_status(self, execution_id: str) -> ExecutionSnapshot:
        handle = self._client.get_workflow_handle(execution_id)
        with engine_errors(f"Workflow {execution_id}"):
            description = await handle.describe(rpc_timeout=DEFAULT_RPC_TIMEOUT)
        try:
            status = _STATUS_MAP[description.status]
        except KeyError:
            raise HelloTemporalError(
                f"Workflow {execution_id} reported unknown status {description.status!r}"
            ) from None
        return ExecutionSnapshot(
            execution_id=description.id,
            run_id=description.run_id,
            status=status,
        )

    async def query_stage(self, execution_id: str) -> str:
        """Return the workflow's current stage (``started``, ``signal_wait``...)."""
        handle = self._client.get_workflow_handle(execution_id)
        with engine_errors(f"Workflow {execution_id}"):
            return await handle.query(QUERY_STAGE, rpc_timeout=DEFAULT_RPC_TIMEOUT)
