"""Error taxonomy surfaced by the client, schedule manager and CLI."""

from __future__ import annotations

from typing import Optional


class HelloTemporalError(Exception):
    """Base class for all errors raised by temporal_hello."""


class ConfigError(HelloTemporalError):
    """Required configuration is missing or invalid."""


class ValidationError(HelloTemporalError):
    """Command arguments were rejected before any remote call."""


class InvalidCronError(ValidationError):
    """A cron expression is malformed."""


class BackendConnectionError(HelloTemporalError, ConnectionError):
    """The orchestration backend could not be reached."""


class NotFoundError(HelloTemporalError):
    """The referenced execution or schedule does not exist."""


class AlreadyExistsError(HelloTemporalError):
    """An execution or schedule with the same ID already exists."""


class TerminalStateError(HelloTemporalError):
    """An awaited execution ended in a state other than Completed."""

    def __init__(
        self, execution_id: str, status: str, cause: Optional[BaseException] = None
    ) -> None:
        self.execution_id = execution_id
        self.status = status
        self.cause = cause
        message = f"Workflow {execution_id} ended with status {status}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
