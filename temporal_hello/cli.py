"""Command line interface for the hello workflow client and worker."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer

from temporal_hello.client import HelloClient
from temporal_hello.config import HelloConfig, load_config
from temporal_hello.constants import DEFAULT_WORKFLOW_NAME, SIGNAL_UPDATE_NAME
from temporal_hello.contracts import (
    ExecutionSnapshot,
    ExecutionStatus,
    ScheduleDetails,
    ScheduleSpec,
    ScheduleSummary,
    StartedExecution,
)
from temporal_hello.errors import HelloTemporalError, ValidationError
from temporal_hello.schedules import ScheduleManager, validate_cron
from temporal_hello.worker import run_worker

app = typer.Typer(help="Client and worker for the Temporal hello workflow")

schedule_app = typer.Typer(help="Commands for managing schedules")
app.add_typer(schedule_app, name="schedule")

PROG = "temporal-hello"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
) -> None:
    """temporal-hello CLI entry point."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@contextmanager
def _exit_on_error() -> Iterator[None]:
    """Print library errors and exit with status 1."""
    try:
        yield
    except HelloTemporalError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _parse_minutes(value: str) -> int:
    try:
        minutes = int(value)
    except ValueError:
        raise ValidationError(
            f"Invalid minutes: {value}. Must be a positive integer"
        ) from None
    if minutes <= 0:
        raise ValidationError(f"Invalid minutes: {value}. Must be a positive integer")
    return minutes


def _echo_next_steps(workflow_id: str) -> None:
    typer.echo("Next steps:")
    typer.echo(f"   1. Check status: {PROG} status {workflow_id}")
    typer.echo(f"   2. Send signal:  {PROG} signal {workflow_id} NEW_NAME")
    typer.echo(f"   3. Get result:   {PROG} get {workflow_id}")


# ----------------------------------------------------------------------
# Workflow commands


async def _start(
    config: HelloConfig, name: str, workflow_id: Optional[str]
) -> StartedExecution:
    hello = await HelloClient.connect(config)
    return await hello.start_hello(name=name, execution_id=workflow_id)


@app.command("start")
def start(
    name: str = typer.Option(DEFAULT_WORKFLOW_NAME, help="Name to greet"),
    workflow_id: Optional[str] = typer.Option(
        None, "--id", help="Workflow ID (default: generated from the current time)"
    ),
) -> None:
    """
    Start a hello workflow that waits for an 'update-name' signal.

    Example:
        temporal-hello start
        temporal-hello start --name Ada
    """
    with _exit_on_error():
        config = load_config()
        started = asyncio.run(_start(config, name, workflow_id))

    typer.echo(
        f"Workflow started. WorkflowID={started.execution_id} RunID={started.run_id}"
    )
    typer.echo("Workflow is running and waiting for signal...")
    _echo_next_steps(started.execution_id)


async def _signal(config: HelloConfig, workflow_id: str, new_name: str) -> None:
    hello = await HelloClient.connect(config)
    await hello.signal(workflow_id, new_name)


@app.command("signal")
def signal(workflow_id: str, new_name: str) -> None:
    """Send the 'update-name' signal carrying NEW_NAME to WORKFLOW_ID."""
    with _exit_on_error():
        config = load_config()
        asyncio.run(_signal(config, workflow_id, new_name))

    typer.echo(
        f"Sent signal '{SIGNAL_UPDATE_NAME}' to workflow '{workflow_id}' "
        f"with value: {new_name}"
    )
    typer.echo(f"Use '{PROG} get {workflow_id}' to get the workflow result")


async def _get(config: HelloConfig, workflow_id: str) -> str:
    hello = await HelloClient.connect(config)
    return await hello.await_result(workflow_id)


@app.command("get")
def get(workflow_id: str) -> None:
    """Block until WORKFLOW_ID completes and print its result."""
    with _exit_on_error():
        config = load_config()
        typer.echo(f"Waiting for workflow '{workflow_id}' to complete...")
        result = asyncio.run(_get(config, workflow_id))

    typer.echo(f"Workflow completed. Result: {result}")


async def _status(config: HelloConfig, workflow_id: str) -> ExecutionSnapshot:
    hello = await HelloClient.connect(config)
    return await hello.describe_status(workflow_id)


@app.command("status")
def status(workflow_id: str) -> None:
    """Print the current status of WORKFLOW_ID without waiting."""
    with _exit_on_error():
        config = load_config()
        snapshot = asyncio.run(_status(config, workflow_id))

    typer.echo(f"Workflow Status: {snapshot.status.value}")
    typer.echo(f"   WorkflowID: {snapshot.execution_id}")
    typer.echo(f"   RunID: {snapshot.run_id}")
    if snapshot.status is ExecutionStatus.RUNNING:
        typer.echo("Workflow is running and waiting for a delay or signal...")
        typer.echo(f"Send signal: {PROG} signal {workflow_id} NEW_NAME")
    elif snapshot.status is ExecutionStatus.COMPLETED:
        typer.echo("Workflow has completed. Use 'get' command to see result.")
        typer.echo(f"Get result: {PROG} get {workflow_id}")


async def _delay(config: HelloConfig, minutes: int, name: str) -> StartedExecution:
    hello = await HelloClient.connect(config)
    return await hello.start_delay(minutes, name=name)


@app.command("delay", context_settings={"ignore_unknown_options": True})
def delay(
    minutes: str,
    name: str = typer.Argument(DEFAULT_WORKFLOW_NAME, help="Name to greet"),
) -> None:
    """
    Start a workflow that waits MINUTES, then waits for an 'update-name' signal.

    Example:
        temporal-hello delay 1 Grace
    """
    with _exit_on_error():
        config = load_config()
        delay_minutes = _parse_minutes(minutes)
        typer.echo(f"Will wait {delay_minutes} minute(s), then wait for signal...")
        started = asyncio.run(_delay(config, delay_minutes, name))

    typer.echo(
        f"Workflow started. WorkflowID={started.execution_id} RunID={started.run_id}"
    )
    typer.echo(f"Wait {delay_minutes} minute(s) for the delay to complete, then:")
    _echo_next_steps(started.execution_id)


@app.command("worker")
def worker(
    lifespan: Optional[float] = typer.Option(
        None, help="Seconds to run before stopping (default: run until interrupted)"
    ),
) -> None:
    """
    Run a worker hosting HelloWorkflow, ScheduleWorkflow and DelayWorkflow.

    Example:
        temporal-hello worker
        temporal-hello worker --lifespan 300
    """
    with _exit_on_error():
        config = load_config()
        typer.echo(f"Starting worker on task queue: {config.task_queue}")
        try:
            asyncio.run(run_worker(config, lifespan=lifespan))
        except KeyboardInterrupt:
            pass
    typer.echo("Worker stopped")


# ----------------------------------------------------------------------
# Schedule commands


async def _schedules(config: HelloConfig) -> ScheduleManager:
    return ScheduleManager(await HelloClient.connect(config))


async def _schedule_create(
    config: HelloConfig, schedule_id: str, cron: str, workflow_id: Optional[str]
) -> ScheduleSpec:
    manager = await _schedules(config)
    return await manager.create(schedule_id, cron, workflow_id=workflow_id)


@schedule_app.command("create")
def schedule_create(
    schedule_id: str,
    cron: str,
    workflow_id: Optional[str] = typer.Argument(None),
) -> None:
    """
    Create a schedule that starts ScheduleWorkflow on a cron cadence.

    Example:
        temporal-hello schedule create hourly-hello "0 * * * *"
    """
    with _exit_on_error():
        config = load_config()
        cron = validate_cron(cron)
        spec = asyncio.run(_schedule_create(config, schedule_id, cron, workflow_id))

    typer.echo(f"Schedule created: {spec.schedule_id}")
    typer.echo(f"   Cron: {spec.cron_expression}")
    typer.echo(f"   WorkflowID: {spec.workflow_id}")
    typer.echo(f"Use '{PROG} schedule list' to see all schedules")


async def _schedule_list(config: HelloConfig) -> List[ScheduleSummary]:
    manager = await _schedules(config)
    return [entry async for entry in manager.list()]


@schedule_app.command("list")
def schedule_list() -> None:
    """List the IDs of all schedules in the namespace."""
    with _exit_on_error():
        config = load_config()
        entries = asyncio.run(_schedule_list(config))

    typer.echo("Schedules:")
    if not entries:
        typer.echo("   No schedules found")
        return
    for count, entry in enumerate(entries, start=1):
        typer.echo(f"   {count}. ID: {entry.schedule_id}")


async def _schedule_pause(config: HelloConfig, schedule_id: str) -> None:
    manager = await _schedules(config)
    await manager.pause(schedule_id)


@schedule_app.command("pause")
def schedule_pause(schedule_id: str) -> None:
    """Pause SCHEDULE_ID. Pausing a paused schedule is not an error."""
    with _exit_on_error():
        config = load_config()
        asyncio.run(_schedule_pause(config, schedule_id))
    typer.echo(f"Schedule paused: {schedule_id}")


async def _schedule_resume(config: HelloConfig, schedule_id: str) -> None:
    manager = await _schedules(config)
    await manager.resume(schedule_id)


@schedule_app.command("resume")
def schedule_resume(schedule_id: str) -> None:
    """Resume SCHEDULE_ID. Resuming an active schedule is not an error."""
    with _exit_on_error():
        config = load_config()
        asyncio.run(_schedule_resume(config, schedule_id))
    typer.echo(f"Schedule resumed: {schedule_id}")


async def _schedule_delete(config: HelloConfig, schedule_id: str) -> None:
    manager = await _schedules(config)
    await manager.delete(schedule_id)


@schedule_app.command("delete")
def schedule_delete(schedule_id: str) -> None:
    """Delete SCHEDULE_ID."""
    with _exit_on_error():
        config = load_config()
        asyncio.run(_schedule_delete(config, schedule_id))
    typer.echo(f"Schedule deleted: {schedule_id}")


async def _schedule_describe(config: HelloConfig, schedule_id: str) -> ScheduleDetails:
    manager = await _schedules(config)
    return await manager.describe(schedule_id)


@schedule_app.command("describe")
def schedule_describe(schedule_id: str) -> None:
    """Show state, cron expression and target of SCHEDULE_ID."""
    with _exit_on_error():
        config = load_config()
        details = asyncio.run(_schedule_describe(config, schedule_id))

    typer.echo(f"Schedule: {details.schedule_id}")
    typer.echo(f"   State: {details.state.value}")
    if details.cron_expression:
        typer.echo(f"   Cron: {details.cron_expression}")
    if details.workflow_id:
        typer.echo(f"   WorkflowID: {details.workflow_id}")
    if details.task_queue:
        typer.echo(f"   TaskQueue: {details.task_queue}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
