"""End-to-end workflow behaviour on the time-skipping test server."""

import asyncio
from datetime import timedelta

import pytest
from temporalio.service import RPCError

from temporal_hello.constants import (
    DELAY_WORKFLOW_NAME,
    SCHEDULE_WORKFLOW_NAME,
    WORKFLOW_NAME,
)
from temporal_hello.contracts import (
    DelayInput,
    ExecutionStatus,
    HelloInput,
    ScheduleInput,
)
from temporal_hello.errors import AlreadyExistsError, NotFoundError, TerminalStateError

DEFAULT_GREETING = "Hello, Temporal User from Temporal Worker on AWS!"


def greeting(name: str) -> str:
    return f"Hello, {name} from Temporal Worker on AWS!"


async def wait_for_stage(hello, execution_id: str, expected: str) -> str:
    """Poll the stage query until the worker reports ``expected``."""
    stage = None
    for _ in range(100):
        try:
            stage = await hello.query_stage(execution_id)
        except RPCError:
            stage = None
        if stage == expected:
            break
        await asyncio.sleep(0.05)
    return stage


@pytest.mark.asyncio
async def test_auto_start_completes_without_signal(hello):
    started = await hello.start_hello(name="Ada", auto_start=True, execution_id="auto-1")

    assert await hello.await_result(started.execution_id) == greeting("Ada")
    snapshot = await hello.describe_status(started.execution_id)
    assert snapshot.status is ExecutionStatus.COMPLETED


@pytest.mark.asyncio
async def test_auto_start_empty_name_uses_default(hello):
    started = await hello.start_hello(name="", auto_start=True, execution_id="auto-2")

    assert await hello.await_result(started.execution_id) == DEFAULT_GREETING


@pytest.mark.asyncio
async def test_schedule_workflow_runs_immediately(hello):
    started = await hello.start(
        SCHEDULE_WORKFLOW_NAME, ScheduleInput(name=""), execution_id="scheduled-1"
    )

    assert await hello.await_result(started.execution_id) == DEFAULT_GREETING
    assert await hello.query_stage(started.execution_id) == "completed"


@pytest.mark.asyncio
async def test_signal_overrides_name(hello):
    started = await hello.start_hello(execution_id="signal-1")
    assert started.run_id

    snapshot = await hello.describe_status("signal-1")
    assert snapshot.status is ExecutionStatus.RUNNING

    await hello.signal("signal-1", "Ada")
    assert await hello.await_result("signal-1") == greeting("Ada")


@pytest.mark.asyncio
async def test_signal_after_completion_is_ignored(hello):
    await hello.start_hello(name="Grace", execution_id="signal-late-1")
    await hello.signal("signal-late-1", "Ada")
    assert await hello.await_result("signal-late-1") == greeting("Ada")

    await hello.signal("signal-late-1", "Linus")

    snapshot = await hello.describe_status("signal-late-1")
    assert snapshot.status is ExecutionStatus.COMPLETED
    assert await hello.await_result("signal-late-1") == greeting("Ada")


@pytest.mark.asyncio
async def test_empty_signal_keeps_name(hello):
    await hello.start_hello(name="Grace", execution_id="signal-2")

    await hello.signal("signal-2", "")

    assert await hello.await_result("signal-2") == greeting("Grace")


@pytest.mark.asyncio
async def test_signal_wait_times_out_without_override(hello):
    await hello.start(
        WORKFLOW_NAME,
        HelloInput(name="Ada", signal_timeout_seconds=60),
        execution_id="signal-timeout-1",
    )

    assert await hello.await_result("signal-timeout-1") == greeting("Ada")


@pytest.mark.asyncio
async def test_delay_then_empty_signal(env, hello):
    started = await hello.start_delay(1, name="Grace", execution_id="delay-1")
    begin = await env.get_current_time()

    stage = await wait_for_stage(hello, started.execution_id, "delay_wait")
    assert stage == "delay_wait"
    assert (await hello.describe_status("delay-1")).status is ExecutionStatus.RUNNING

    await hello.signal("delay-1", "")

    assert await hello.await_result("delay-1") == greeting("Grace")
    assert await env.get_current_time() - begin >= timedelta(minutes=1)


@pytest.mark.asyncio
async def test_delay_precedes_signal_wait(env, hello):
    await hello.start_delay(2, name="Grace", execution_id="delay-2")

    await env.sleep(timedelta(minutes=1))
    assert await wait_for_stage(hello, "delay-2", "delay_wait") == "delay_wait"

    await env.sleep(timedelta(minutes=1, seconds=5))
    assert await wait_for_stage(hello, "delay-2", "signal_wait") == "signal_wait"

    await hello.signal("delay-2", "Ada")
    assert await hello.await_result("delay-2") == greeting("Ada")


@pytest.mark.asyncio
async def test_non_positive_delay_is_clamped_to_one_minute(env, hello):
    await hello.start(
        DELAY_WORKFLOW_NAME,
        DelayInput(delay_minutes=0, name="Grace"),
        execution_id="delay-3",
    )

    await env.sleep(timedelta(seconds=30))
    assert await wait_for_stage(hello, "delay-3", "delay_wait") == "delay_wait"

    await env.sleep(timedelta(seconds=45))
    assert await wait_for_stage(hello, "delay-3", "signal_wait") == "signal_wait"


@pytest.mark.asyncio
async def test_first_buffered_signal_wins(hello):
    await hello.start_delay(1, name="Grace", execution_id="delay-4")

    await hello.signal("delay-4", "Bob")
    await hello.signal("delay-4", "Carol")

    assert await hello.await_result("delay-4") == greeting("Bob")


@pytest.mark.asyncio
async def test_cancel_surfaces_terminal_state(env, hello):
    await hello.start_hello(execution_id="cancel-1")

    await env.client.get_workflow_handle("cancel-1").cancel()

    with pytest.raises(TerminalStateError) as exc_info:
        await hello.await_result("cancel-1")
    assert exc_info.value.status == ExecutionStatus.CANCELED.value
    snapshot = await hello.describe_status("cancel-1")
    assert snapshot.status is ExecutionStatus.CANCELED


@pytest.mark.asyncio
async def test_duplicate_start_raises_already_exists(hello):
    await hello.start_hello(execution_id="dup-1")

    with pytest.raises(AlreadyExistsError):
        await hello.start_hello(execution_id="dup-1")


@pytest.mark.asyncio
async def test_signal_unknown_execution_raises_not_found(hello):
    with pytest.raises(NotFoundError):
        await hello.signal("never-started", "Ada")


@pytest.mark.asyncio
async def test_concurrent_executions_are_independent(hello):
    await asyncio.gather(
        hello.start_hello(name="One", execution_id="many-1"),
        hello.start_hello(name="Two", execution_id="many-2"),
    )

    await hello.signal("many-2", "Second")
    await hello.signal("many-1", "")

    results = await asyncio.gather(
        hello.await_result("many-1"), hello.await_result("many-2")
    )
    assert results == [greeting("One"), greeting("Second")]
