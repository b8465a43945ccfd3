"""Workflow state machine driven directly, without a Temporal test server."""

import asyncio
import logging
from datetime import timedelta
from unittest.mock import AsyncMock

import pydantic
import pytest
from temporalio import workflow

from temporal_hello.contracts import DelayInput, HelloInput
from temporal_hello.workflows import (
    GreetingWorkflowBase,
    SignalOutcome,
    SuspensionPolicy,
)


def greeting(name: str) -> str:
    return f"Hello, {name} from Temporal Worker on AWS!"


@pytest.fixture
def waits(monkeypatch):
    """Replace the engine's wait primitive; returns the timeouts it was given.

    A wait whose condition is not yet satisfied times out immediately.
    """
    timeouts = []

    async def wait_condition(fn, *, timeout=None, **kwargs):
        timeouts.append(timeout)
        if not fn():
            raise asyncio.TimeoutError()

    monkeypatch.setattr(workflow, "wait_condition", wait_condition)
    monkeypatch.setattr(workflow, "logger", logging.getLogger("hello.workflow"))
    return timeouts


@pytest.mark.asyncio
async def test_signal_overrides_name(waits):
    wf = GreetingWorkflowBase()
    wf.update_name("Ada")

    assert await wf._execute("Grace", SuspensionPolicy.SIGNAL_WAIT) == greeting("Ada")
    assert wf.stage() == "completed"
    assert waits == [None]


@pytest.mark.asyncio
async def test_empty_signal_keeps_name(waits):
    wf = GreetingWorkflowBase()
    wf.update_name("")

    assert await wf._execute("Grace", SuspensionPolicy.SIGNAL_WAIT) == greeting("Grace")


@pytest.mark.asyncio
async def test_first_buffered_signal_wins(waits):
    wf = GreetingWorkflowBase()
    wf.update_name("Bob")
    wf.update_name("Carol")

    assert await wf._execute("Grace", SuspensionPolicy.SIGNAL_WAIT) == greeting("Bob")


@pytest.mark.asyncio
async def test_signal_after_consumption_is_dropped(waits):
    wf = GreetingWorkflowBase()
    wf.update_name("Ada")
    await wf._execute("Grace", SuspensionPolicy.SIGNAL_WAIT)

    wf.update_name("Linus")

    assert wf._pending == ["Ada"]


@pytest.mark.asyncio
async def test_signal_wait_timeout_keeps_name(waits):
    wf = GreetingWorkflowBase()

    result = await wf._wait_for_signal(timedelta(seconds=5))
    assert result.outcome is SignalOutcome.TIMED_OUT
    assert result.payload is None

    wf = GreetingWorkflowBase()
    assert await wf._execute(
        "Ada", SuspensionPolicy.SIGNAL_WAIT, signal_timeout_seconds=0.5
    ) == greeting("Ada")
    assert waits[-1] == timedelta(seconds=0.5)


@pytest.mark.asyncio
async def test_immediate_policy_never_waits(waits):
    wf = GreetingWorkflowBase()

    assert await wf._execute("", SuspensionPolicy.NONE) == greeting("Temporal User")
    assert waits == []


@pytest.mark.asyncio
async def test_delay_is_clamped_and_precedes_signal_wait(waits, monkeypatch):
    wf = GreetingWorkflowBase()
    stages = []

    async def sleep(seconds):
        stages.append((wf.stage(), seconds))
        wf.update_name("Ada")

    monkeypatch.setattr(asyncio, "sleep", AsyncMock(side_effect=sleep))

    result = await wf._execute(
        "Grace", SuspensionPolicy.DELAY_THEN_SIGNAL_WAIT, delay_minutes=0
    )

    assert stages == [("delay_wait", 60.0)]
    assert result == greeting("Ada")


@pytest.mark.parametrize("model", [HelloInput, DelayInput])
@pytest.mark.parametrize("timeout", [0, -1])
def test_signal_timeout_must_be_positive(model, timeout):
    fields = {"signal_timeout_seconds": timeout}
    if model is DelayInput:
        fields["delay_minutes"] = 1

    with pytest.raises(pydantic.ValidationError):
        model(**fields)
