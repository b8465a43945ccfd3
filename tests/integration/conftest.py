import uuid

import pytest
import pytest_asyncio
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.testing import WorkflowEnvironment

from temporal_hello.client import HelloClient
from temporal_hello.worker import build_worker


@pytest_asyncio.fixture
async def env():
    try:
        environment = await WorkflowEnvironment.start_time_skipping(
            data_converter=pydantic_data_converter
        )
    except Exception as exc:  # test server download or launch failed
        pytest.skip(f"Temporal test server unavailable: {exc}")
    try:
        yield environment
    finally:
        await environment.shutdown()


@pytest_asyncio.fixture
async def hello(env):
    task_queue = f"hello-test-{uuid.uuid4()}"
    async with build_worker(env.client, task_queue):
        yield HelloClient(env.client, task_queue)
