"""Worker process hosting the hello workflows and activity."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from temporalio.client import Client
from temporalio.worker import Worker
from temporalio.worker.workflow_sandbox import (
    SandboxedWorkflowRunner,
    SandboxRestrictions,
)

from .activities import say_hello
from .client import HelloClient
from .config import HelloConfig
from .workflows import WORKFLOWS

logger = logging.getLogger(__name__)

# Payload models and pure helpers are shared with the sandbox instead of
# being re-imported for every workflow run.
_RESTRICTIONS = SandboxRestrictions.default.with_passthrough_modules(
    "pydantic",
    "temporal_hello.constants",
    "temporal_hello.contracts",
    "temporal_hello.greeting",
)


def build_worker(client: Client, task_queue: str) -> Worker:
    """Return a worker with every hello workflow type and activity registered."""
    return Worker(
        client,
        task_queue=task_queue,
        workflows=WORKFLOWS,
        activities=[say_hello],
        workflow_runner=SandboxedWorkflowRunner(restrictions=_RESTRICTIONS),
    )


async def run_worker(config: HelloConfig, lifespan: Optional[float] = None) -> None:
    """Connect and poll ``config.task_queue``.

    Args:
        config: Connection settings.
        lifespan: Seconds to run before shutting down. Runs until cancelled
            when ``None``.
    """

    hello = await HelloClient.connect(config)
    worker = build_worker(hello.temporal, config.task_queue)
    logger.info(f"Worker polling task queue {config.task_queue}")
    if lifespan is None:
        await worker.run()
    else:
        async with worker:
            await asyncio.sleep(lifespan)
    logger.info("Worker stopped")
