"""Activities registered on the hello worker."""

from __future__ import annotations

from temporalio import activity

from .constants import ACTIVITY_NAME
from .greeting import format_greeting


@activity.defn(name=ACTIVITY_NAME)
async def say_hello(name: str) -> str:
    """Return the greeting for ``name``."""
    result = format_greeting(name)
    activity.logger.info(f"SayHello produced: {result}")
    return result
