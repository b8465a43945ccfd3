"""Deterministic helpers shared by the workflows and the activity."""

from __future__ import annotations

from typing import Optional

from .constants import DEFAULT_WORKFLOW_NAME, GREETING_TEMPLATE, MIN_DELAY_MINUTES


def resolve_name(name: Optional[str]) -> str:
    """Return ``name`` or the default when it is empty."""
    return name or DEFAULT_WORKFLOW_NAME


def apply_name_override(current: str, payload: Optional[str]) -> str:
    """Apply an ``update-name`` payload.

    An empty payload means "no override" and keeps ``current``.
    """
    if payload:
        return payload
    return current


def format_greeting(name: Optional[str]) -> str:
    return GREETING_TEMPLATE.format(name=resolve_name(name))


def clamp_delay_minutes(minutes: int) -> int:
    """Non-positive delays fall back to one minute."""
    if minutes <= 0:
        return MIN_DELAY_MINUTES
    return minutes
