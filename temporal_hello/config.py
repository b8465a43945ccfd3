"""Configuration loading for the client and worker processes."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from .errors import ConfigError

logger = logging.getLogger(__name__)

_ENV_FIELDS = {
    "address": "TEMPORAL_ADDRESS",
    "namespace": "TEMPORAL_NAMESPACE",
    "api_key": "TEMPORAL_API_KEY",
    "task_queue": "TEMPORAL_TASK_QUEUE",
}
_REQUIRED = tuple(_ENV_FIELDS)


class HelloConfig(BaseModel):
    """Connection settings for Temporal Cloud."""

    address: str
    namespace: str
    api_key: str
    task_queue: str
    tls: bool = True


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_env_file(search_dirs: Optional[list[Path]] = None) -> Optional[Path]:
    """Load the first ``.env`` found in the working directory or its parent.

    Variables already present in the environment are left untouched.
    """

    cwd = Path.cwd()
    for directory in search_dirs or [cwd, cwd.parent]:
        env_path = directory / ".env"
        if env_path.is_file():
            load_dotenv(env_path, override=False)
            logger.debug(f"Loaded .env from {env_path}")
            return env_path
    logger.debug("No .env file found, using environment variables only")
    return None


def load_config(path: Optional[str] = None, use_env_file: bool = True) -> HelloConfig:
    """Build the process configuration.

    Args:
        path: Optional YAML file. Falls back to ``TEMPORAL_HELLO_CONFIG`` or
            ``config.yaml`` in the current directory when present.
        use_env_file: Whether to read a ``.env`` file before the environment.

    Raises:
        ConfigError: If any of address, namespace, API key or task queue is
            missing after all sources are applied.
    """

    config_path = path or os.getenv("TEMPORAL_HELLO_CONFIG", "config.yaml")
    data: dict = {}
    if os.path.exists(config_path):
        with open(config_path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        data.update(loaded)

    if use_env_file:
        load_env_file()

    for field, env_name in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value:
            data[field] = value
    env_tls = os.getenv("TEMPORAL_TLS")
    if env_tls:
        data["tls"] = _parse_bool(env_tls)

    present = {field: bool(data.get(field)) for field in _REQUIRED}
    if not all(present.values()):
        summary = ", ".join(f"{field}={ok}" for field, ok in present.items())
        raise ConfigError(f"Missing required Temporal configuration: {summary}")

    return HelloConfig(**data)
