"""
Queue configuration.

QueueConfig is immutable. Builder-style methods return a new config, and
from_env() reads overrides from the environment:

    GATEQUEUE_DEFAULT_TIMEOUT_MS   timeout for tasks that do not set one
    GATEQUEUE_FIRST_ID             first value of the sequential id counter

Usage:
    config = QueueConfig.from_env().with_default_timeout(5000)
    queue = TaskQueue(["login"], config=config)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from gatequeue.core.errors import ConfigError

ENV_DEFAULT_TIMEOUT_MS = "GATEQUEUE_DEFAULT_TIMEOUT_MS"
ENV_FIRST_ID = "GATEQUEUE_FIRST_ID"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class QueueConfig:
    """
    Settings shared by every task of a queue.

    Attributes:
        default_timeout_ms: Applied when create_task() gets no timeout_ms.
            0 means no timeout.
        first_id: First value of the sequential task id counter
    """

    default_timeout_ms: int = 0
    first_id: int = 0

    def __post_init__(self):
        if self.default_timeout_ms < 0:
            raise ConfigError(f"default_timeout_ms must be >= 0, got {self.default_timeout_ms}")
        if self.first_id < 0:
            raise ConfigError(f"first_id must be >= 0, got {self.first_id}")

    @classmethod
    def from_env(cls) -> QueueConfig:
        """
        Build a config from GATEQUEUE_* environment variables.

        Unset or empty variables keep their defaults.

        Raises:
            ConfigError: If a variable is not a non-negative integer
        """
        return cls(
            default_timeout_ms=_env_int(ENV_DEFAULT_TIMEOUT_MS, 0),
            first_id=_env_int(ENV_FIRST_ID, 0),
        )

    def with_default_timeout(self, timeout_ms: int) -> QueueConfig:
        return replace(self, default_timeout_ms=timeout_ms)

    def with_first_id(self, first_id: int) -> QueueConfig:
        return replace(self, first_id=first_id)
