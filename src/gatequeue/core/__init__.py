"""
Core types for gatequeue.

- ConditionStore: named boolean flags gating task execution
- Error types raised or delivered by the queue
"""

from gatequeue.core.conditions import ConditionStore
from gatequeue.core.errors import (
    ConfigError,
    InvalidTaskSpec,
    QueueError,
    TaskFunctionError,
    TaskTimeout,
    UnknownCondition,
)

__all__ = [
    "ConditionStore",
    "QueueError",
    "UnknownCondition",
    "InvalidTaskSpec",
    "TaskTimeout",
    "TaskFunctionError",
    "ConfigError",
]
