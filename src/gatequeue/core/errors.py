"""
Error types for gatequeue.

From Dave Cheney: "Errors are values"
Each failure mode gets its own exception type carrying the context a
caller needs, instead of a generic Exception with a formatted message.

Taxonomy:
- UnknownCondition: caller used a condition name that was never registered.
  Raised synchronously from set_condition(), never retried.
- InvalidTaskSpec: create_task() received input it cannot run.
- TaskTimeout: a task function did not settle within timeout_ms.
  Delivered through the task's fail callback, not raised.
- TaskFunctionError: wraps the original error of a failed attempt when a
  caller unwraps an outcome.
- ConfigError: configuration could not be parsed.
"""

from __future__ import annotations

__all__ = [
    "QueueError",
    "UnknownCondition",
    "InvalidTaskSpec",
    "TaskTimeout",
    "TaskFunctionError",
    "ConfigError",
]


class QueueError(Exception):
    """Base class for all gatequeue errors."""

    pass


class UnknownCondition(QueueError):  # noqa: N818
    """
    Condition name was not registered when the queue was constructed.

    Attributes:
        name: The offending condition name
    """

    def __init__(self, name: str):
        super().__init__(f"Unknown condition: {name!r}")
        self.name = name


class InvalidTaskSpec(QueueError):  # noqa: N818
    """Task definition rejected by create_task()."""

    pass


class TaskTimeout(QueueError):  # noqa: N818
    """
    Task function did not settle within its timeout.

    Passed to the task's fail callback in place of a function error, so
    callers tell the two apart with isinstance(error, TaskTimeout).

    Attributes:
        task_id: Id of the timed out task
        describe: Task description
        timeout_ms: Timeout that elapsed, in milliseconds
    """

    def __init__(self, task_id: str, describe: str, timeout_ms: int):
        label = f" ({describe})" if describe else ""
        super().__init__(f"Task {task_id}{label} timed out after {timeout_ms}ms")
        self.task_id = task_id
        self.describe = describe
        self.timeout_ms = timeout_ms


class TaskFunctionError(QueueError):
    """
    Task function raised during an attempt.

    The original exception is available as __cause__ and as `error`.

    Attributes:
        task_id: Id of the failed task
        error: Exception raised by the task function
    """

    def __init__(self, task_id: str, error: BaseException):
        super().__init__(f"Task {task_id} failed: {type(error).__name__}: {error}")
        self.task_id = task_id
        self.error = error


class ConfigError(QueueError):
    """Queue configuration value is invalid."""

    pass
