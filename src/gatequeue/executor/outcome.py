"""
Attempt outcomes.

Every attempt that actually runs ends in exactly one of three states:

- Succeeded: the task function returned (or its awaitable resolved)
- Failed: the task function raised
- TimedOut: timeout_ms elapsed first

**Design Pattern**: State Machine using Union types
AttemptOutcome is a union of frozen dataclasses, so callers can use
structural pattern matching instead of inspecting flags.

Example:
    ```python
    outcome = await task.run()

    match outcome:
        case Succeeded(value=value):
            print(f"Task returned {value}")
        case TimedOut(error=error):
            print(f"Gave up after {error.timeout_ms}ms")
        case Failed(error=error):
            print(f"Task raised {error!r}")
        case None:
            print("Task was not run")
    ```
"""

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar

from gatequeue.core.errors import TaskFunctionError, TaskTimeout
from gatequeue.models.status import OutcomeKind

__all__ = [
    "Succeeded",
    "Failed",
    "TimedOut",
    "AttemptOutcome",
    "is_success",
    "is_failure",
]

R = TypeVar("R")


@dataclass(frozen=True)
class _Settled:
    """
    Fields shared by every outcome.

    Attributes:
        task_id: Id of the task that ran
        attempt_id: Unique id of this attempt (uuid7, time-ordered)
        elapsed_ms: Wall time between start and settlement
    """

    task_id: str
    attempt_id: str
    elapsed_ms: float


@dataclass(frozen=True)
class Succeeded(_Settled, Generic[R]):
    """Task function produced a value."""

    value: R

    kind: ClassVar[OutcomeKind] = OutcomeKind.SUCCEEDED

    def unwrap(self) -> R:
        return self.value

    def __str__(self) -> str:
        return f"Succeeded(task={self.task_id}, value={self.value!r})"


@dataclass(frozen=True)
class Failed(_Settled):
    """Task function raised. error is the original exception."""

    error: BaseException

    kind: ClassVar[OutcomeKind] = OutcomeKind.FAILED

    def unwrap(self):
        """
        Raises:
            TaskFunctionError: Always, chained from the original error
        """
        raise TaskFunctionError(self.task_id, self.error) from self.error

    def __str__(self) -> str:
        return f"Failed(task={self.task_id}, error={type(self.error).__name__}: {self.error})"


@dataclass(frozen=True)
class TimedOut(_Settled):
    """Timeout fired before the task function settled."""

    error: TaskTimeout

    kind: ClassVar[OutcomeKind] = OutcomeKind.TIMED_OUT

    def unwrap(self):
        """
        Raises:
            TaskTimeout: Always
        """
        raise self.error

    def __str__(self) -> str:
        return f"TimedOut(task={self.task_id}, after={self.error.timeout_ms}ms)"


AttemptOutcome = Succeeded[R] | Failed | TimedOut


def is_success(outcome: AttemptOutcome | None) -> bool:
    """True if the attempt ran and succeeded."""
    return isinstance(outcome, Succeeded)


def is_failure(outcome: AttemptOutcome | None) -> bool:
    """True if the attempt ran and failed or timed out."""
    return isinstance(outcome, (Failed, TimedOut))
