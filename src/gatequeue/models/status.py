"""Status enumerations for task attempt tracking."""

from enum import Enum


class AttemptState(Enum):
    """Execution state of a task.

    Lifecycle:
        IDLE → RUNNING → IDLE (strict) or removed (non-strict)

    Design: No SUCCEEDED/FAILED State
        A task that settled goes straight back to IDLE. How the attempt
        ended is reported by its AttemptOutcome, not stored on the task.
    """

    IDLE = "IDLE"
    """No attempt in flight."""

    RUNNING = "RUNNING"
    """An attempt holds the execution guard for this task."""

    @property
    def is_running(self) -> bool:
        return self == AttemptState.RUNNING

    def __str__(self) -> str:
        return self.value


class OutcomeKind(Enum):
    """How a single attempt settled."""

    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_failure(self) -> bool:
        """Timeouts count as failures."""
        return self != OutcomeKind.SUCCEEDED

    def __str__(self) -> str:
        return self.value
