"""
gatequeue: Condition-Gated Task Execution for asyncio

Queue deferred work behind named boolean conditions. A task runs once
every condition it names is true; setting a condition to true re-scans
the queue and runs whatever became eligible.

Design Pattern: Façade Pattern
This module re-exports the public surface so callers import from
`gatequeue` only.

Example:
    ```python
    import asyncio
    from gatequeue import TaskQueue, TaskTimeout

    async def fetch_profile():
        await asyncio.sleep(0.1)
        return {"name": "ada"}

    async def main():
        queue = TaskQueue(["login"])
        queue.set_condition("login", False)

        task = queue.create_task(fetch_profile, ["login"], strict=True, timeout_ms=500)
        task.success = lambda profile: print("profile", profile)
        task.fail = lambda error: print(
            "timed out" if isinstance(error, TaskTimeout) else f"failed: {error}"
        )

        queue.set_condition("login", True)
        await queue.join()

    asyncio.run(main())
    ```
"""

from gatequeue.config import QueueConfig
from gatequeue.core import (
    ConditionStore,
    ConfigError,
    InvalidTaskSpec,
    QueueError,
    TaskFunctionError,
    TaskTimeout,
    UnknownCondition,
)
from gatequeue.executor import (
    AttemptOutcome,
    ExecutionGuard,
    Executor,
    Failed,
    Scheduler,
    Succeeded,
    TimedOut,
    is_failure,
    is_success,
    race_timeout,
)
from gatequeue.models import AttemptState, OutcomeKind, Task, TaskSpec, TaskView
from gatequeue.queue import TaskQueue
from gatequeue.storage import InMemoryTaskStore, TaskStore

__version__ = "0.1.0"

__all__ = [
    # Entry point
    "TaskQueue",
    "QueueConfig",
    # Models
    "Task",
    "TaskSpec",
    "TaskView",
    "AttemptState",
    "OutcomeKind",
    # Components
    "ConditionStore",
    "TaskStore",
    "InMemoryTaskStore",
    "ExecutionGuard",
    "Executor",
    "Scheduler",
    "race_timeout",
    # Outcomes
    "AttemptOutcome",
    "Succeeded",
    "Failed",
    "TimedOut",
    "is_success",
    "is_failure",
    # Errors
    "QueueError",
    "UnknownCondition",
    "InvalidTaskSpec",
    "TaskTimeout",
    "TaskFunctionError",
    "ConfigError",
    # Metadata
    "__version__",
]
