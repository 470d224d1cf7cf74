"""
TaskQueue - Public entry point.

Design Pattern: Façade Pattern
TaskQueue wires a ConditionStore, an InMemoryTaskStore, an ExecutionGuard,
an Executor and a Scheduler together behind a handful of methods.

Example:
    ```python
    queue = TaskQueue(["login", "profile_loaded"])
    queue.set_condition("login", False)

    task = queue.create_task(
        func=sync_settings,
        condition_keys=["login"],
        strict=True,
        timeout_ms=1200,
        describe="sync settings",
    )
    task.success = lambda result: print("synced", result)
    task.fail = lambda error: print("failed", error)

    queue.set_condition("login", True)  # re-scan: sync_settings runs
    await queue.join()
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any

from gatequeue.config import QueueConfig
from gatequeue.core.conditions import ConditionStore
from gatequeue.executor.guard import ExecutionGuard
from gatequeue.executor.instance import Executor
from gatequeue.executor.scheduler import Scheduler
from gatequeue.models import Task, TaskSpec, TaskView, normalize_condition_keys
from gatequeue.storage.base import TaskStore
from gatequeue.storage.memory import InMemoryTaskStore


class TaskQueue:
    """
    Condition-gated task queue.

    All condition names are registered at construction with value True.
    Must be driven from a single asyncio event loop.
    """

    def __init__(
        self,
        condition_names: Iterable[str] = (),
        config: QueueConfig | None = None,
        store: TaskStore | None = None,
    ):
        """
        Args:
            condition_names: Conditions to register; duplicates collapse
            config: Queue settings (defaults to QueueConfig())
            store: Task store (defaults to a fresh InMemoryTaskStore)
        """
        self._conditions = ConditionStore(normalize_condition_keys(condition_names))
        self._store = store if store is not None else InMemoryTaskStore()
        self._guard = ExecutionGuard()
        self._executor = Executor(self._store, self._guard)
        self._scheduler = Scheduler(self._conditions, self._store, self._executor, config)

    def set_condition(self, name: str, value: bool) -> asyncio.Future | None:
        """
        Set a condition's value.

        Setting any condition to True re-scans pending tasks in the
        background; the returned future resolves to the list of outcomes of
        that scan. Setting False never runs anything.

        Raises:
            UnknownCondition: If name was not registered (nothing changes)
            RuntimeError: If value is True and no event loop is running
                (nothing changes)
        """
        return self._scheduler.on_condition_set(name, value)

    def create_task(
        self,
        func: Callable[[], Any],
        condition_keys: Iterable[str] = (),
        *,
        describe: str = "",
        strict: bool = False,
        timeout_ms: int | None = None,
        id: str | None = None,  # noqa: A002
        success: Callable[[Any], Any] | None = None,
        fail: Callable[[BaseException], Any] | None = None,
        complete: Callable[[], Any] | None = None,
    ) -> Task:
        """
        Queue a task and attempt it right away when its conditions hold.

        Args:
            func: Zero-argument callable; sync, async, or awaitable-returning
            condition_keys: Conditions that must all be true
            describe: Free-text label
            strict: Keep the task after each attempt
            timeout_ms: Attempt timeout; None uses the queue default, 0 disables
            id: Explicit id; an existing task with this id is replaced
            success: Called with the function's value
            fail: Called with the raised exception or a TaskTimeout
            complete: Called after success or fail

        Returns:
            Live task handle. Its callbacks may be reassigned while the
            first attempt is pending. A function that settles without
            suspending has already been attempted when this returns, so pass
            its callbacks here.

        Raises:
            InvalidTaskSpec: If the arguments are malformed
        """
        spec = TaskSpec(
            func=func,
            condition_keys=condition_keys,
            describe=describe,
            strict=strict,
            timeout_ms=timeout_ms,
            id=id,
            success=success,
            fail=fail,
            complete=complete,
        )
        return self._scheduler.create_task(spec)

    def add_task(
        self,
        func: Callable[[], Any],
        condition_keys: Iterable[str] = (),
        *,
        id: str | None = None,  # noqa: A002
        strict: bool = False,
        describe: str = "",
    ) -> str:
        """Shorthand for create_task() that returns only the task id."""
        return self.create_task(
            func, condition_keys, id=id, strict=strict, describe=describe
        ).id

    def clear(self, ids: Iterable[str] = ()) -> None:
        """
        Remove the listed tasks, or every task when ids is empty.

        Absent ids are ignored. An attempt already in flight still settles
        and fires its callbacks, but the task will not be scheduled again.
        """
        if isinstance(ids, str):
            ids = [ids]
        self._store.remove(ids)

    def check_conditions(self, condition_keys: Iterable[str]) -> bool:
        """True iff every named condition is currently true."""
        return self._conditions.all_satisfied(normalize_condition_keys(condition_keys))

    def get_conditions(self) -> dict[str, bool]:
        """Snapshot of all condition values."""
        return self._conditions.snapshot()

    def get_tasks(self) -> list[TaskView]:
        """Snapshot of pending tasks in insertion order."""
        return self._store.list_all()

    def get_task(self, task_id: str) -> Task | None:
        """Live handle of a pending task, or None."""
        return self._store.get(task_id)

    async def execute_all(self):
        """Run a re-scan now and wait for it. Returns the outcomes."""
        return await self._scheduler.execute_all()

    async def join(self) -> None:
        """Wait for every background scan, attempt and async callback."""
        await self._scheduler.join()

    @property
    def in_flight(self) -> frozenset[str]:
        """Ids of tasks with an attempt in flight."""
        return self._guard.in_flight

    @property
    def config(self) -> QueueConfig:
        return self._scheduler.config

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return (
            f"TaskQueue(conditions={self._conditions.snapshot()!r}, "
            f"tasks={len(self._store)}, in_flight={len(self._guard)})"
        )
