"""
Scheduler - Re-evaluates pending tasks when conditions change.

Design Principle: Single Responsibility (SOLID)
The Scheduler decides WHEN a task is attempted. It does not run attempts
itself (that's the Executor's job) and does not own condition values
(ConditionStore) or task storage (TaskStore).

Re-scan rules:
- Every condition set to true triggers a re-scan, including a redundant
  true-to-true set. A scan over tasks that are not eligible does nothing,
  so redundant scans are harmless.
- A scan walks a snapshot of the store in insertion order. Tasks removed
  mid-scan (non-strict auto-removal, clear()) are skipped when reached.
- Within one scan, task i+1 does not start until task i's attempt has
  settled. A hung task without a timeout stalls the rest of that scan.
- create_task() and Task.run() start attempts independently of scans;
  the ExecutionGuard is the only thing keeping two attempts of the same
  id apart.
"""

from __future__ import annotations

import asyncio
import logging

from gatequeue.config import QueueConfig
from gatequeue.core.conditions import ConditionStore
from gatequeue.executor.instance import Executor
from gatequeue.executor.outcome import AttemptOutcome
from gatequeue.models import Task, TaskSpec
from gatequeue.storage.base import TaskStore

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Orchestrates condition updates, re-scans, and task creation.

    Usage:
        store = InMemoryTaskStore()
        scheduler = Scheduler(ConditionStore(["a"]), store, Executor(store))

        scheduler.on_condition_set("a", False)
        task = scheduler.create_task(TaskSpec(func=work, condition_keys=("a",)))
        scan = scheduler.on_condition_set("a", True)
        await scan
    """

    def __init__(
        self,
        conditions: ConditionStore,
        store: TaskStore,
        executor: Executor | None = None,
        config: QueueConfig | None = None,
    ):
        self._conditions = conditions
        self._store = store
        self._executor = executor if executor is not None else Executor(store)
        self._config = config if config is not None else QueueConfig()
        self._next_index = self._config.first_id

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def config(self) -> QueueConfig:
        return self._config

    def on_condition_set(self, name: str, value: bool) -> asyncio.Future | None:
        """
        Set a condition and re-scan if it became (or stayed) true.

        Returns:
            The background re-scan, or None when value is false

        Raises:
            UnknownCondition: If name was never registered
            RuntimeError: If a re-scan is due but no event loop is running.
                The condition keeps its previous value.
        """
        if value and name in self._conditions:
            asyncio.get_running_loop()
        if not self._conditions.set(name, value):
            return None
        return self._executor.spawn(self.execute_all(), name=f"gatequeue-scan:{name}")

    async def execute_all(self) -> list[AttemptOutcome]:
        """
        Attempt every eligible, unguarded task, one at a time.

        Returns:
            Outcomes of the attempts that actually ran, in scan order
        """
        pending = self._store.snapshot()
        logger.debug(f"Re-scan over {len(pending)} pending tasks")

        outcomes: list[AttemptOutcome] = []
        for task in pending:
            if not self._store.contains(task):
                continue
            if self._executor.guard.is_guarded(task.id):
                continue
            if not self._store.all_satisfied(task, self._conditions):
                continue

            outcome = await self._executor.run(task)
            if outcome is not None:
                outcomes.append(outcome)

        return outcomes

    def create_task(self, spec: TaskSpec) -> Task:
        """
        Register a task and attempt it right away if it is eligible.

        The first attempt starts before this returns: func() has been called,
        and an attempt that settles without suspending has already fired
        its callbacks and applied retention. An attempt still pending runs
        on as a background asyncio task, so callbacks reassigned on the
        handle right after creation are the ones it fires. Use Task.wait()
        or join() to wait for it.

        Raises:
            InvalidTaskSpec: If the spec is malformed
            RuntimeError: If no event loop is running
        """
        asyncio.get_running_loop()

        spec = spec.validated(default_timeout_ms=self._config.default_timeout_ms)
        task_id = spec.id if spec.id is not None else self._allocate_id()

        task = Task.from_spec(task_id, spec)
        task.bind(self._executor.run)

        unknown = [key for key in task.condition_keys if key not in self._conditions]
        if unknown:
            logger.warning(
                f"Task {task_id} depends on unregistered conditions {unknown}; "
                "it will only run manually"
            )

        self._store.insert(task)
        logger.debug(f"Created task {task_id} (strict={task.strict}, keys={list(task.condition_keys)})")

        if self._store.all_satisfied(task, self._conditions):
            if self._executor.guard.is_guarded(task_id):
                logger.debug(
                    f"Task {task_id} replaced while its previous attempt is in flight; "
                    "first attempt skipped"
                )
            else:
                attempt = self._executor.spawn(
                    self._executor.run(task), name=f"gatequeue-attempt:{task_id}", eager=True
                )
                task.schedule(attempt)

        return task

    def _allocate_id(self) -> str:
        # Skip numbers a caller already used as an explicit id
        while self._store.get(str(self._next_index)) is not None:
            self._next_index += 1
        task_id = str(self._next_index)
        self._next_index += 1
        return task_id

    async def join(self) -> None:
        """
        Wait until no background scan, attempt, or async callback is running.

        Loops because settling work may spawn more (an async fail callback
        that re-runs its task, a condition set from a callback).
        """
        current = asyncio.current_task()
        while True:
            pending = [f for f in self._executor.background if f is not current]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
