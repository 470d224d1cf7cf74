"""
TaskStore protocol - Abstract interface for pending task registries.

Design Pattern: Adapter Pattern
TaskStore defines the target interface the Scheduler and Executor depend
on. InMemoryTaskStore adapts an insertion-ordered dict to it.

Design Principle: Dependency Inversion (SOLID)
The Scheduler depends on this abstraction, not on a concrete container,
so tests can substitute instrumented stores.

All methods are synchronous: the store is mutated only from the event
loop thread, between suspension points, so no lock is required.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from gatequeue.core.conditions import ConditionStore
from gatequeue.models import Task, TaskView


class TaskStore(ABC):
    """
    Insertion-ordered registry of pending tasks keyed by id.

    Contract:
    - Iteration order (snapshot(), list_all()) is insertion order.
    - insert() replaces an existing task with the same id; the replacement
      takes the tail position.
    - Snapshots are copies, safe to walk while tasks remove themselves.
    """

    @abstractmethod
    def insert(self, task: Task) -> Task | None:
        """
        Add a task at the tail.

        Returns:
            The task that was replaced, or None
        """

    @abstractmethod
    def remove(self, ids: Iterable[str] = ()) -> list[Task]:
        """
        Remove the listed ids. An empty iterable removes every task.

        Absent ids are ignored.

        Returns:
            Removed tasks
        """

    @abstractmethod
    def discard(self, task: Task) -> bool:
        """
        Remove this exact task object.

        A newer task that reused the id is left in place.

        Returns:
            True if the task was removed
        """

    @abstractmethod
    def get(self, task_id: str) -> Task | None:
        """Stored task for an id, or None."""

    @abstractmethod
    def snapshot(self) -> list[Task]:
        """Copy of the stored tasks in insertion order."""

    @abstractmethod
    def __len__(self) -> int: ...

    def contains(self, task: Task) -> bool:
        """True if this exact task object is stored under its id."""
        return self.get(task.id) is task

    def list_all(self) -> list[TaskView]:
        """Read-only views of stored tasks in insertion order."""
        return [task.view() for task in self.snapshot()]

    @staticmethod
    def all_satisfied(task: Task, conditions: ConditionStore) -> bool:
        """
        Eligibility check: every condition the task names is true.

        Pure: reads conditions, changes nothing. A task with no
        condition keys is always eligible.
        """
        return conditions.all_satisfied(task.condition_keys)
