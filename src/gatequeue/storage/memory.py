"""In-memory task storage.

Design Pattern: Adapter Pattern
InMemoryTaskStore adapts an insertion-ordered dict to the TaskStore
interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gatequeue.models import Task
from gatequeue.storage.base import TaskStore

logger = logging.getLogger(__name__)


class InMemoryTaskStore(TaskStore):
    """Dict-backed task store.

    Python dicts preserve insertion order, which gives the re-scan order
    for free. Replacing an id deletes the old key first so the new task
    lands at the tail.

    Usage:
        store = InMemoryTaskStore()
        store.insert(task)
        [view.id for view in store.list_all()]
    """

    def __init__(self):
        # Storage: {task_id: Task}
        self._tasks: dict[str, Task] = {}

    def __repr__(self) -> str:
        return f"InMemoryTaskStore(tasks={len(self._tasks)})"

    def insert(self, task: Task) -> Task | None:
        replaced = self._tasks.pop(task.id, None)
        if replaced is not None:
            logger.info(f"Replacing task {task.id}")
        self._tasks[task.id] = task
        return replaced

    def remove(self, ids: Iterable[str] = ()) -> list[Task]:
        ids = list(ids)
        if not ids:
            removed = list(self._tasks.values())
            self._tasks.clear()
            if removed:
                logger.info(f"Cleared {len(removed)} tasks")
            return removed

        removed = []
        for task_id in ids:
            task = self._tasks.pop(task_id, None)
            if task is not None:
                removed.append(task)
                logger.info(f"Removed task {task_id}")
        return removed

    def discard(self, task: Task) -> bool:
        if self._tasks.get(task.id) is not task:
            return False
        del self._tasks[task.id]
        logger.debug(f"Discarded task {task.id}")
        return True

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def snapshot(self) -> list[Task]:
        return list(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)
