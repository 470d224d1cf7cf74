"""
Re-entrancy guard for task attempts.

A task id is guarded from the moment an attempt starts until it settles.
While guarded, further attempts for the same id (a manual re-run racing a
re-scan, or two manual re-runs) are no-ops.

The guard is a plain set. Acquire and release run on the event loop
thread without awaiting in between, so they are atomic with respect to
every other coroutine.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ExecutionGuard:
    """Set of task ids with an attempt in flight."""

    def __init__(self):
        self._in_flight: set[str] = set()

    def try_acquire(self, task_id: str) -> bool:
        """
        Mark task_id as in flight.

        Returns:
            False if it already was (nothing changes), True otherwise
        """
        if task_id in self._in_flight:
            logger.debug(f"Task {task_id} already in flight")
            return False
        self._in_flight.add(task_id)
        return True

    def release(self, task_id: str) -> None:
        """Clear the guard. Releasing an unguarded id is a no-op."""
        self._in_flight.discard(task_id)

    def is_guarded(self, task_id: str) -> bool:
        return task_id in self._in_flight

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    def __repr__(self) -> str:
        return f"ExecutionGuard(in_flight={sorted(self._in_flight)!r})"
