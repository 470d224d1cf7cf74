"""
Executor - Runs a single task attempt.

Attempt state machine:

    IDLE → RUNNING → settled (Succeeded | Failed | TimedOut) → IDLE or removed

1. Entry: the attempt is a no-op (returns None, no callbacks) when the
   task is no longer the stored task for its id, or its id is guarded.
2. The task function is called and, when it returns an awaitable, raced
   against timeout_ms.
3. On settlement exactly one of success(value) / fail(error) fires, then
   complete() fires once.
4. Finally the guard is released and the retention policy applied:
   non-strict tasks are discarded from the store, strict tasks stay.

Callbacks:
Callbacks are called synchronously. If one returns an awaitable it is
scheduled as a background task and not awaited, so a fail callback may
itself `await task.run()` once this attempt has released the guard.
A callback raising is logged and never blocks complete(), guard release,
or retention.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from typing import Any

from uuid_extensions import uuid7

from gatequeue.core.errors import TaskTimeout
from gatequeue.executor.guard import ExecutionGuard
from gatequeue.executor.outcome import AttemptOutcome, Failed, Succeeded, TimedOut
from gatequeue.executor.timer import race_timeout
from gatequeue.models import Task
from gatequeue.storage.base import TaskStore

logger = logging.getLogger(__name__)


class Executor:
    """
    Execute task attempts against a store and a guard.

    The executor also owns the set of background asyncio tasks spawned on
    behalf of the queue (initial attempts, re-scans, async callbacks), so
    they are not garbage collected mid-flight and can be joined.

    Usage:
        executor = Executor(InMemoryTaskStore(), ExecutionGuard())
        outcome = await executor.run(task)
    """

    def __init__(self, store: TaskStore, guard: ExecutionGuard | None = None):
        self._store = store
        self._guard = guard if guard is not None else ExecutionGuard()

        # Track background tasks to prevent garbage collection
        # See: asyncio docs - "Save a reference to avoid task disappearing mid-execution"
        self._background: set[asyncio.Future] = set()

    @property
    def guard(self) -> ExecutionGuard:
        return self._guard

    @property
    def background(self) -> frozenset[asyncio.Future]:
        return frozenset(self._background)

    async def run(self, task: Task) -> AttemptOutcome | None:
        """
        Run one attempt of task.

        Returns:
            The attempt's outcome, or None when the attempt was a no-op
            (task no longer stored, or another attempt in flight)
        """
        if not self._store.contains(task):
            logger.debug(f"Task {task.id} is no longer queued; skipping attempt")
            return None

        if not self._guard.try_acquire(task.id):
            return None

        loop = asyncio.get_running_loop()
        settled = loop.create_future()
        task.mark_running(settled)

        attempt_id = str(uuid7())
        outcome: AttemptOutcome | None = None
        logger.debug(f"Task {task.id}: attempt {attempt_id} started (#{task.attempts})")

        try:
            outcome = await self._attempt(task, attempt_id)
            logger.debug(f"Task {task.id}: {outcome}")
            self._dispatch(task, outcome)
            return outcome
        finally:
            task.mark_idle()
            self._guard.release(task.id)
            if not task.strict:
                self._store.discard(task)

            if not settled.done():
                if outcome is None:
                    settled.cancel()
                else:
                    settled.set_result(outcome)

    async def _attempt(self, task: Task, attempt_id: str) -> AttemptOutcome:
        loop = asyncio.get_running_loop()
        started = loop.time()
        timeout = TaskTimeout(task.id, task.describe, task.timeout_ms)

        def elapsed_ms() -> float:
            return (loop.time() - started) * 1000

        try:
            value = task.func()
            if inspect.isawaitable(value):
                value = await race_timeout(value, task.timeout_ms, lambda: timeout)
        except asyncio.CancelledError as error:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            # The task function was cancelled, not this attempt
            return Failed(
                task_id=task.id, attempt_id=attempt_id, elapsed_ms=elapsed_ms(), error=error
            )
        except Exception as error:
            if error is timeout:
                logger.warning(f"Task {task.id} timed out after {task.timeout_ms}ms")
                return TimedOut(
                    task_id=task.id, attempt_id=attempt_id, elapsed_ms=elapsed_ms(), error=timeout
                )
            return Failed(task_id=task.id, attempt_id=attempt_id, elapsed_ms=elapsed_ms(), error=error)

        return Succeeded(task_id=task.id, attempt_id=attempt_id, elapsed_ms=elapsed_ms(), value=value)

    def _dispatch(self, task: Task, outcome: AttemptOutcome) -> None:
        """Fire success or fail, then complete. Each at most once."""
        if isinstance(outcome, Succeeded):
            self._invoke(task, "success", outcome.value)
        else:
            self._invoke(task, "fail", outcome.error)
        self._invoke(task, "complete")

    def _invoke(self, task: Task, slot: str, *args: Any) -> None:
        # Read the slot now: the caller may have reassigned it after creation
        callback = getattr(task, slot)
        try:
            result = callback(*args)
        except Exception:
            logger.exception(f"Task {task.id}: {slot} callback raised")
            return

        if inspect.isawaitable(result):
            self.spawn(result, name=f"gatequeue-{slot}:{task.id}")

    def spawn(
        self, awaitable: Awaitable[Any], *, name: str | None = None, eager: bool = False
    ) -> asyncio.Future:
        """
        Schedule awaitable on the running loop and keep a reference to it.

        With eager=True a coroutine starts running before spawn() returns
        and keeps going until its first real suspension. If it never
        suspends, the returned future is already done.

        Raises:
            RuntimeError: If no event loop is running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise

        if inspect.iscoroutine(awaitable):
            if eager:
                future = asyncio.Task(awaitable, loop=loop, name=name, eager_start=True)
            else:
                future = loop.create_task(awaitable, name=name)
        else:
            future = asyncio.ensure_future(awaitable, loop=loop)

        self._background.add(future)
        future.add_done_callback(self._on_background_done)
        return future

    def _on_background_done(self, future: asyncio.Future) -> None:
        self._background.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            name = future.get_name() if isinstance(future, asyncio.Task) else repr(future)
            logger.error(f"Background {name} raised: {error!r}", exc_info=error)

    def __repr__(self) -> str:
        return f"Executor(store={self._store!r}, in_flight={len(self._guard)})"
