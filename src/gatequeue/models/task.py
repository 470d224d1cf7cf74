"""
Task records.

- TaskSpec: what a caller asks for (validated and defaulted by create_task)
- Task: the live handle stored in the queue
- TaskView: read-only snapshot returned by get_tasks()

Design: Mutable Callback Slots
Task is a plain mutable record. success/fail/complete are ordinary
attributes the caller may reassign at any time after creation; the
executor reads them when an attempt settles, never earlier.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from gatequeue.core.errors import InvalidTaskSpec
from gatequeue.models.status import AttemptState

if TYPE_CHECKING:
    from gatequeue.executor.outcome import AttemptOutcome


def _noop(*_args: Any) -> None:
    return None


def normalize_condition_keys(keys: Iterable[str]) -> tuple[str, ...]:
    """
    Ordered, de-duplicated tuple of condition names.

    Raises:
        InvalidTaskSpec: If keys is a bare string or contains non-strings
    """
    if isinstance(keys, str):
        raise InvalidTaskSpec(
            f"condition_keys must be a sequence of names, not a string: {keys!r}"
        )
    try:
        keys = tuple(keys)
    except TypeError as e:
        raise InvalidTaskSpec(f"condition_keys is not iterable: {keys!r}") from e

    for key in keys:
        if not isinstance(key, str):
            raise InvalidTaskSpec(f"condition key must be a string, got {type(key).__name__}")
    return tuple(dict.fromkeys(keys))


@dataclass(frozen=True)
class TaskSpec:
    """
    Input to create_task().

    Attributes:
        func: Zero-argument callable. May be a coroutine function, return an
            awaitable, or return a plain value. Raising means failure.
        condition_keys: Conditions that must all be true before the task runs
        describe: Free-text label
        strict: Keep the task after an attempt instead of discarding it
        timeout_ms: Milliseconds before the attempt fails with TaskTimeout.
            None means "use the queue default", 0 means no timeout.
        id: Caller-supplied id. An existing task with this id is replaced.
        success: Called with the function's value
        fail: Called with the function's exception or a TaskTimeout
        complete: Called once after success or fail
    """

    func: Callable[[], Any]
    condition_keys: tuple[str, ...] = ()
    describe: str = ""
    strict: bool = False
    timeout_ms: int | None = None
    id: str | None = None
    success: Callable[[Any], Any] | None = None
    fail: Callable[[BaseException], Any] | None = None
    complete: Callable[[], Any] | None = None

    def validated(self, default_timeout_ms: int = 0) -> TaskSpec:
        """
        Return a copy with defaults applied and inputs checked.

        Raises:
            InvalidTaskSpec: If func is not callable, timeout_ms is negative,
                or condition_keys is malformed
        """
        if not callable(self.func):
            raise InvalidTaskSpec(f"func must be callable, got {type(self.func).__name__}")

        timeout_ms = default_timeout_ms if self.timeout_ms is None else self.timeout_ms
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int):
            raise InvalidTaskSpec(f"timeout_ms must be an int, got {timeout_ms!r}")
        if timeout_ms < 0:
            raise InvalidTaskSpec(f"timeout_ms must be >= 0, got {timeout_ms}")

        for slot in ("success", "fail", "complete"):
            value = getattr(self, slot)
            if value is not None and not callable(value):
                raise InvalidTaskSpec(f"{slot} must be callable, got {type(value).__name__}")

        task_id = None if self.id is None else str(self.id)
        if task_id == "":
            task_id = None

        return TaskSpec(
            func=self.func,
            condition_keys=normalize_condition_keys(self.condition_keys),
            describe=str(self.describe or ""),
            strict=bool(self.strict),
            timeout_ms=timeout_ms,
            id=task_id,
            success=self.success,
            fail=self.fail,
            complete=self.complete,
        )


@dataclass(frozen=True)
class TaskView:
    """Read-only snapshot of a pending task. No executable content."""

    id: str
    describe: str
    condition_keys: tuple[str, ...]


@dataclass(eq=False)
class Task:
    """
    Live handle to a queued task.

    Identity semantics (eq=False): two tasks are the same only if they are
    the same object, even when a replacement reuses an id.

    Usage:
        task = queue.create_task(
            fetch_profile, ["login"], strict=True, success=lambda profile: print(profile)
        )
        task.fail = lambda error: print("failed:", error)  # applies to pending attempts

        outcome = await task.run()  # manual re-run, strict tasks only
    """

    id: str
    func: Callable[[], Any]
    condition_keys: tuple[str, ...] = ()
    describe: str = ""
    strict: bool = False
    timeout_ms: int = 0
    success: Callable[[Any], Any] = _noop
    fail: Callable[[BaseException], Any] = _noop
    complete: Callable[[], Any] = _noop
    state: AttemptState = AttemptState.IDLE
    attempts: int = 0

    _runner: Callable[[Task], Awaitable[AttemptOutcome | None]] | None = field(
        default=None, init=False, repr=False
    )
    _settled: asyncio.Future | None = field(default=None, init=False, repr=False)
    _scheduled: asyncio.Future | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_spec(cls, task_id: str, spec: TaskSpec) -> Task:
        """Build a task from a validated spec."""
        return cls(
            id=task_id,
            func=spec.func,
            condition_keys=spec.condition_keys,
            describe=spec.describe,
            strict=spec.strict,
            timeout_ms=spec.timeout_ms or 0,
            success=spec.success or _noop,
            fail=spec.fail or _noop,
            complete=spec.complete or _noop,
        )

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    def view(self) -> TaskView:
        return TaskView(id=self.id, describe=self.describe, condition_keys=self.condition_keys)

    def bind(self, runner: Callable[[Task], Awaitable[AttemptOutcome | None]]) -> None:
        """Attach the attempt procedure used by run()."""
        self._runner = runner

    def mark_running(self, settled: asyncio.Future) -> None:
        """Enter RUNNING. settled resolves with the attempt's outcome."""
        self.state = AttemptState.RUNNING
        self.attempts += 1
        self._settled = settled

    def mark_idle(self) -> None:
        self.state = AttemptState.IDLE

    def schedule(self, attempt: asyncio.Future) -> None:
        """Remember a background attempt that may not have started yet."""
        self._scheduled = attempt

    async def run(self) -> AttemptOutcome | None:
        """
        Manually re-run this task, bypassing its conditions.

        Returns None without running anything when the task is no longer
        queued (non-strict after its attempt, or cleared) or when an attempt
        is already in flight.

        Raises:
            RuntimeError: If the task was never attached to a queue
        """
        if self._runner is None:
            raise RuntimeError(f"Task {self.id} is not attached to a queue")
        return await self._runner(self)

    async def wait(self) -> AttemptOutcome | None:
        """
        Wait for the most recent attempt to settle and return its outcome.

        Includes an attempt scheduled by create_task() that has not started
        yet; that wait yields None if the attempt turned out to be a no-op.
        Returns None if the task was never attempted. Cancelling the waiter
        does not cancel the attempt.
        """
        scheduled = self._scheduled
        if scheduled is not None and not scheduled.done():
            return await asyncio.shield(scheduled)

        settled = self._settled
        if settled is None:
            return None
        return await asyncio.shield(settled)
