"""
Timeout race for task attempts.

Two independent sources feed one single-resolution future:

1. the task function's awaitable, wrapped in a future
2. a loop.call_later() timer that fails the race with a timeout error

Whichever settles first resolves the race. The other is discarded:

- If the timer wins, the work future is NOT cancelled. Only the wait
  ends. Its eventual result or exception is retrieved (so asyncio does not
  warn about an unretrieved exception) and dropped.
- If the work wins, the timer handle is cancelled.

A coroutine is started eagerly, so work that finishes without suspending
settles the race before race_timeout() returns. Running work is held in
a module-level set until it settles: a coroutine parked on a future that
only it references would otherwise be garbage collected mid-flight.

The "already settled" check is settled.done(): set_result/set_exception
are only ever called on a pending future, so callbacks downstream fire at
most once per attempt no matter how the two sources interleave.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_running_work: set[asyncio.Future] = set()


def race_timeout(
    work: Awaitable[T],
    timeout_ms: int,
    on_timeout: Callable[[], BaseException],
) -> asyncio.Future[T]:
    """
    Race work against a timer.

    Must be called from a running event loop.

    Args:
        work: Awaitable produced by the task function
        timeout_ms: Milliseconds before the timer fires. 0 or less means no
            timer: the race is the work itself and may stay pending forever.
        on_timeout: Builds the exception the race fails with when the timer
            fires first

    Returns:
        Future resolving with the work's result, or failing with the work's
        exception or on_timeout(). A cancelled work future fails the race
        with CancelledError instead of cancelling it, so the awaiting
        coroutine can tell it apart from its own cancellation.
    """
    loop = asyncio.get_running_loop()
    if inspect.iscoroutine(work):
        work_future = asyncio.Task(work, loop=loop, eager_start=True)
    else:
        work_future = asyncio.ensure_future(work, loop=loop)
    settled: asyncio.Future[T] = loop.create_future()

    def _on_work_done(fut: asyncio.Future) -> None:
        _running_work.discard(fut)
        if fut.cancelled():
            if not settled.done():
                settled.set_exception(asyncio.CancelledError("task function was cancelled"))
            return

        error = fut.exception()
        if settled.done():
            if error is not None:
                logger.debug(f"Discarding late error from timed out work: {error!r}")
            else:
                logger.debug("Discarding late result from timed out work")
            return

        if error is not None:
            settled.set_exception(error)
        else:
            settled.set_result(fut.result())

    if work_future.done():
        _on_work_done(work_future)
        return settled

    _running_work.add(work_future)
    work_future.add_done_callback(_on_work_done)

    if timeout_ms <= 0:
        return settled

    def _on_timer() -> None:
        if not settled.done():
            settled.set_exception(on_timeout())

    handle = loop.call_later(timeout_ms / 1000, _on_timer)

    def _cancel_timer(_: Any) -> None:
        handle.cancel()

    settled.add_done_callback(_cancel_timer)
    return settled
