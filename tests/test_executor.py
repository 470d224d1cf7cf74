"""
Tests for Executor: one attempt, its callbacks, guard and retention.
"""

import asyncio
import logging

import pytest

from gatequeue import (
    AttemptState,
    ExecutionGuard,
    Executor,
    Failed,
    InMemoryTaskStore,
    Succeeded,
    Task,
    TaskFunctionError,
    TaskTimeout,
    TimedOut,
)

from conftest import settle


class Boom(Exception):
    pass


def _queued(store: InMemoryTaskStore, executor: Executor, func, **kwargs) -> Task:
    task = Task(id=kwargs.pop("id", "t"), func=func, **kwargs)
    task.bind(executor.run)
    store.insert(task)
    return task


@pytest.fixture
def executor(store) -> Executor:
    return Executor(store, ExecutionGuard())


@pytest.mark.asyncio
async def test_success_fires_success_then_complete(store, executor, recorder):
    async def work():
        return "ok"

    task = recorder.attach(_queued(store, executor, work, strict=True))

    outcome = await executor.run(task)

    assert isinstance(outcome, Succeeded)
    assert outcome.value == "ok"
    assert outcome.unwrap() == "ok"
    assert recorder.events == [("success", "ok"), ("complete", None)]


@pytest.mark.asyncio
async def test_function_error_reaches_fail_unwrapped(store, executor, recorder):
    error = Boom("bad")

    async def work():
        raise error

    task = recorder.attach(_queued(store, executor, work))

    outcome = await executor.run(task)

    assert isinstance(outcome, Failed)
    assert recorder.kinds == ["fail", "complete"]
    assert recorder.payloads("fail") == [error]
    with pytest.raises(TaskFunctionError) as exc_info:
        outcome.unwrap()
    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_sync_function_value_and_error(store, executor, recorder):
    task = recorder.attach(_queued(store, executor, lambda: 7, id="sync", strict=True))
    assert isinstance(await executor.run(task), Succeeded)

    def explode():
        raise Boom("sync")

    failing = _queued(store, executor, explode, id="sync-fail")
    outcome = await executor.run(failing)

    assert isinstance(outcome, Failed)
    assert recorder.payloads("success") == [7]


@pytest.mark.asyncio
async def test_timeout_fails_with_timeout_indicator(store, executor, recorder, gate):
    task = recorder.attach(
        _queued(store, executor, gate, strict=True, timeout_ms=100, describe="slow")
    )
    loop = asyncio.get_running_loop()
    started = loop.time()

    outcome = await executor.run(task)
    elapsed = loop.time() - started

    assert isinstance(outcome, TimedOut)
    assert 0.09 <= elapsed < 0.6
    assert recorder.kinds == ["fail", "complete"]
    error = recorder.payloads("fail")[0]
    assert isinstance(error, TaskTimeout)
    assert (error.task_id, error.describe, error.timeout_ms) == ("t", "slow", 100)

    # The late settlement of the function is discarded
    gate.open()
    await settle()
    assert recorder.kinds == ["fail", "complete"]


@pytest.mark.asyncio
async def test_non_strict_removed_after_attempt(store, executor):
    async def work():
        raise Boom()

    task = _queued(store, executor, work)

    await executor.run(task)

    assert store.get("t") is None


@pytest.mark.asyncio
async def test_strict_kept_after_failure(store, executor):
    async def work():
        raise Boom()

    task = _queued(store, executor, work, strict=True)

    await executor.run(task)

    assert store.get("t") is task
    assert task.state is AttemptState.IDLE


@pytest.mark.asyncio
async def test_attempt_on_removed_task_is_noop(store, executor, recorder):
    task = recorder.attach(_queued(store, executor, lambda: 1, strict=True))
    store.remove(["t"])

    assert await executor.run(task) is None
    assert recorder.events == []
    assert task.attempts == 0


@pytest.mark.asyncio
async def test_guard_held_during_attempt(store, executor, gate):
    task = _queued(store, executor, gate, strict=True)

    first = asyncio.create_task(executor.run(task))
    await settle()

    assert executor.guard.is_guarded("t")
    assert task.state is AttemptState.RUNNING
    assert await executor.run(task) is None

    gate.open()
    assert isinstance(await first, Succeeded)
    assert not executor.guard.is_guarded("t")
    assert gate.calls == 1


@pytest.mark.asyncio
async def test_raising_fail_callback_still_completes_and_releases(store, executor, caplog):
    completed = []

    def bad_fail(error):
        raise RuntimeError("callback bug")

    async def work():
        raise Boom()

    task = _queued(store, executor, work, strict=True)
    task.fail = bad_fail
    task.complete = lambda: completed.append(True)

    with caplog.at_level(logging.ERROR):
        outcome = await executor.run(task)

    assert isinstance(outcome, Failed)
    assert completed == [True]
    assert not executor.guard.is_guarded("t")
    assert "fail callback raised" in caplog.text


@pytest.mark.asyncio
async def test_raising_complete_callback_still_applies_retention(store, executor):
    def bad_complete():
        raise RuntimeError("callback bug")

    task = _queued(store, executor, lambda: 1, complete=bad_complete)

    await executor.run(task)

    assert store.get("t") is None
    assert not executor.guard.is_guarded("t")


@pytest.mark.asyncio
async def test_callbacks_read_at_settlement(store, executor, gate):
    task = _queued(store, executor, gate, strict=True)
    first = asyncio.create_task(executor.run(task))
    await settle()

    seen = []
    task.success = seen.append
    gate.open()
    await first

    assert seen == ["ok"]


@pytest.mark.asyncio
async def test_async_callback_runs_in_background(store, executor):
    ran = asyncio.Event()

    async def on_success(value):
        await asyncio.sleep(0)
        ran.set()

    task = _queued(store, executor, lambda: 1, success=on_success)

    await executor.run(task)
    assert len(executor.background) == 1

    await asyncio.wait_for(ran.wait(), timeout=1.0)
    await settle()
    assert executor.background == frozenset()


@pytest.mark.asyncio
async def test_task_wait_returns_latest_outcome(store, executor, gate):
    task = _queued(store, executor, gate, strict=True)
    assert await task.wait() is None

    running = asyncio.create_task(executor.run(task))
    await settle()
    gate.open()

    outcome = await task.wait()
    assert outcome is await running
    assert task.attempts == 1


@pytest.mark.asyncio
async def test_outcome_carries_attempt_metadata(store, executor):
    task = _queued(store, executor, lambda: None, strict=True)

    first = await executor.run(task)
    second = await executor.run(task)

    assert first.task_id == second.task_id == "t"
    assert first.attempt_id != second.attempt_id
    assert first.elapsed_ms >= 0
    assert task.attempts == 2


@pytest.mark.asyncio
async def test_spawn_without_loop_closes_coroutine(store):
    executor = Executor(store)

    async def never():
        pass

    coro = never()

    def spawn_from_thread():
        with pytest.raises(RuntimeError):
            executor.spawn(coro)

    await asyncio.to_thread(spawn_from_thread)
    assert coro.cr_frame is None


def test_unbound_task_run_raises():
    task = Task(id="lonely", func=lambda: None)

    with pytest.raises(RuntimeError, match="not attached"):
        asyncio.run(task.run())


@pytest.mark.asyncio
async def test_eager_spawn_runs_until_first_suspension(store):
    executor = Executor(store)
    steps = []

    async def work():
        steps.append("started")
        await asyncio.sleep(0)
        steps.append("resumed")

    future = executor.spawn(work(), name="eager", eager=True)

    assert steps == ["started"]
    await future
    assert steps == ["started", "resumed"]
