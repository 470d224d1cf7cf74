"""
Pytest configuration and fixtures for gatequeue tests.

Provides reusable fixtures for queues, stores, callback recorders and
task functions with controllable settlement.
"""

import asyncio
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

import pytest
from hypothesis import strategies as st

from gatequeue import ConditionStore, InMemoryTaskStore, Task, TaskQueue

# Condition names used throughout the suite
CONDITIONS = ["a", "b", "c"]


@pytest.fixture
async def queue() -> AsyncGenerator[TaskQueue, None]:
    """Queue with conditions a, b, c (all true) and automatic cleanup."""
    q = TaskQueue(CONDITIONS)
    yield q
    q.clear()
    await asyncio.wait_for(q.join(), timeout=2.0)


@pytest.fixture
def conditions() -> ConditionStore:
    return ConditionStore(CONDITIONS)


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@dataclass
class CallbackRecorder:
    """Records callback invocations in call order."""

    events: list[tuple[str, Any]] = field(default_factory=list)

    def success(self, value: Any) -> None:
        self.events.append(("success", value))

    def fail(self, error: BaseException) -> None:
        self.events.append(("fail", error))

    def complete(self) -> None:
        self.events.append(("complete", None))

    def attach(self, task: Task) -> Task:
        task.success = self.success
        task.fail = self.fail
        task.complete = self.complete
        return task

    @property
    def slots(self) -> dict[str, Any]:
        """Keyword arguments wiring this recorder in at creation time."""
        return {"success": self.success, "fail": self.fail, "complete": self.complete}

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]

    def payloads(self, kind: str) -> list[Any]:
        return [payload for k, payload in self.events if k == kind]


@pytest.fixture
def recorder() -> CallbackRecorder:
    return CallbackRecorder()


class Gate:
    """
    Task function whose settlement the test controls.

    Every call returns a fresh coroutine that waits until the gate is
    opened (or failed), and counts the call.
    """

    def __init__(self, value: Any = "ok"):
        self.value = value
        self.calls = 0
        self._event = asyncio.Event()
        self._error: BaseException | None = None

    async def __call__(self) -> Any:
        self.calls += 1
        await self._event.wait()
        if self._error is not None:
            raise self._error
        return self.value

    def open(self) -> None:
        self._event.set()

    def fail(self, error: BaseException) -> None:
        self._error = error
        self._event.set()


@pytest.fixture
def gate() -> Gate:
    return Gate()


async def settle() -> None:
    """Let already-scheduled callbacks and short tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)


# Hypothesis strategies for property-based testing

condition_names = st.text(
    min_size=1, max_size=12, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"))
)
