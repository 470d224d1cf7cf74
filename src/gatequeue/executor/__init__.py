"""
Executor module - Runtime engine for condition-gated tasks.

This module contains the execution components:
- guard: ExecutionGuard, the per-id re-entrancy marker
- timer: race_timeout, the single-resolution timeout race
- outcome: AttemptOutcome state machine (Succeeded/Failed/TimedOut)
- instance: Executor, one attempt at a time
- scheduler: Scheduler, re-scans and task creation
"""

from gatequeue.executor.guard import ExecutionGuard
from gatequeue.executor.instance import Executor
from gatequeue.executor.outcome import (
    AttemptOutcome,
    Failed,
    Succeeded,
    TimedOut,
    is_failure,
    is_success,
)
from gatequeue.executor.scheduler import Scheduler
from gatequeue.executor.timer import race_timeout

__all__ = [
    "ExecutionGuard",
    "Executor",
    "Scheduler",
    "race_timeout",
    # AttemptOutcome state machine
    "AttemptOutcome",
    "Succeeded",
    "Failed",
    "TimedOut",
    "is_success",
    "is_failure",
]
