"""Data models for queued tasks.

Design: Dependency-Free Models
These types depend only on gatequeue.core errors, never on storage or
executor modules, to keep imports acyclic.
"""

from gatequeue.models.status import AttemptState, OutcomeKind
from gatequeue.models.task import Task, TaskSpec, TaskView, normalize_condition_keys

__all__ = [
    "AttemptState",
    "OutcomeKind",
    "Task",
    "TaskSpec",
    "TaskView",
    "normalize_condition_keys",
]
