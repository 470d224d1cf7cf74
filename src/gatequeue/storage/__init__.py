"""Task storage backends.

Provides:
    - TaskStore: Abstract interface
    - InMemoryTaskStore: Insertion-ordered in-memory store

Design: Adapter Pattern + Dependency Inversion (SOLID)
    The Scheduler depends on TaskStore, not on a concrete container.
"""

from gatequeue.storage.base import TaskStore
from gatequeue.storage.memory import InMemoryTaskStore

__all__ = [
    "TaskStore",
    "InMemoryTaskStore",
]
