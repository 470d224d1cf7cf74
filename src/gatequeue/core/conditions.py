"""
Condition registry.

Holds the current boolean value of every named condition a queue knows
about. Conditions are registered once, at construction, and never removed.

The store knows nothing about tasks: tasks reference conditions by name,
and eligibility is answered by all_satisfied().
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gatequeue.core.errors import UnknownCondition

logger = logging.getLogger(__name__)


class ConditionStore:
    """
    Named boolean flags with registration-time validation.

    Usage:
        conditions = ConditionStore(["login", "is_admin"])
        conditions.set("login", False)
        conditions.all_satisfied(["login"])  # False
    """

    def __init__(self, names: Iterable[str] = ()):
        self._values: dict[str, bool] = {}
        for name in names:
            self.register(name)

    def register(self, name: str) -> None:
        """Add a condition with initial value True. Re-registering is a no-op."""
        if name in self._values:
            return
        self._values[name] = True
        logger.debug(f"Registered condition {name!r}")

    def get(self, name: str) -> bool:
        """Current value; unregistered names read as not satisfied."""
        return self._values.get(name, False)

    def set(self, name: str, value: bool) -> bool:
        """
        Store a new value for a registered condition.

        Args:
            name: Registered condition name
            value: New value

        Returns:
            True when a re-scan of pending tasks should follow. That is the
            case for every true value, including setting an already-true
            condition to true again.

        Raises:
            UnknownCondition: If name was never registered (nothing changes)
        """
        if name not in self._values:
            raise UnknownCondition(name)

        value = bool(value)
        previous = self._values[name]
        self._values[name] = value
        if previous != value:
            logger.debug(f"Condition {name!r}: {previous} -> {value}")
        return value

    def all_satisfied(self, keys: Iterable[str]) -> bool:
        """True iff every key is currently true. Empty keys are always satisfied."""
        return all(self.get(key) for key in keys)

    def snapshot(self) -> dict[str, bool]:
        """Copy of all condition values."""
        return dict(self._values)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConditionStore({self._values!r})"
