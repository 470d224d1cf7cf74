"""Tests for ConditionStore."""

import pytest

from gatequeue import ConditionStore, UnknownCondition


def test_registered_conditions_start_true(conditions):
    assert conditions.snapshot() == {"a": True, "b": True, "c": True}


def test_duplicate_names_collapse():
    store = ConditionStore(["x", "y", "x"])

    assert store.names == ("x", "y")
    assert len(store) == 2


def test_set_false_does_not_request_rescan(conditions):
    assert conditions.set("a", False) is False
    assert conditions.get("a") is False


def test_set_true_requests_rescan(conditions):
    conditions.set("a", False)

    assert conditions.set("a", True) is True
    assert conditions.get("a") is True


def test_redundant_true_set_still_requests_rescan(conditions):
    """Setting an already-true condition to true again triggers a re-scan."""
    assert conditions.get("b") is True
    assert conditions.set("b", True) is True


def test_unknown_condition_raises_and_changes_nothing(conditions):
    conditions.set("a", False)
    before = conditions.snapshot()

    with pytest.raises(UnknownCondition) as exc_info:
        conditions.set("missing", True)

    assert exc_info.value.name == "missing"
    assert conditions.snapshot() == before
    assert "missing" not in conditions


def test_unregistered_name_reads_as_unsatisfied(conditions):
    assert conditions.get("missing") is False
    assert conditions.all_satisfied(["a", "missing"]) is False


def test_all_satisfied_empty_keys_is_true(conditions):
    conditions.set("a", False)
    assert conditions.all_satisfied([]) is True


def test_all_satisfied_requires_every_key(conditions):
    conditions.set("c", False)

    assert conditions.all_satisfied(["a", "b"]) is True
    assert conditions.all_satisfied(["a", "c"]) is False


def test_snapshot_is_a_copy(conditions):
    snap = conditions.snapshot()
    snap["a"] = False

    assert conditions.get("a") is True


def test_values_are_coerced_to_bool(conditions):
    conditions.set("a", 0)
    assert conditions.get("a") is False
    assert conditions.set("a", "yes") is True
    assert conditions.get("a") is True
