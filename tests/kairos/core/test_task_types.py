"""Tests for task variants and snapshots (kairos/core/task_types.py)."""

from __future__ import annotations

import dataclasses

import pytest

from kairos.core.task_types import (
    HabitDetails,
    OneOffDetails,
    Priority,
    RecurringDetails,
    TaskType,
    details_matches_type,
)


class TestEnums:
    """String-valued enums persist as their names."""

    def test_values(self) -> None:
        assert Priority("HIGH") is Priority.HIGH
        assert TaskType("RECURRING") is TaskType.RECURRING

    def test_unknown_value_raises(self) -> None:
        with pytest.raises(ValueError):
            TaskType("CHORE")


class TestTaskSnapshot:
    """TaskSnapshot behaviour."""

    def test_frequency_for_habit_and_recurring(self, make_task) -> None:
        assert make_task(TaskType.HABIT, details=HabitDetails(frequency=3)).frequency == 3
        assert make_task(TaskType.RECURRING, details=RecurringDetails(frequency=14)).frequency == 14

    def test_frequency_none_for_one_off(self, make_task) -> None:
        assert make_task().frequency is None

    def test_is_frozen(self, make_task) -> None:
        task = make_task()
        with pytest.raises(dataclasses.FrozenInstanceError):
            task.completed = True  # type: ignore[misc]

    def test_with_changes_returns_copy(self, make_task) -> None:
        task = make_task()
        changed = task.with_changes(completed=True)
        assert changed.completed is True
        assert task.completed is False


class TestDetailsMatchesType:
    """details_matches_type."""

    @pytest.mark.parametrize(
        ("task_type", "details", "expected"),
        [
            (TaskType.TASK, OneOffDetails(), True),
            (TaskType.HABIT, HabitDetails(), True),
            (TaskType.RECURRING, RecurringDetails(), True),
            (TaskType.TASK, HabitDetails(), False),
            (TaskType.HABIT, RecurringDetails(), False),
        ],
    )
    def test_pairs(self, task_type, details, expected) -> None:
        assert details_matches_type(task_type, details) is expected
