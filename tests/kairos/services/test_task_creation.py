"""
Tests for task creation (kairos/services/tasks.py).

Tests cover:
- Plain tasks land in the inbox without a context
- Tags accepted as a string or a list, cleaned and deduplicated
- Habit and recurring fields stored only for their own kind
- Validation: blank title, bad enums, negative wait_days / frequency,
  recurring without a frequency, archived context
"""

from __future__ import annotations

from datetime import datetime

import pytest

from kairos.core.task_types import HabitDetails, HabitType, OneOffDetails, Priority, RecurringDetails, TaskType
from kairos.lib.exceptions import StateError, ValidationError
from kairos.services.contexts import archive_context
from kairos.services.tasks import create_task

NOW = datetime(2024, 3, 15, 10, 0, 0)


class TestCreatePlainTask:
    """TASK creation."""

    def test_defaults_to_inbox(self, repo, user) -> None:
        task = create_task(repo, user.id, "  Buy milk ")
        inbox = repo.find_inbox_context(user.id)
        assert inbox is not None
        assert task.context_id == inbox.id
        assert task.title == "Buy milk"
        assert task.priority is Priority.MEDIUM
        assert task.type is TaskType.TASK
        assert isinstance(task.details, OneOffDetails)

    def test_fields_stored(self, repo, user, context) -> None:
        task = create_task(
            repo,
            user.id,
            "File taxes",
            priority="HIGH",
            context_id=context.id,
            project="  Admin ",
            tags="next, admin, NEXT",
            due_date=NOW,
            wait_days=3,
        )
        assert task.context_id == context.id
        assert task.priority is Priority.HIGH
        assert task.project == "Admin"
        assert task.tags == ("next", "admin")
        assert task.due_date == NOW
        assert task.wait_days == 3

    def test_tags_from_list(self, repo, user, context) -> None:
        task = create_task(repo, user.id, "t", context_id=context.id, tags=[" Home ", "", "ERRAND"])
        assert task.tags == ("home", "errand")

    def test_blank_project_is_none(self, repo, user, context) -> None:
        assert create_task(repo, user.id, "t", context_id=context.id, project="   ").project is None

    def test_frequency_ignored_for_plain_task(self, repo, user, context) -> None:
        task = create_task(repo, user.id, "t", context_id=context.id, frequency=3)
        assert task.frequency is None


class TestCreateHabit:
    """HABIT creation."""

    def test_habit_fields(self, repo, user, context) -> None:
        task = create_task(
            repo,
            user.id,
            "Meditate",
            context_id=context.id,
            task_type=TaskType.HABIT,
            habit_type="WELLNESS",
            frequency=1,
        )
        assert isinstance(task.details, HabitDetails)
        assert task.details.habit_type is HabitType.WELLNESS
        assert task.details.frequency == 1
        assert task.details.streak == 0
        assert task.details.longest_streak == 0

    def test_habit_without_frequency_allowed(self, repo, user, context) -> None:
        task = create_task(repo, user.id, "Stretch", context_id=context.id, task_type="HABIT")
        assert task.frequency is None


class TestCreateRecurring:
    """RECURRING creation."""

    def test_next_due_mirrors_due_date(self, repo, user, context) -> None:
        task = create_task(
            repo, user.id, "Bins", context_id=context.id, task_type="RECURRING", frequency=7, due_date=NOW
        )
        assert isinstance(task.details, RecurringDetails)
        assert task.details.frequency == 7
        assert task.details.next_due == NOW

    @pytest.mark.parametrize("frequency", [None, 0])
    def test_requires_frequency(self, repo, user, context, frequency) -> None:
        with pytest.raises(ValidationError):
            create_task(repo, user.id, "Bins", context_id=context.id, task_type="RECURRING", frequency=frequency)
        assert repo.list_tasks_for_user(user.id) == []


class TestValidation:
    """Rejected input."""

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_blank_title(self, repo, user, title) -> None:
        with pytest.raises(ValidationError):
            create_task(repo, user.id, title)

    def test_unknown_type(self, repo, user) -> None:
        with pytest.raises(ValidationError):
            create_task(repo, user.id, "t", task_type="CHORE")

    def test_unknown_priority(self, repo, user) -> None:
        with pytest.raises(ValidationError):
            create_task(repo, user.id, "t", priority="URGENT")

    def test_negative_wait_days(self, repo, user) -> None:
        with pytest.raises(ValidationError):
            create_task(repo, user.id, "t", wait_days=-1)

    def test_negative_frequency(self, repo, user) -> None:
        with pytest.raises(ValidationError):
            create_task(repo, user.id, "t", task_type="HABIT", frequency=-1)

    def test_archived_context(self, repo, user, context) -> None:
        archive_context(repo, context.id)
        with pytest.raises(StateError):
            create_task(repo, user.id, "t", context_id=context.id)
