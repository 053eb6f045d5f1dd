"""
Tests for the Habit Recurrence State Machine (kairos/services/habits.py).

Tests cover:
- On-time rule (due date first, then frequency window, first completion)
- Streak reset law and longest-streak monotonicity
- Next due date (None without frequency, negative rejected)
- Day-after availability
- HabitTracker.complete / uncomplete against the SQLite repository
- Uncompleting without history is a silent no-op
- replay_habit_log rebuilds the same streak as live completions
- Habit status labels and display per habit type
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from kairos.core.task_types import HabitDetails, HabitType, Priority, TaskType
from kairos.lib.dates import add_days, end_of_day, start_of_day
from kairos.lib.exceptions import NotFoundError, ValidationError
from kairos.services.habits import (
    HabitAvailability,
    HabitTracker,
    calculate_habit_streak,
    calculate_next_habit_due_date,
    get_habit_display,
    get_habit_status,
    habit_availability,
    is_completion_on_time,
    is_habit_completion_on_time,
    replay_habit_log,
    should_habit_show_as_available,
)

NOW = datetime(2024, 3, 15, 10, 0, 0)


def _habit(make_task, **details_fields):
    fields = {}
    for name in ("completed", "completed_at", "due_date"):
        if name in details_fields:
            fields[name] = details_fields.pop(name)
    return make_task(TaskType.HABIT, details=HabitDetails(**details_fields), **fields)


def _create_habit(repo, context, frequency: int | None = 7, **fields):
    values = {
        "user_id": context.user_id,
        "context_id": context.id,
        "title": "Stretch",
        "priority": Priority.MEDIUM.value,
        "type": TaskType.HABIT.value,
        "habit_type": HabitType.STREAK.value,
        "frequency": frequency,
        "streak": 0,
        "longest_streak": 0,
    }
    values.update(fields)
    return repo.create_task(values)


# =============================================================================
# Pure rules
# =============================================================================


class TestOnTimeRule:
    """is_completion_on_time / is_habit_completion_on_time."""

    def test_first_completion_is_on_time(self) -> None:
        assert is_completion_on_time(NOW) is True

    def test_due_date_inclusive_to_end_of_day(self) -> None:
        due = datetime(2024, 3, 15, 8, 0)
        assert is_completion_on_time(end_of_day(due), due_date=due) is True
        assert is_completion_on_time(start_of_day(add_days(due, 1)), due_date=due) is False

    def test_frequency_window_from_prior_completion_day(self) -> None:
        prior = datetime(2024, 3, 1, 15, 0)
        assert is_completion_on_time(datetime(2024, 3, 3, 23, 59), frequency=2, prior_completed_at=prior)
        assert not is_completion_on_time(datetime(2024, 3, 4, 0, 0), frequency=2, prior_completed_at=prior)

    def test_due_date_wins_over_frequency(self) -> None:
        prior = datetime(2024, 3, 1)
        due = datetime(2024, 3, 20)
        assert is_completion_on_time(
            datetime(2024, 3, 19), due_date=due, frequency=2, prior_completed_at=prior
        )

    def test_uses_last_completed_before_completed_at(self, make_task) -> None:
        task = _habit(
            make_task,
            frequency=2,
            last_completed=add_days(NOW, -1),
            completed_at=add_days(NOW, -10),
        )
        assert is_habit_completion_on_time(task, NOW) is True


class TestStreak:
    """calculate_habit_streak."""

    def test_on_time_increments(self, make_task) -> None:
        task = _habit(make_task, frequency=7, streak=3, longest_streak=3, completed_at=add_days(NOW, -2))
        update = calculate_habit_streak(task, NOW)
        assert (update.streak, update.longest_streak, update.was_on_time) == (4, 4, True)

    def test_late_resets_to_one(self, make_task) -> None:
        task = _habit(make_task, frequency=7, streak=3, longest_streak=5, completed_at=add_days(NOW, -8))
        update = calculate_habit_streak(task, NOW)
        assert update.streak == 1
        assert update.longest_streak == 5
        assert update.was_on_time is False

    @pytest.mark.parametrize("old_streak", [0, 1, 4, 50])
    def test_late_always_one(self, make_task, old_streak: int) -> None:
        task = _habit(make_task, frequency=1, streak=old_streak, longest_streak=old_streak,
                      due_date=add_days(NOW, -3))
        assert calculate_habit_streak(task, NOW).streak == 1

    @pytest.mark.parametrize("old_streak", [0, 1, 4, 50])
    def test_on_time_always_plus_one(self, make_task, old_streak: int) -> None:
        task = _habit(make_task, frequency=1, streak=old_streak, longest_streak=old_streak, due_date=NOW)
        assert calculate_habit_streak(task, NOW).streak == old_streak + 1


class TestNextDueDate:
    """calculate_next_habit_due_date."""

    def test_adds_frequency(self) -> None:
        assert calculate_next_habit_due_date(3, NOW) == add_days(NOW, 3)

    @pytest.mark.parametrize("frequency", [None, 0])
    def test_no_frequency(self, frequency) -> None:
        assert calculate_next_habit_due_date(frequency, NOW) is None

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            calculate_next_habit_due_date(-1, NOW)


class TestAvailability:
    """Day-after availability rule."""

    def test_incomplete_is_available(self, make_task) -> None:
        assert habit_availability(_habit(make_task), NOW) is HabitAvailability.AVAILABLE

    def test_completed_today_is_waiting(self, make_task) -> None:
        task = _habit(make_task, completed=True, completed_at=NOW.replace(hour=7))
        assert habit_availability(task, NOW.replace(hour=23, minute=59)) is HabitAvailability.COMPLETED_WAITING

    def test_available_from_next_midnight(self, make_task) -> None:
        task = _habit(make_task, completed=True, completed_at=NOW.replace(hour=23, minute=30))
        next_midnight = start_of_day(add_days(NOW, 1))
        assert habit_availability(task, next_midnight) is HabitAvailability.AVAILABLE
        assert habit_availability(task, next_midnight - timedelta(microseconds=1)) is (
            HabitAvailability.COMPLETED_WAITING
        )

    def test_frequency_does_not_delay_availability(self, make_task) -> None:
        task = _habit(make_task, frequency=30, completed=True, completed_at=add_days(NOW, -1))
        assert should_habit_show_as_available(task, NOW) is True

    def test_completed_without_timestamp_is_waiting(self, make_task) -> None:
        task = _habit(make_task, completed=True)
        assert should_habit_show_as_available(task, NOW) is False

    def test_non_habit_uses_completed_flag(self, make_task) -> None:
        assert should_habit_show_as_available(make_task(), NOW) is True
        done = make_task(completed=True, completed_at=add_days(NOW, -5))
        assert should_habit_show_as_available(done, NOW) is False


# =============================================================================
# HabitTracker
# =============================================================================


class TestHabitTrackerComplete:
    """HabitTracker.complete."""

    def test_first_completion(self, repo, context) -> None:
        habit = _create_habit(repo, context)
        result = HabitTracker(repo).complete(habit, NOW)

        assert result.streak == 1
        assert result.longest_streak == 1
        assert result.was_on_time is True
        assert result.next_due_date == add_days(NOW, 7)

        stored = repo.find_task(habit.id)
        assert stored.completed is True
        assert stored.completed_at == NOW
        assert stored.details.last_completed == NOW
        assert stored.due_date == add_days(NOW, 7)
        assert repo.list_habit_completions(habit.id) == [NOW]

    def test_on_time_then_late(self, repo, context) -> None:
        tracker = HabitTracker(repo)
        habit = _create_habit(repo, context)

        first = tracker.complete(habit, NOW)
        second = tracker.complete(first.task, add_days(NOW, 5))
        late = tracker.complete(second.task, add_days(NOW, 14))

        assert second.streak == 2
        assert late.streak == 1
        assert late.was_on_time is False
        assert late.longest_streak == 2
        assert len(repo.list_habit_completions(habit.id)) == 3

    def test_late_completion_after_eight_days(self, repo, context) -> None:
        habit = _create_habit(
            repo, context,
            streak=3, longest_streak=3,
            completed=True, completed_at=add_days(NOW, -8), last_completed=add_days(NOW, -8),
        )
        result = HabitTracker(repo).complete(habit, NOW)
        assert result.streak == 1
        assert result.longest_streak == 3

    def test_without_frequency_clears_due_date(self, repo, context) -> None:
        habit = _create_habit(repo, context, frequency=None, due_date=NOW)
        result = HabitTracker(repo).complete(habit, NOW)
        assert result.next_due_date is None
        assert repo.find_task(habit.id).due_date is None

    def test_missing_task(self, repo) -> None:
        with pytest.raises(NotFoundError):
            HabitTracker(repo).complete(None, NOW)

    def test_rejects_non_habit(self, repo, make_task) -> None:
        with pytest.raises(ValidationError):
            HabitTracker(repo).complete(make_task(), NOW)


class TestHabitTrackerUncomplete:
    """HabitTracker.uncomplete."""

    def test_without_history_is_noop(self, repo, context) -> None:
        habit = _create_habit(repo, context)
        assert HabitTracker(repo).uncomplete(habit) is None

        stored = repo.find_task(habit.id)
        assert stored.details.streak == 0
        assert stored.completed is False

    def test_reverts_to_previous_completion(self, repo, context) -> None:
        tracker = HabitTracker(repo)
        habit = _create_habit(repo, context)
        first = tracker.complete(habit, NOW)
        second = tracker.complete(first.task, add_days(NOW, 3))

        reverted = tracker.uncomplete(second.task)

        assert reverted.removed_completion == add_days(NOW, 3)
        assert reverted.previous_completion == NOW
        assert reverted.streak == 1
        stored = repo.find_task(habit.id)
        assert stored.completed is False
        assert stored.completed_at == NOW
        assert stored.details.last_completed == NOW
        assert stored.due_date == add_days(NOW, 7)
        assert stored.details.longest_streak == 2
        assert repo.list_habit_completions(habit.id) == [NOW]

    def test_last_completion_removed(self, repo, context) -> None:
        tracker = HabitTracker(repo)
        habit = _create_habit(repo, context, due_date=NOW)
        done = tracker.complete(habit, NOW)
        assert done.task.due_date == add_days(NOW, 7)

        reverted = tracker.uncomplete(done.task)

        assert reverted.previous_completion is None
        stored = repo.find_task(habit.id)
        assert stored.details.streak == 0
        assert stored.completed_at is None
        assert stored.due_date == NOW

    def test_undated_habit_stays_undated(self, repo, context) -> None:
        tracker = HabitTracker(repo)
        habit = _create_habit(repo, context)
        done = tracker.complete(habit, NOW)

        tracker.uncomplete(done.task)

        assert repo.find_task(habit.id).due_date is None

    def test_streak_floors_at_zero(self, repo, context) -> None:
        habit = _create_habit(repo, context, streak=0)
        repo.append_habit_completion(habit.id, NOW)
        reverted = HabitTracker(repo).uncomplete(habit)
        assert reverted.streak == 0

    def test_longest_streak_never_decreases(self, repo, context) -> None:
        tracker = HabitTracker(repo)
        task = _create_habit(repo, context)
        for day in range(4):
            task = tracker.complete(task, add_days(NOW, day)).task
        longest = task.details.longest_streak
        for _ in range(4):
            reverted = tracker.uncomplete(task)
            task = reverted.task
            assert task.details.longest_streak == longest

    def test_missing_task(self, repo) -> None:
        with pytest.raises(NotFoundError):
            HabitTracker(repo).uncomplete(None)


# =============================================================================
# Log replay
# =============================================================================


class TestReplayHabitLog:
    """replay_habit_log."""

    def test_empty(self) -> None:
        summary = replay_habit_log([], 7)
        assert (summary.streak, summary.longest_streak, summary.last_completed, summary.total_completions) == (
            0, 0, None, 0,
        )

    def test_streak_and_break(self) -> None:
        completions = [NOW, add_days(NOW, 3), add_days(NOW, 6), add_days(NOW, 20)]
        summary = replay_habit_log(completions, 7)
        assert summary.streak == 1
        assert summary.longest_streak == 3
        assert summary.last_completed == add_days(NOW, 20)
        assert summary.total_completions == 4

    def test_order_independent(self) -> None:
        completions = [add_days(NOW, 6), NOW, add_days(NOW, 3)]
        assert replay_habit_log(completions, 7).streak == 3

    def test_matches_live_tracker(self, repo, context) -> None:
        tracker = HabitTracker(repo)
        task = _create_habit(repo, context, frequency=2)
        for offset in (0, 1, 3, 8, 9):
            task = tracker.complete(task, add_days(NOW, offset)).task

        summary = tracker.rebuild_from_log(task)
        assert summary.streak == task.details.streak
        assert summary.longest_streak == task.details.longest_streak
        assert summary.last_completed == task.details.last_completed


# =============================================================================
# Display helpers
# =============================================================================


class TestHabitStatus:
    """get_habit_status."""

    @pytest.mark.parametrize(
        ("frequency", "status", "action_needed"),
        [
            (7, "fresh", False),
            (6, "getting-due", False),
            (5, "ready", True),
            (3, "time-for-another", True),
        ],
    )
    def test_thresholds(self, frequency: int, status: str, action_needed: bool) -> None:
        result = get_habit_status(add_days(NOW, -5), frequency, NOW)
        assert result.status == status
        assert result.action_needed is action_needed

    def test_missing_inputs(self) -> None:
        assert get_habit_status(None, 7, NOW) is None
        assert get_habit_status(NOW, None, NOW) is None
        assert get_habit_status(NOW, 0, NOW) is None


class TestHabitDisplay:
    """get_habit_display."""

    def test_streak(self, make_task) -> None:
        display = get_habit_display(_habit(make_task, habit_type=HabitType.STREAK, streak=4, longest_streak=9))
        assert (display.icon, display.primary_text, display.secondary_text, display.show_large) == (
            "dumbbell", "4", "best: 9", True,
        )

    def test_learning(self, make_task) -> None:
        display = get_habit_display(_habit(make_task, habit_type=HabitType.LEARNING, streak=4, longest_streak=9))
        assert (display.icon, display.primary_text, display.secondary_text) == ("book", "4", "/9")

    def test_wellness(self, make_task) -> None:
        display = get_habit_display(_habit(make_task, habit_type=HabitType.WELLNESS, streak=2, frequency=7))
        assert (display.icon, display.primary_text, display.secondary_text) == ("flame", "2", "/7d")

    def test_maintenance_prefers_frequency(self, make_task) -> None:
        display = get_habit_display(_habit(make_task, habit_type=HabitType.MAINTENANCE, streak=2, frequency=30))
        assert (display.icon, display.primary_text, display.secondary_text) == ("wrench", "/30d", None)

    def test_maintenance_without_frequency(self, make_task) -> None:
        display = get_habit_display(_habit(make_task, habit_type=HabitType.MAINTENANCE, streak=2))
        assert display.primary_text == "2"

    def test_not_applicable(self, make_task) -> None:
        assert get_habit_display(make_task()) is None
        assert get_habit_display(_habit(make_task)) is None
