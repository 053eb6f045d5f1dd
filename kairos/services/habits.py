"""
Habit Recurrence State Machine for Kairos.

A habit is either AVAILABLE (it can be marked done) or COMPLETED_WAITING.

Transitions:
    AVAILABLE --complete--> COMPLETED_WAITING
        on-time  -> streak + 1
        late     -> streak reset to 1
        longest_streak = max(longest_streak, streak)
        due_date = completion + frequency (None without a frequency)
        one HabitCompletion row appended

    COMPLETED_WAITING --uncomplete--> AVAILABLE
        most recent HabitCompletion row removed
        streak = max(streak - 1, 0), longest_streak untouched
        no completion rows at all -> no-op

    COMPLETED_WAITING --next calendar day--> AVAILABLE (read-time only)

The append-only completion log is the source of truth for "when was this
habit last done"; the mutable streak columns are bookkeeping derived from
it and can be rebuilt with ``replay_habit_log``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from kairos.core.task_types import HabitDetails, HabitType, TaskSnapshot, TaskType
from kairos.lib.dates import add_days, diff_in_calendar_days, end_of_day, start_of_day
from kairos.lib.exceptions import NotFoundError, ValidationError
from kairos.services.repository import TaskRepository

logger = logging.getLogger(__name__)


class HabitAvailability(StrEnum):
    """Read-time habit state."""

    AVAILABLE = "AVAILABLE"
    COMPLETED_WAITING = "COMPLETED_WAITING"


@dataclass(frozen=True)
class StreakUpdate:
    """Streak values after one completion."""

    streak: int
    longest_streak: int
    was_on_time: bool


@dataclass(frozen=True)
class HabitCompletionResult:
    """Outcome of completing a habit."""

    task: TaskSnapshot
    streak: int
    longest_streak: int
    next_due_date: datetime | None
    was_on_time: bool


@dataclass(frozen=True)
class HabitUncompletionResult:
    """Outcome of reverting the most recent completion."""

    task: TaskSnapshot
    removed_completion: datetime
    previous_completion: datetime | None
    streak: int


@dataclass(frozen=True)
class HabitLogSummary:
    """Streak state rebuilt from the completion log."""

    streak: int
    longest_streak: int
    last_completed: datetime | None
    total_completions: int


# =============================================================================
# Pure rules
# =============================================================================

def _habit_details(task: TaskSnapshot) -> HabitDetails:
    if isinstance(task.details, HabitDetails):
        return task.details
    return HabitDetails()


def last_completion(task: TaskSnapshot) -> datetime | None:
    """Most recent completion instant known on the task record."""
    return _habit_details(task).last_completed or task.completed_at


def is_completion_on_time(
    completion_instant: datetime,
    due_date: datetime | None = None,
    frequency: int | None = None,
    prior_completed_at: datetime | None = None,
) -> bool:
    """
    Decide whether a completion keeps the streak alive.

    A due date wins: on time means by the end of the due day. Without one,
    a frequency plus a prior completion sets the window: by the end of the
    day ``frequency`` days after the prior completion's day. Anything else
    (first completion, no schedule) is on time.
    """
    if due_date is not None:
        return completion_instant <= end_of_day(due_date)

    if frequency and prior_completed_at is not None:
        expected_due = add_days(start_of_day(prior_completed_at), frequency)
        return completion_instant <= end_of_day(expected_due)

    return True


def is_habit_completion_on_time(task: TaskSnapshot, completion_instant: datetime) -> bool:
    """``is_completion_on_time`` for a habit snapshot."""
    return is_completion_on_time(
        completion_instant,
        due_date=task.due_date,
        frequency=task.frequency,
        prior_completed_at=last_completion(task),
    )


def calculate_habit_streak(task: TaskSnapshot, completion_instant: datetime) -> StreakUpdate:
    """Streak and longest streak after completing ``task`` at ``completion_instant``."""
    details = _habit_details(task)
    on_time = is_habit_completion_on_time(task, completion_instant)
    streak = (details.streak or 0) + 1 if on_time else 1
    return StreakUpdate(
        streak=streak,
        longest_streak=max(details.longest_streak or 0, streak),
        was_on_time=on_time,
    )


def calculate_next_habit_due_date(
    frequency: int | None,
    completion_instant: datetime,
) -> datetime | None:
    """
    Next due date after a completion, or None for habits without a frequency.

    Raises:
        ValidationError: If ``frequency`` is negative.
    """
    if frequency is not None and frequency < 0:
        raise ValidationError(f"Habit frequency must not be negative, got {frequency}")
    if not frequency:
        return None
    return add_days(completion_instant, frequency)


def habit_availability(task: TaskSnapshot, now: datetime | None = None) -> HabitAvailability:
    """
    Whether a habit can be marked done right now.

    A completed habit becomes available again on the calendar day after its
    last completion, whatever its frequency.
    """
    if not task.completed:
        return HabitAvailability.AVAILABLE

    completed_on = last_completion(task)
    if completed_on is None:
        return HabitAvailability.COMPLETED_WAITING

    if now is None:
        now = datetime.now()
    if now >= add_days(start_of_day(completed_on), 1):
        return HabitAvailability.AVAILABLE
    return HabitAvailability.COMPLETED_WAITING


def should_habit_show_as_available(task: TaskSnapshot, now: datetime | None = None) -> bool:
    """
    Effective availability for display and counting.

    Habits follow the day-after rule; every other kind uses ``completed``.
    """
    if task.type != TaskType.HABIT:
        return not task.completed
    return habit_availability(task, now) == HabitAvailability.AVAILABLE


def is_effectively_completed(task: TaskSnapshot, now: datetime | None = None) -> bool:
    """Completed and not made available again by the day-after rule."""
    return task.completed and not should_habit_show_as_available(task, now)


def replay_habit_log(
    completions: Sequence[datetime],
    frequency: int | None,
    initial_due_date: datetime | None = None,
) -> HabitLogSummary:
    """
    Rebuild streak state from the completion log alone.

    Applies the same on-time rule as live completions: the first completion
    is judged against ``initial_due_date`` (on time without one), every later
    completion against the due date its predecessor scheduled.
    """
    streak = 0
    longest = 0
    due_date = initial_due_date
    previous: datetime | None = None

    for completed_at in sorted(completions):
        on_time = is_completion_on_time(
            completed_at,
            due_date=due_date,
            frequency=frequency,
            prior_completed_at=previous,
        )
        streak = streak + 1 if on_time else 1
        longest = max(longest, streak)
        due_date = calculate_next_habit_due_date(frequency, completed_at)
        previous = completed_at

    return HabitLogSummary(
        streak=streak,
        longest_streak=longest,
        last_completed=previous,
        total_completions=len(completions),
    )


# =============================================================================
# Display helpers
# =============================================================================

@dataclass(frozen=True)
class HabitStatus:
    """Freshness label shown next to a habit."""

    status: str  # fresh | getting-due | ready | time-for-another
    text: str
    action_needed: bool


@dataclass(frozen=True)
class HabitDisplay:
    """How a habit card presents its streak."""

    icon: str
    primary_text: str
    secondary_text: str | None
    show_large: bool


_HABIT_ICONS: dict[HabitType, str] = {
    HabitType.STREAK: "dumbbell",
    HabitType.LEARNING: "book",
    HabitType.WELLNESS: "flame",
    HabitType.MAINTENANCE: "wrench",
}


def get_habit_status(
    completed_at: datetime | None,
    frequency: int | None,
    now: datetime | None = None,
) -> HabitStatus | None:
    """
    Freshness of a habit relative to its next due day.

    Returns None when the habit was never completed or has no frequency.
    """
    if completed_at is None or not frequency:
        return None

    days_until_due = diff_in_calendar_days(add_days(completed_at, frequency), now)

    if days_until_due > 1:
        return HabitStatus("fresh", "Fresh", action_needed=False)
    if days_until_due == 1:
        return HabitStatus("getting-due", "Getting due", action_needed=False)
    if days_until_due == 0:
        return HabitStatus("ready", "Ready", action_needed=True)
    return HabitStatus("time-for-another", "Time for another", action_needed=True)


def get_habit_display(task: TaskSnapshot) -> HabitDisplay | None:
    """Card layout for a habit, None for other kinds or untyped habits."""
    if task.type != TaskType.HABIT:
        return None
    details = _habit_details(task)
    if details.habit_type is None:
        return None

    icon = _HABIT_ICONS[details.habit_type]
    streak_text = str(details.streak or 0)
    frequency_text = f"/{details.frequency}d" if details.frequency else None

    if details.habit_type == HabitType.STREAK:
        best = f"best: {details.longest_streak}" if details.longest_streak else None
        return HabitDisplay(icon, streak_text, best, show_large=True)
    if details.habit_type == HabitType.LEARNING:
        best = f"/{details.longest_streak}" if details.longest_streak else None
        return HabitDisplay(icon, streak_text, best, show_large=False)
    if details.habit_type == HabitType.WELLNESS:
        return HabitDisplay(icon, streak_text, frequency_text, show_large=False)
    # Maintenance habits de-emphasize the streak
    return HabitDisplay(icon, frequency_text or streak_text, None, show_large=False)


# =============================================================================
# Stateful transitions
# =============================================================================

class HabitTracker:
    """
    Applies habit transitions through a ``TaskRepository``.

    Usage:
        tracker = HabitTracker(repo)
        result = tracker.complete(task, datetime.now())
        tracker.uncomplete(result.task)
    """

    def __init__(self, repository: TaskRepository) -> None:
        self._repo = repository

    def complete(self, task: TaskSnapshot | None, completion_instant: datetime) -> HabitCompletionResult:
        """
        Record a completion: streak, longest streak, next due date, log row.

        Raises:
            NotFoundError: If ``task`` is None.
            ValidationError: If ``task`` is not a habit.
        """
        if task is None or task.id is None:
            raise NotFoundError("Task", None if task is None else task.id)
        if task.type != TaskType.HABIT:
            raise ValidationError(f"Task {task.id} is a {task.type}, not a HABIT")

        update = calculate_habit_streak(task, completion_instant)
        next_due = calculate_next_habit_due_date(task.frequency, completion_instant)

        self._repo.append_habit_completion(task.id, completion_instant, due_date_before=task.due_date)
        updated = self._repo.update_task(task.id, {
            "completed": True,
            "completed_at": completion_instant,
            "last_completed": completion_instant,
            "streak": update.streak,
            "longest_streak": update.longest_streak,
            "due_date": next_due,
        })

        logger.info(
            "Habit %s completed (on_time=%s, streak=%d, longest=%d, next_due=%s)",
            task.id, update.was_on_time, update.streak, update.longest_streak, next_due,
        )

        return HabitCompletionResult(
            task=updated,
            streak=update.streak,
            longest_streak=update.longest_streak,
            next_due_date=next_due,
            was_on_time=update.was_on_time,
        )

    def uncomplete(self, task: TaskSnapshot | None) -> HabitUncompletionResult | None:
        """
        Revert the most recent completion.

        The due date goes back to what it was before that completion.
        Returns None, changing nothing, when the log holds no completion.

        Raises:
            NotFoundError: If ``task`` is None.
        """
        if task is None or task.id is None:
            raise NotFoundError("Task", None if task is None else task.id)

        removed = self._repo.delete_most_recent_habit_completion(task.id)
        if removed is None:
            logger.debug("Habit %s has no completion to revert", task.id)
            return None

        remaining = self._repo.list_habit_completions(task.id)
        previous = remaining[-1] if remaining else None
        streak = max(_habit_details(task).streak - 1, 0)

        updated = self._repo.update_task(task.id, {
            "completed": False,
            "completed_at": previous,
            "last_completed": previous,
            "streak": streak,
            "due_date": removed.due_date_before,
        })
        logger.info("Habit %s completion reverted (streak=%d)", task.id, streak)

        return HabitUncompletionResult(
            task=updated,
            removed_completion=removed.completed_at,
            previous_completion=previous,
            streak=streak,
        )

    def rebuild_from_log(self, task: TaskSnapshot) -> HabitLogSummary:
        """Recompute streak state from the log without writing anything."""
        if task.id is None:
            raise NotFoundError("Task", None)
        return replay_habit_log(self._repo.list_habit_completions(task.id), task.frequency)


__all__ = [
    "HabitAvailability",
    "StreakUpdate",
    "HabitCompletionResult",
    "HabitUncompletionResult",
    "HabitLogSummary",
    "HabitStatus",
    "HabitDisplay",
    "last_completion",
    "is_completion_on_time",
    "is_habit_completion_on_time",
    "calculate_habit_streak",
    "calculate_next_habit_due_date",
    "habit_availability",
    "should_habit_show_as_available",
    "is_effectively_completed",
    "replay_habit_log",
    "get_habit_status",
    "get_habit_display",
    "HabitTracker",
]
