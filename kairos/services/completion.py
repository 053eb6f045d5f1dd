"""
Completion dispatch for Kairos.

``complete_task`` switches on the task's variant tag:

- HABIT: always runs the habit transition. Guarding against a double
  completion is the caller's job.
- RECURRING: closes the instance and spawns its successor, only if it is
  not already completed. A missing frequency is rejected.
- TASK: marks the task done, only if it is not already completed.

Any other tag is a programming error and raises ``UnknownTaskTypeError``.

``toggle_task`` and ``complete_task_yesterday`` are the user-facing entry
points built on top of it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from kairos.core.task_types import TaskSnapshot, TaskType
from kairos.lib.dates import add_days, end_of_day
from kairos.lib.exceptions import NotFoundError, UnknownTaskTypeError
from kairos.services.habits import (
    HabitCompletionResult,
    HabitTracker,
    HabitUncompletionResult,
    should_habit_show_as_available,
)
from kairos.services.recurring import RecurringCompletionResult, complete_recurring_task
from kairos.services.repository import TaskRepository

logger = logging.getLogger(__name__)


class CompletionAction(StrEnum):
    """What a completion call actually did."""

    HABIT_COMPLETED = "habit_completed"
    HABIT_UNCOMPLETED = "habit_uncompleted"
    RECURRING_COMPLETED = "recurring_completed"
    TASK_COMPLETED = "task_completed"
    TASK_REOPENED = "task_reopened"
    NOOP = "noop"


@dataclass(frozen=True)
class CompletionOutcome:
    """
    Result of a completion entry point.

    Attributes:
        action: What happened.
        task: The task after the operation.
        spawned: The successor instance for recurring tasks.
        habit: Streak details for habit completions.
        habit_reverted: Details of a reverted habit completion.
    """

    action: CompletionAction
    task: TaskSnapshot
    spawned: TaskSnapshot | None = None
    habit: HabitCompletionResult | None = None
    habit_reverted: HabitUncompletionResult | None = None


def _require_task(task: TaskSnapshot | None) -> TaskSnapshot:
    if task is None or task.id is None:
        raise NotFoundError("Task", None if task is None else task.id)
    return task


def complete_task(
    repository: TaskRepository,
    task: TaskSnapshot | None,
    completion_instant: datetime,
) -> CompletionOutcome:
    """
    Complete ``task`` according to its variant.

    Raises:
        NotFoundError: If ``task`` is None.
        ValidationError: If a RECURRING task has no frequency.
        UnknownTaskTypeError: If the variant tag is not recognized.
    """
    task = _require_task(task)

    if task.type == TaskType.HABIT:
        result = HabitTracker(repository).complete(task, completion_instant)
        return CompletionOutcome(CompletionAction.HABIT_COMPLETED, result.task, habit=result)

    if task.type == TaskType.RECURRING:
        if task.completed:
            return CompletionOutcome(CompletionAction.NOOP, task)
        recurring: RecurringCompletionResult = complete_recurring_task(
            repository, task, completion_instant
        )
        return CompletionOutcome(
            CompletionAction.RECURRING_COMPLETED,
            recurring.completed,
            spawned=recurring.spawned,
        )

    if task.type == TaskType.TASK:
        if task.completed:
            return CompletionOutcome(CompletionAction.NOOP, task)
        updated = repository.update_task(task.id, {
            "completed": True,
            "completed_at": completion_instant,
        })
        logger.info("Task %s completed", task.id)
        return CompletionOutcome(CompletionAction.TASK_COMPLETED, updated)

    raise UnknownTaskTypeError(str(task.type))


def uncomplete_habit(repository: TaskRepository, task: TaskSnapshot | None) -> CompletionOutcome:
    """Revert a habit's most recent completion; a no-op without history."""
    task = _require_task(task)
    reverted = HabitTracker(repository).uncomplete(task)
    if reverted is None:
        return CompletionOutcome(CompletionAction.NOOP, task)
    return CompletionOutcome(CompletionAction.HABIT_UNCOMPLETED, reverted.task, habit_reverted=reverted)


def _toggle_regular_task(
    repository: TaskRepository,
    task: TaskSnapshot,
    now: datetime,
) -> CompletionOutcome:
    if task.completed:
        updated = repository.update_task(task.id, {"completed": False, "completed_at": None})
        logger.info("Task %s reopened", task.id)
        return CompletionOutcome(CompletionAction.TASK_REOPENED, updated)

    updated = repository.update_task(task.id, {"completed": True, "completed_at": now})
    logger.info("Task %s completed", task.id)
    return CompletionOutcome(CompletionAction.TASK_COMPLETED, updated)


def toggle_task(
    repository: TaskRepository,
    task_id: int,
    user_id: int,
    now: datetime | None = None,
) -> CompletionOutcome:
    """
    Flip a task between done and not done, the way the checkbox does.

    Habits use effective availability: a habit that still shows as done is
    uncompleted, otherwise it is completed again. An open recurring task is
    completed (spawning its successor); a completed one is left as it is. One-off
    tasks flip ``completed``.

    Raises:
        NotFoundError: If the task does not exist or belongs to another user.
    """
    if now is None:
        now = datetime.now()

    task = repository.find_task(task_id)
    if task is None or task.user_id != user_id:
        raise NotFoundError("Task", task_id)

    if task.type == TaskType.HABIT:
        if should_habit_show_as_available(task, now):
            return complete_task(repository, task, now)
        return uncomplete_habit(repository, task)

    if task.type == TaskType.RECURRING:
        if task.completed:
            logger.debug("Recurring task %s already completed; toggle ignored", task.id)
            return CompletionOutcome(CompletionAction.NOOP, task)
        return complete_task(repository, task, now)

    return _toggle_regular_task(repository, task, now)


def complete_task_yesterday(
    repository: TaskRepository,
    task_id: int,
    user_id: int,
    now: datetime | None = None,
) -> CompletionOutcome:
    """
    Complete a task as of 23:59:59.999 on the previous calendar day.

    Already completed tasks are left alone.

    Raises:
        NotFoundError: If the task does not exist or belongs to another user.
    """
    if now is None:
        now = datetime.now()

    task = repository.find_task(task_id)
    if task is None or task.user_id != user_id:
        raise NotFoundError("Task", task_id)

    if task.completed:
        return CompletionOutcome(CompletionAction.NOOP, task)

    yesterday = end_of_day(add_days(now, -1))
    return complete_task(repository, task, yesterday)


__all__ = [
    "CompletionAction",
    "CompletionOutcome",
    "complete_task",
    "uncomplete_habit",
    "toggle_task",
    "complete_task_yesterday",
]
