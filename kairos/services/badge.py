"""
Due-or-overdue counter for the app badge.

Only the number is computed here; pushing it to a platform badge belongs to
the client.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from kairos.core.task_types import TaskSnapshot, TaskType
from kairos.lib.dates import diff_in_calendar_days, start_of_day
from kairos.services.habits import is_effectively_completed

# Completed one-off tasks stay visible this long on the day they were done
_RECENTLY_COMPLETED = timedelta(hours=1)


def should_hide_completed_task(task: TaskSnapshot, now: datetime | None = None) -> bool:
    """
    Whether a completed task drops out of active views.

    Habits are never hidden. Other tasks are hidden once they were completed
    before today and more than an hour ago.
    """
    if task.type == TaskType.HABIT:
        return False
    if not task.completed or task.completed_at is None:
        return False

    if now is None:
        now = datetime.now()
    completed_before_today = task.completed_at < start_of_day(now)
    completed_over_an_hour_ago = now - task.completed_at > _RECENTLY_COMPLETED
    return completed_before_today and completed_over_an_hour_ago


def is_due_or_overdue(task: TaskSnapshot, now: datetime | None = None) -> bool:
    """True if the task is due today or earlier and not effectively done."""
    if task.due_date is None:
        return False
    if should_hide_completed_task(task, now):
        return False
    if is_effectively_completed(task, now):
        return False
    return diff_in_calendar_days(task.due_date, now) <= 0


def count_due_and_overdue_tasks(tasks: Iterable[TaskSnapshot], now: datetime | None = None) -> int:
    """Number of tasks due today or overdue that still need doing."""
    if now is None:
        now = datetime.now()
    return sum(1 for task in tasks if is_due_or_overdue(task, now))


__all__ = [
    "should_hide_completed_task",
    "is_due_or_overdue",
    "count_due_and_overdue_tasks",
]
