"""
Recurring-Task Instance Generator for Kairos.

Completing a RECURRING task closes that instance for good and materializes
the next occurrence as a new task. The next due date is anchored on the
original due date when there is one, so a task due every Monday stays due on
Mondays however late it gets done. Without a due date the completion
instant is the anchor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from kairos.core.task_types import TaskSnapshot, TaskType
from kairos.lib.dates import add_days
from kairos.lib.exceptions import NotFoundError, ValidationError
from kairos.services.repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecurringCompletionResult:
    """The closed instance and the spawned successor."""

    completed: TaskSnapshot
    spawned: TaskSnapshot
    next_due_date: datetime


def require_frequency(task: TaskSnapshot) -> int:
    """
    Frequency of a recurring task.

    Raises:
        ValidationError: If the frequency is missing or not positive.
    """
    frequency = task.frequency
    if frequency is None or frequency <= 0:
        raise ValidationError(
            f"Recurring task {task.id} has no valid frequency ({frequency!r})"
        )
    return frequency


def compute_next_recurring_due_date(task: TaskSnapshot, completion_instant: datetime) -> datetime:
    """Due date of the next occurrence."""
    frequency = require_frequency(task)
    anchor = task.due_date if task.due_date is not None else completion_instant
    return add_days(anchor, frequency)


def build_next_instance_fields(task: TaskSnapshot, next_due_date: datetime) -> dict[str, Any]:
    """Fields for the successor record; invariant fields are copied verbatim."""
    return {
        "user_id": task.user_id,
        "context_id": task.context_id,
        "title": task.title,
        "project": task.project,
        "priority": task.priority.value,
        "tags": list(task.tags),
        "type": TaskType.RECURRING.value,
        "frequency": task.frequency,
        "due_date": next_due_date,
        "next_due": next_due_date,
        "completed": False,
    }


def complete_recurring_task(
    repository: TaskRepository,
    task: TaskSnapshot | None,
    completion_instant: datetime,
) -> RecurringCompletionResult:
    """
    Close ``task`` and spawn exactly one successor.

    The frequency is checked before anything is written, so a task with bad
    data is left untouched.

    Raises:
        NotFoundError: If ``task`` is None.
        ValidationError: If ``task`` is not RECURRING or lacks a frequency.
    """
    if task is None or task.id is None:
        raise NotFoundError("Task", None if task is None else task.id)
    if task.type != TaskType.RECURRING:
        raise ValidationError(f"Task {task.id} is a {task.type}, not a RECURRING task")

    next_due = compute_next_recurring_due_date(task, completion_instant)

    spawned = repository.create_task(build_next_instance_fields(task, next_due))
    completed = repository.update_task(task.id, {
        "completed": True,
        "completed_at": completion_instant,
    })

    logger.info(
        "Recurring task %s completed, spawned %s due %s",
        task.id, spawned.id, next_due.isoformat(),
    )

    return RecurringCompletionResult(completed=completed, spawned=spawned, next_due_date=next_due)


__all__ = [
    "RecurringCompletionResult",
    "require_frequency",
    "compute_next_recurring_due_date",
    "build_next_instance_fields",
    "complete_recurring_task",
]
