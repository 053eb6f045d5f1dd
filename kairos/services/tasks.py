"""
Task creation for Kairos.

Validates the per-variant fields and stores only the ones that belong to
the chosen kind: habits get a habit type, frequency and zeroed streaks,
recurring tasks get a mandatory frequency with ``next_due`` mirroring the
due date, and plain tasks get neither.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from kairos.core.task_types import HabitType, Priority, TaskSnapshot, TaskType
from kairos.lib.exceptions import ValidationError
from kairos.lib.tags import parse_tags
from kairos.services.contexts import resolve_task_context
from kairos.services.repository import Repository

logger = logging.getLogger(__name__)


def _coerce_enum(enum_type: type, value: Any, field_name: str) -> Any:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from exc


def _normalize_tags(tags: str | Iterable[str] | None) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        return parse_tags(tags)
    return parse_tags(",".join(tags))


def create_task(
    repository: Repository,
    user_id: int,
    title: str,
    priority: Priority | str = Priority.MEDIUM,
    context_id: int | None = None,
    project: str | None = None,
    tags: str | Iterable[str] | None = None,
    due_date: datetime | None = None,
    wait_days: int | None = None,
    task_type: TaskType | str = TaskType.TASK,
    habit_type: HabitType | str | None = None,
    frequency: int | None = None,
    notes: str | None = None,
) -> TaskSnapshot:
    """
    Create a task of any kind.

    Without ``context_id`` the task goes to the user's inbox.

    Args:
        repository: Task and context persistence.
        user_id: Owner.
        title: Required, non-blank.
        priority: LOW | MEDIUM | HIGH.
        context_id: Target context, or None for the inbox.
        project: Optional project name; blank means none.
        tags: Comma-separated string or iterable of tags.
        due_date: Optional deadline.
        wait_days: Days before the due date when urgency starts counting.
        task_type: TASK | HABIT | RECURRING.
        habit_type: Display flavour for habits.
        frequency: Days between occurrences; required for RECURRING.
        notes: Free text.

    Returns:
        Snapshot of the stored task.

    Raises:
        ValidationError: On a blank title, unknown enum value, negative
            ``wait_days``, or a missing/invalid frequency.
        NotFoundError: If ``context_id`` is not one of the user's contexts.
    """
    if title is None or not title.strip():
        raise ValidationError("Title is required")

    task_type = _coerce_enum(TaskType, task_type, "task type")
    priority = _coerce_enum(Priority, priority, "priority")

    if wait_days is not None and wait_days < 0:
        raise ValidationError(f"wait_days must not be negative, got {wait_days}")
    if frequency is not None and frequency < 0:
        raise ValidationError(f"Frequency must not be negative, got {frequency}")

    context = resolve_task_context(repository, user_id, context_id)

    fields: dict[str, Any] = {
        "user_id": user_id,
        "context_id": context.id,
        "title": title.strip(),
        "project": project.strip() if project and project.strip() else None,
        "priority": priority.value,
        "tags": _normalize_tags(tags),
        "due_date": due_date,
        "wait_days": wait_days,
        "type": task_type.value,
        "notes": notes or None,
    }

    if task_type == TaskType.HABIT:
        fields["habit_type"] = (
            _coerce_enum(HabitType, habit_type, "habit type").value if habit_type else None
        )
        fields["frequency"] = frequency or None
        fields["streak"] = 0
        fields["longest_streak"] = 0
    elif task_type == TaskType.RECURRING:
        if not frequency:
            raise ValidationError("Recurring task must have a frequency")
        fields["frequency"] = frequency
        fields["next_due"] = due_date

    task = repository.create_task(fields)
    logger.info("Created %s task %s in context %s", task_type.value, task.id, context.id)
    return task


__all__ = ["create_task"]
