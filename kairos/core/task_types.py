"""
Task variants for Kairos.

A task is one of three kinds, each with its own completion semantics:

- TASK: one-off, completes once.
- HABIT: completes repeatedly, tracking a streak.
- RECURRING: completing spawns the next occurrence.

The kind is carried twice on purpose-built types: ``TaskType`` is the tag
persisted in the database, and ``TaskSnapshot.details`` holds the
per-variant payload (``OneOffDetails``, ``HabitDetails`` or
``RecurringDetails``). The engine only ever reads snapshots, never ORM rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import TypeAlias


class Priority(StrEnum):
    """Task priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskType(StrEnum):
    """Variant tag deciding completion semantics."""

    TASK = "TASK"
    HABIT = "HABIT"
    RECURRING = "RECURRING"


class HabitType(StrEnum):
    """Display flavour of a habit. Has no effect on the urgency score."""

    STREAK = "STREAK"
    LEARNING = "LEARNING"
    WELLNESS = "WELLNESS"
    MAINTENANCE = "MAINTENANCE"


# =============================================================================
# Per-variant payloads
# =============================================================================

@dataclass(frozen=True)
class OneOffDetails:
    """A plain task carries no extra state."""


@dataclass(frozen=True)
class HabitDetails:
    """Streak bookkeeping for a habit."""

    habit_type: HabitType | None = None
    streak: int = 0
    longest_streak: int = 0
    frequency: int | None = None
    last_completed: datetime | None = None


@dataclass(frozen=True)
class RecurringDetails:
    """Cadence of a recurring task. ``frequency`` may be missing in bad data."""

    frequency: int | None = None
    next_due: datetime | None = None


TaskDetails: TypeAlias = OneOffDetails | HabitDetails | RecurringDetails

_DETAILS_FOR_TYPE: dict[TaskType, type] = {
    TaskType.TASK: OneOffDetails,
    TaskType.HABIT: HabitDetails,
    TaskType.RECURRING: RecurringDetails,
}


@dataclass(frozen=True)
class TaskSnapshot:
    """
    Plain-data view of a task as the engine sees it.

    Attributes:
        id: Opaque identifier owned by the persistence layer.
        user_id: Owner.
        title: Task title.
        priority: LOW | MEDIUM | HIGH.
        context_id: Owning context.
        created_at: Immutable creation instant.
        type: Variant tag.
        details: Variant payload matching ``type``.
        project: Optional free text.
        tags: Tags in display order.
        due_date: Optional deadline.
        wait_days: Urgency stays suppressed until this close to the due date.
        completed: Completion flag.
        completed_at: Most recent completion instant.
    """

    id: int | None
    user_id: int
    title: str
    priority: Priority
    context_id: int
    created_at: datetime
    type: TaskType
    details: TaskDetails = field(default_factory=OneOffDetails)
    project: str | None = None
    tags: tuple[str, ...] = ()
    due_date: datetime | None = None
    wait_days: int | None = None
    completed: bool = False
    completed_at: datetime | None = None

    @property
    def frequency(self) -> int | None:
        """Frequency in days for habits and recurring tasks, None otherwise."""
        if isinstance(self.details, (HabitDetails, RecurringDetails)):
            return self.details.frequency
        return None

    def with_changes(self, **changes: object) -> TaskSnapshot:
        """Return a copy with top-level fields replaced."""
        return replace(self, **changes)  # type: ignore[arg-type]


def details_matches_type(task_type: TaskType, details: TaskDetails) -> bool:
    """True if the payload class is the one registered for the tag."""
    expected = _DETAILS_FOR_TYPE.get(task_type)
    return expected is not None and isinstance(details, expected)


__all__ = [
    "Priority",
    "TaskType",
    "HabitType",
    "OneOffDetails",
    "HabitDetails",
    "RecurringDetails",
    "TaskDetails",
    "TaskSnapshot",
    "details_matches_type",
]
