"""
Task Model for Kairos.

One table stores all three task kinds. ``type`` is the variant tag; the
habit and recurring columns are only meaningful for their own kind and are
folded into the matching payload by ``to_snapshot()``.

Urgency is not a column: it is recomputed from these fields on every read.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from kairos.core.task_types import (
    HabitDetails,
    HabitType,
    OneOffDetails,
    Priority,
    RecurringDetails,
    TaskDetails,
    TaskSnapshot,
    TaskType,
)
from kairos.lib.exceptions import UnknownTaskTypeError
from kairos.models.base import Base

# Columns callers may write through the repository
UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "title",
    "project",
    "priority",
    "tags",
    "context_id",
    "due_date",
    "wait_days",
    "notes",
    "completed",
    "completed_at",
    "habit_type",
    "streak",
    "longest_streak",
    "frequency",
    "last_completed",
    "next_due",
})


class Task(Base):
    """
    Task model.

    Attributes:
        id: Primary key
        user_id: Foreign key to users.id
        context_id: Foreign key to contexts.id
        title: Task title
        project: Optional project name
        priority: LOW | MEDIUM | HIGH
        tags: JSON list of tag strings (display order preserved)
        due_date: Optional deadline
        wait_days: Suppress due-date urgency until this many days before due
        type: TASK | HABIT | RECURRING
        habit_type: STREAK | LEARNING | WELLNESS | MAINTENANCE (habits only)
        streak / longest_streak: Habit streak bookkeeping
        frequency: Days between occurrences (habits and recurring tasks)
        last_completed: Most recent habit completion
        next_due: Next occurrence (recurring tasks)
        completed / completed_at: Completion state
        created_at: Immutable creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "tasks"

    # Relationships
    user = relationship("User", back_populates="tasks")
    context = relationship("Context", back_populates="tasks")
    completions = relationship(
        "HabitCompletion",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="HabitCompletion.completed_at",
    )

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    context_id = Column(
        Integer,
        ForeignKey("contexts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Task content
    title = Column(Text, nullable=False)
    project = Column(String(255), nullable=True)
    priority = Column(String(10), default=Priority.MEDIUM.value, nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    notes = Column(Text, nullable=True)

    # Scheduling
    due_date = Column(DateTime, nullable=True, index=True)
    wait_days = Column(Integer, nullable=True)

    # Variant
    type = Column(String(10), default=TaskType.TASK.value, nullable=False)
    habit_type = Column(String(20), nullable=True)
    streak = Column(Integer, nullable=True)
    longest_streak = Column(Integer, nullable=True)
    frequency = Column(Integer, nullable=True)
    last_completed = Column(DateTime, nullable=True)
    next_due = Column(DateTime, nullable=True)

    # Completion
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        Index("idx_task_user_completed", "user_id", "completed"),
        Index("idx_task_user_type", "user_id", "type"),
    )

    def _details(self, task_type: TaskType) -> TaskDetails:
        if task_type == TaskType.HABIT:
            return HabitDetails(
                habit_type=HabitType(self.habit_type) if self.habit_type else None,
                streak=self.streak or 0,
                longest_streak=self.longest_streak or 0,
                frequency=self.frequency,
                last_completed=self.last_completed,
            )
        if task_type == TaskType.RECURRING:
            return RecurringDetails(frequency=self.frequency, next_due=self.next_due)
        return OneOffDetails()

    def to_snapshot(self) -> TaskSnapshot:
        """
        Detach the fields the engine reads.

        Raises:
            UnknownTaskTypeError: If the stored type is not a known variant.
        """
        try:
            task_type = TaskType(self.type)
        except ValueError as exc:
            raise UnknownTaskTypeError(self.type) from exc

        return TaskSnapshot(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            priority=Priority(self.priority),
            context_id=self.context_id,
            created_at=self.created_at,
            type=task_type,
            details=self._details(task_type),
            project=self.project,
            tags=tuple(self.tags or ()),
            due_date=self.due_date,
            wait_days=self.wait_days,
            completed=bool(self.completed),
            completed_at=self.completed_at,
        )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, user_id={self.user_id}, type={self.type}, completed={self.completed})>"


__all__ = ["Task", "UPDATABLE_FIELDS"]
