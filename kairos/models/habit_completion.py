"""
Habit completion log for Kairos.

Append-only: one row per completion event. Each row also keeps the due date
the habit had just before that completion, so uncompleting can put it back.
Uncompleting a habit deletes the most recent row; rows are never edited.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from kairos.models.base import Base


class HabitCompletion(Base):
    """
    Habit completion log entry.

    Attributes:
        id: Primary key
        task_id: Foreign key to tasks.id
        completed_at: When the habit was completed
        due_date_before: The habit's due date before this completion
    """

    __tablename__ = "habit_completions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    completed_at = Column(DateTime, nullable=False, default=datetime.now)
    due_date_before = Column(DateTime, nullable=True)

    # Relationships
    task = relationship("Task", back_populates="completions")

    __table_args__ = (
        Index("idx_habit_completion_task_time", "task_id", "completed_at"),
    )

    def __repr__(self) -> str:
        return f"<HabitCompletion(task_id={self.task_id}, completed_at={self.completed_at})>"


__all__ = ["HabitCompletion"]
