"""
Models package for Kairos.

This package exports all SQLAlchemy models.

Usage:
    from kairos.models import User, Context, Task, HabitCompletion
"""

from kairos.models.base import Base
from kairos.models.context import Context
from kairos.models.habit_completion import HabitCompletion
from kairos.models.task import Task
from kairos.models.user import User

__all__ = [
    "Base",
    "User",
    "Context",
    "Task",
    "HabitCompletion",
]
