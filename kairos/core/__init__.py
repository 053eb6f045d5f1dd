"""
Core types for Kairos.

Exports:
    - Priority, TaskType, HabitType: enums persisted as strings
    - OneOffDetails, HabitDetails, RecurringDetails: per-variant payloads
    - TaskSnapshot, ContextSnapshot: plain-data views the services work on
"""

from .context_types import INBOX_NAME, ContextSnapshot
from .task_types import (
    HabitDetails,
    HabitType,
    OneOffDetails,
    Priority,
    RecurringDetails,
    TaskDetails,
    TaskSnapshot,
    TaskType,
    details_matches_type,
)

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
    "ContextSnapshot",
    "INBOX_NAME",
]
