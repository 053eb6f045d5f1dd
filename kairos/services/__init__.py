"""
Services for Kairos.

Services:
    - urgency: Urgency Scoring Engine (pure)
    - habits: Habit Recurrence State Machine
    - recurring: Recurring-Task Instance Generator
    - completion: Completion dispatch, toggle, complete-yesterday
    - badge: Due-or-overdue counter
    - dashboard: Urgency-ranked views
    - contexts: Inbox, plan limits, archiving
    - tasks: Task creation
    - repository: Persistence protocols and the SQLAlchemy implementation
"""

from .completion import (
    CompletionAction,
    CompletionOutcome,
    complete_task,
    complete_task_yesterday,
    toggle_task,
    uncomplete_habit,
)
from .habits import HabitAvailability, HabitTracker, should_habit_show_as_available
from .recurring import complete_recurring_task
from .repository import ContextRepository, Repository, SqlAlchemyRepository, TaskRepository
from .urgency import (
    UrgencyBand,
    UrgencyInput,
    UrgencyResult,
    calculate_urgency,
    evaluate_urgency,
    explain_urgency,
)

__all__ = [
    # Urgency
    "UrgencyBand",
    "UrgencyInput",
    "UrgencyResult",
    "evaluate_urgency",
    "calculate_urgency",
    "explain_urgency",
    # Habits
    "HabitAvailability",
    "HabitTracker",
    "should_habit_show_as_available",
    # Recurring
    "complete_recurring_task",
    # Completion
    "CompletionAction",
    "CompletionOutcome",
    "complete_task",
    "uncomplete_habit",
    "toggle_task",
    "complete_task_yesterday",
    # Persistence
    "TaskRepository",
    "ContextRepository",
    "Repository",
    "SqlAlchemyRepository",
]
