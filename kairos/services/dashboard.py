"""
Dashboard views for Kairos.

Every view recomputes urgency from the task fields at read time; nothing
here trusts a stored score.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime

from kairos.config.urgency import DEFAULT_URGENCY_CONFIG, UrgencyConfig
from kairos.core.context_types import ContextSnapshot
from kairos.core.task_types import TaskSnapshot, TaskType
from kairos.lib.dates import diff_in_calendar_days
from kairos.services.badge import should_hide_completed_task
from kairos.services.habits import is_effectively_completed
from kairos.services.urgency import UrgencyBand, score_task, urgency_band


@dataclass(frozen=True)
class RankedTask:
    """A task with its freshly computed urgency."""

    task: TaskSnapshot
    urgency: float
    band: UrgencyBand
    explanation: list[str]
    effectively_completed: bool


@dataclass(frozen=True)
class ContextCompletion:
    """Habit health of one context."""

    percentage: int
    completed: int
    total: int


def _coefficients(contexts: Iterable[ContextSnapshot]) -> dict[int, float]:
    return {context.id: context.coefficient for context in contexts}


def rank_tasks(
    tasks: Iterable[TaskSnapshot],
    contexts: Sequence[ContextSnapshot],
    now: datetime | None = None,
    config: UrgencyConfig = DEFAULT_URGENCY_CONFIG,
    include_hidden: bool = False,
) -> list[RankedTask]:
    """
    Score and sort tasks, most urgent first.

    Tasks in archived contexts are left out, as are completed tasks that
    ``should_hide_completed_task`` hides, unless ``include_hidden`` is set.
    Ties keep their input order.

    Args:
        tasks: Candidate tasks.
        contexts: The owner's contexts, used for coefficients and archive state.
        now: Reference instant; defaults to the current local time.
        config: Urgency constants.
        include_hidden: Keep completed tasks that would normally be hidden.

    Returns:
        Ranked tasks sorted by urgency descending.
    """
    if now is None:
        now = datetime.now()

    archived = {context.id for context in contexts if context.archived}
    coefficients = _coefficients(contexts)

    ranked: list[RankedTask] = []
    for task in tasks:
        if task.context_id in archived:
            continue
        if not include_hidden and should_hide_completed_task(task, now):
            continue
        result = score_task(task, coefficients.get(task.context_id, 0.0), now, config)
        ranked.append(RankedTask(
            task=task,
            urgency=result.score,
            band=urgency_band(result.score, config),
            explanation=result.explanation,
            effectively_completed=is_effectively_completed(task, now),
        ))

    ranked.sort(key=lambda item: item.urgency, reverse=True)
    return ranked


def get_today_tasks(ranked: Iterable[RankedTask], now: datetime | None = None) -> list[RankedTask]:
    """Tasks due today: open ones first, then by urgency."""
    today = [
        item for item in ranked
        if item.task.due_date is not None and diff_in_calendar_days(item.task.due_date, now) == 0
    ]
    today.sort(key=lambda item: (item.effectively_completed, -item.urgency))
    return today


def get_context_completion(tasks: Iterable[TaskSnapshot], now: datetime | None = None) -> ContextCompletion:
    """
    Share of a context's habits currently done.

    One-off and recurring tasks don't count. A context without habits is
    reported as fully healthy.
    """
    habits = [task for task in tasks if task.type == TaskType.HABIT]
    if not habits:
        return ContextCompletion(percentage=100, completed=0, total=0)

    completed = sum(1 for task in habits if is_effectively_completed(task, now))
    return ContextCompletion(
        percentage=round(completed / len(habits) * 100),
        completed=completed,
        total=len(habits),
    )


def sort_contexts_by_health(
    contexts: Iterable[ContextSnapshot],
    ranked: Sequence[RankedTask],
    now: datetime | None = None,
) -> list[ContextSnapshot]:
    """Least healthy contexts first, then the one holding the most urgent task."""
    tasks_by_context = group_by_context(ranked)

    def sort_key(context: ContextSnapshot) -> tuple[int, float]:
        items = tasks_by_context.get(context.id, [])
        health = get_context_completion((item.task for item in items), now).percentage
        top_urgency = max((item.urgency for item in items), default=0.0)
        return health, -top_urgency

    return sorted(contexts, key=sort_key)


def format_due_label(due: date | datetime | None, now: datetime | None = None) -> str | None:
    """Short relative label for a due date, None when there is none."""
    if due is None:
        return None

    days = diff_in_calendar_days(due, now)
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days == -1:
        return "Yesterday"
    if days < 0:
        return f"{-days}d overdue"
    if days < 7:
        return f"In {days}d"
    return (due.date() if isinstance(due, datetime) else due).isoformat()


def group_by_context(ranked: Iterable[RankedTask]) -> Mapping[int, list[RankedTask]]:
    """Ranked tasks keyed by context id, order preserved within each group."""
    groups: dict[int, list[RankedTask]] = {}
    for item in ranked:
        groups.setdefault(item.task.context_id, []).append(item)
    return groups


__all__ = [
    "RankedTask",
    "ContextCompletion",
    "rank_tasks",
    "get_today_tasks",
    "get_context_completion",
    "sort_contexts_by_health",
    "format_due_label",
    "group_by_context",
]
