"""
Urgency Scoring Engine for Kairos.

Turns a task's attributes into one comparable number plus a human-readable
explanation. The score is never stored as the source of truth; callers
recompute it on every read.

Scoring Formula:
---------------
urgency = priority_weight[priority] * priority_coefficient
        + clamp(age_days / age_horizon_days, 0, 1) * age_coefficient
        + due_proximity * due_coefficient            (0 while waiting)
        + project_coefficient                        (non-blank project)
        + next_tag_bonus + blocked_tag_penalty       (when tagged)
        + context_coefficient

due_proximity:
    due in d >= 0 days:   clamp((near_window_days - d) / near_window_days, 0, 1)
    overdue by o days:    1 + clamp(o / overdue_saturation_days, 0, 1)

Each term is computed independently and appended as one explanation line,
in the order above. A missing due date still yields a "No due date" line;
tags that don't match yield nothing.

The engine is pure: no I/O, no logging, no hidden clock once ``now`` is
passed. It is safe to call from any number of concurrent readers.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from kairos.config.urgency import DEFAULT_URGENCY_CONFIG, UrgencyConfig
from kairos.core.task_types import Priority, TaskSnapshot
from kairos.lib.dates import diff_in_calendar_days
from kairos.lib.tags import normalize_tags


class UrgencyBand(StrEnum):
    """Color band used by the presentation layer."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class UrgencyInput:
    """Everything the engine needs to score one task."""

    priority: Priority
    created_at: datetime
    due_date: datetime | None = None
    tags: tuple[str, ...] = ()
    project: str | None = None
    wait_days: int | None = None
    context_coefficient: float = 0.0

    @classmethod
    def from_task(cls, task: TaskSnapshot, context_coefficient: float | None = None) -> UrgencyInput:
        """Build the scoring input for a task and its context's coefficient."""
        return cls(
            priority=task.priority,
            created_at=task.created_at,
            due_date=task.due_date,
            tags=tuple(task.tags),
            project=task.project,
            wait_days=task.wait_days,
            context_coefficient=context_coefficient or 0.0,
        )


@dataclass(frozen=True)
class UrgencyResult:
    """Final score plus one explanation line per contributing term."""

    score: float
    explanation: list[str] = field(default_factory=list)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _signed(value: float) -> str:
    return f"{value:+.2f}"


def _plural(count: int, word: str = "day") -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# =============================================================================
# Individual terms
# =============================================================================

def _priority_term(priority: Priority, config: UrgencyConfig) -> tuple[float, str]:
    weight = config.priority_weights[Priority(priority)]
    value = weight * config.priority_coefficient
    return value, f"{Priority(priority).value.capitalize()} priority: {_signed(value)}"


def _age_term(created_at: datetime, now: datetime, config: UrgencyConfig) -> tuple[float, str]:
    age_days = diff_in_calendar_days(now, created_at)
    value = _clamp(age_days / config.age_horizon_days, 0.0, 1.0) * config.age_coefficient
    return value, f"Task age ({_plural(max(age_days, 0))}): {_signed(value)}"


def due_proximity(days_until_due: int, config: UrgencyConfig = DEFAULT_URGENCY_CONFIG) -> float:
    """
    Proximity factor for a due date ``days_until_due`` days away.

    Ramps from 0 at ``near_window_days`` out to 1 on the due day, then keeps
    climbing while overdue until it saturates at 2.
    """
    if days_until_due >= 0:
        window = config.near_window_days
        return _clamp((window - days_until_due) / window, 0.0, 1.0)
    overdue_days = -days_until_due
    return 1.0 + _clamp(overdue_days / config.overdue_saturation_days, 0.0, 1.0)


def _describe_due(days_until_due: int) -> str:
    if days_until_due == 0:
        return "Due today"
    if days_until_due > 0:
        return f"Due in {_plural(days_until_due)}"
    return f"Overdue by {_plural(-days_until_due)}"


def _due_term(
    due_date: datetime | None,
    wait_days: int | None,
    now: datetime,
    config: UrgencyConfig,
) -> tuple[float, str]:
    if due_date is None:
        return 0.0, f"No due date: {_signed(0.0)}"

    days_until_due = diff_in_calendar_days(due_date, now)
    value = due_proximity(days_until_due, config) * config.due_coefficient
    label = _describe_due(days_until_due)

    # wait_days == 0 means "no wait"
    if wait_days and days_until_due > wait_days:
        return 0.0, (
            f"{label}, waiting until {_plural(wait_days)} before "
            f"(would be {_signed(value)}): {_signed(0.0)}"
        )
    return value, f"{label}: {_signed(value)}"


def _tag_terms(tags: Iterable[str], config: UrgencyConfig) -> list[tuple[float, str]]:
    normalized = normalize_tags(tags)
    terms: list[tuple[float, str]] = []
    if config.next_tag in normalized:
        terms.append((config.next_tag_bonus, f"Tag: {config.next_tag} {_signed(config.next_tag_bonus)}"))
    if config.blocked_tag in normalized:
        terms.append((
            config.blocked_tag_penalty,
            f"Tag: {config.blocked_tag} {_signed(config.blocked_tag_penalty)}",
        ))
    return terms


# =============================================================================
# Public API
# =============================================================================

def evaluate_urgency(
    urgency_input: UrgencyInput,
    now: datetime | None = None,
    config: UrgencyConfig = DEFAULT_URGENCY_CONFIG,
) -> UrgencyResult:
    """
    Score a task and explain every contribution.

    Args:
        urgency_input: Task attributes plus the owning context's coefficient.
        now: Reference instant; defaults to the current local time.
        config: Coefficients to score with.

    Returns:
        UrgencyResult with the summed score and explanation lines.
    """
    if now is None:
        now = datetime.now()

    terms: list[tuple[float, str]] = [
        _priority_term(urgency_input.priority, config),
        _age_term(urgency_input.created_at, now, config),
        _due_term(urgency_input.due_date, urgency_input.wait_days, now, config),
    ]

    if urgency_input.project is not None and urgency_input.project.strip():
        terms.append((config.project_coefficient, f"Project set: {_signed(config.project_coefficient)}"))

    terms.extend(_tag_terms(urgency_input.tags, config))

    if urgency_input.context_coefficient:
        coefficient = float(urgency_input.context_coefficient)
        terms.append((coefficient, f"Context coefficient: {_signed(coefficient)}"))

    return UrgencyResult(
        score=sum(value for value, _ in terms),
        explanation=[line for _, line in terms],
    )


def calculate_urgency(
    urgency_input: UrgencyInput,
    now: datetime | None = None,
    config: UrgencyConfig = DEFAULT_URGENCY_CONFIG,
) -> float:
    """Score only."""
    return evaluate_urgency(urgency_input, now, config).score


def explain_urgency(
    urgency_input: UrgencyInput,
    now: datetime | None = None,
    config: UrgencyConfig = DEFAULT_URGENCY_CONFIG,
) -> UrgencyResult:
    """Full result, score and explanation."""
    return evaluate_urgency(urgency_input, now, config)


def urgency_band(score: float, config: UrgencyConfig = DEFAULT_URGENCY_CONFIG) -> UrgencyBand:
    """Classify a score into the high / medium / low color band."""
    if score >= config.high_threshold:
        return UrgencyBand.HIGH
    if score >= config.medium_threshold:
        return UrgencyBand.MEDIUM
    return UrgencyBand.LOW


def score_task(
    task: TaskSnapshot,
    context_coefficient: float | None = None,
    now: datetime | None = None,
    config: UrgencyConfig = DEFAULT_URGENCY_CONFIG,
) -> UrgencyResult:
    """Convenience wrapper scoring a snapshot directly."""
    return evaluate_urgency(UrgencyInput.from_task(task, context_coefficient), now, config)


__all__ = [
    "UrgencyBand",
    "UrgencyInput",
    "UrgencyResult",
    "due_proximity",
    "evaluate_urgency",
    "calculate_urgency",
    "explain_urgency",
    "urgency_band",
    "score_task",
]
