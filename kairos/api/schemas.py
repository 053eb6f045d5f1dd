"""
Pydantic Schemas for the Kairos REST API.

Request bodies are validated here; responses are plain dicts wrapped in the
success / error envelope built by ``success_response`` / ``error_response``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from kairos.core.context_types import ContextSnapshot
from kairos.core.task_types import HabitDetails, HabitType, Priority, TaskSnapshot, TaskType
from kairos.lib.errors import build_error_response
from kairos.services.dashboard import RankedTask, format_due_label
from kairos.services.habits import get_habit_display, get_habit_status

# =============================================================================
# Envelope
# =============================================================================


class ResponseEnvelope(BaseModel):
    """Every response body has this shape."""

    success: bool
    data: Any | None = None
    error: dict[str, Any] | None = None


def success_response(data: Any) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {"success": True, "data": data, "error": None}


def error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Wrap an error code in the error envelope."""
    return {"success": False, "data": None, "error": build_error_response(code, message, details)}


# =============================================================================
# Requests
# =============================================================================


class CreateTaskRequest(BaseModel):
    """Validated input for creating a task."""

    title: str = Field(..., min_length=1, max_length=500)
    priority: Priority = Priority.MEDIUM
    context_id: int | None = None
    project: str | None = Field(default=None, max_length=255)
    tags: list[str] | str | None = None
    due_date: datetime | None = None
    wait_days: int | None = Field(default=None, ge=0)
    type: TaskType = TaskType.TASK
    habit_type: HabitType | None = None
    frequency: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=10000)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value


class CreateContextRequest(BaseModel):
    """Validated input for creating a context."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=20)
    coefficient: float = 0.0


# =============================================================================
# Response payloads
# =============================================================================


def task_payload(task: TaskSnapshot, now: datetime | None = None) -> dict[str, Any]:
    """Serializable view of a task snapshot."""
    payload: dict[str, Any] = {
        "id": task.id,
        "user_id": task.user_id,
        "context_id": task.context_id,
        "title": task.title,
        "project": task.project,
        "priority": task.priority.value,
        "tags": list(task.tags),
        "type": task.type.value,
        "due_date": task.due_date,
        "due_label": format_due_label(task.due_date, now),
        "wait_days": task.wait_days,
        "frequency": task.frequency,
        "completed": task.completed,
        "completed_at": task.completed_at,
        "created_at": task.created_at,
    }

    if isinstance(task.details, HabitDetails):
        display = get_habit_display(task)
        status = get_habit_status(task.details.last_completed or task.completed_at, task.frequency, now)
        payload["habit"] = {
            "habit_type": task.details.habit_type.value if task.details.habit_type else None,
            "streak": task.details.streak,
            "longest_streak": task.details.longest_streak,
            "last_completed": task.details.last_completed,
            "status": status.status if status else None,
            "display": {
                "icon": display.icon,
                "primary_text": display.primary_text,
                "secondary_text": display.secondary_text,
                "show_large": display.show_large,
            } if display else None,
        }
    return payload


def ranked_task_payload(item: RankedTask, now: datetime | None = None) -> dict[str, Any]:
    """Task payload plus its freshly computed urgency."""
    payload = task_payload(item.task, now)
    payload["urgency"] = round(item.urgency, 2)
    payload["urgency_band"] = item.band.value
    payload["effectively_completed"] = item.effectively_completed
    return payload


def context_payload(context: ContextSnapshot) -> dict[str, Any]:
    """Serializable view of a context snapshot."""
    return {
        "id": context.id,
        "name": context.name,
        "description": context.description,
        "icon": context.icon,
        "color": context.color,
        "coefficient": context.coefficient,
        "archived": context.archived,
        "is_inbox": context.is_inbox,
    }


__all__ = [
    "ResponseEnvelope",
    "success_response",
    "error_response",
    "CreateTaskRequest",
    "CreateContextRequest",
    "task_payload",
    "ranked_task_payload",
    "context_payload",
]
