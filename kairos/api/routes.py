"""
REST API Routes for Kairos.

All responses use the success / error envelope from ``kairos.api.schemas``.
Urgency is recomputed on every read; nothing returned here comes from a
stored score.

Endpoints (all under /api/v1 prefix):
- /health - Health check
- /tasks - Ranked task list, task creation
- /tasks/{id}/urgency - Score with explanation
- /tasks/{id}/toggle - Checkbox toggle
- /tasks/{id}/complete-yesterday - Backdated completion
- /badge - Due-or-overdue counter
- /contexts - Context list and creation, archive / unarchive
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from kairos.api.dependencies import get_current_user_id, get_db, get_repository
from kairos.api.schemas import (
    CreateContextRequest,
    CreateTaskRequest,
    ResponseEnvelope,
    context_payload,
    ranked_task_payload,
    success_response,
    task_payload,
)
from kairos.core.task_types import TaskSnapshot
from kairos.lib.exceptions import NotFoundError
from kairos.services import contexts as context_service
from kairos.services import tasks as task_service
from kairos.services.badge import count_due_and_overdue_tasks
from kairos.services.completion import CompletionOutcome, complete_task_yesterday, toggle_task
from kairos.services.dashboard import get_context_completion, get_today_tasks, rank_tasks
from kairos.services.repository import SqlAlchemyRepository
from kairos.services.urgency import score_task, urgency_band

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def _outcome_payload(outcome: CompletionOutcome, now: datetime) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "action": outcome.action.value,
        "task": task_payload(outcome.task, now),
        "spawned": task_payload(outcome.spawned, now) if outcome.spawned else None,
    }
    if outcome.habit is not None:
        payload["habit"] = {
            "streak": outcome.habit.streak,
            "longest_streak": outcome.habit.longest_streak,
            "next_due_date": outcome.habit.next_due_date,
            "was_on_time": outcome.habit.was_on_time,
        }
    return payload


# =============================================================================
# Health
# =============================================================================


@router.get("/health", response_model=ResponseEnvelope)
async def health_check() -> dict[str, Any]:
    """Health check endpoint (no identity required)."""
    return success_response({"status": "ok"})


# =============================================================================
# Tasks
# =============================================================================


@router.get("/tasks", response_model=ResponseEnvelope)
def list_tasks(
    include_hidden: bool = False,
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    List the caller's tasks, most urgent first.

    Args:
        include_hidden: Also return completed tasks that active views hide

    Returns:
        Envelope with ranked tasks and the ids due today
    """
    now = datetime.now()
    contexts = repo.list_contexts_for_user(user_id)
    ranked = rank_tasks(repo.list_tasks_for_user(user_id), contexts, now, include_hidden=include_hidden)
    today = get_today_tasks(ranked, now)
    return success_response({
        "tasks": [ranked_task_payload(item, now) for item in ranked],
        "today": [item.task.id for item in today],
        "total": len(ranked),
    })


@router.post("/tasks", response_model=ResponseEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    data: CreateTaskRequest,
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Create a task; without a context it goes to the inbox."""
    task = task_service.create_task(
        repo,
        user_id,
        title=data.title,
        priority=data.priority,
        context_id=data.context_id,
        project=data.project,
        tags=data.tags,
        due_date=data.due_date,
        wait_days=data.wait_days,
        task_type=data.type,
        habit_type=data.habit_type,
        frequency=data.frequency,
        notes=data.notes,
    )
    db.commit()
    return success_response(task_payload(task))


@router.get("/tasks/{task_id}/urgency", response_model=ResponseEnvelope)
def get_task_urgency(
    task_id: int,
    repo: SqlAlchemyRepository = Depends(get_repository),
) -> dict[str, Any]:
    """Urgency score of one task with one explanation line per term."""
    task = repo.find_task(task_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    context = repo.find_context(task.context_id)
    result = score_task(task, context.coefficient if context else 0.0)
    return success_response({
        "task_id": task_id,
        "urgency": round(result.score, 2),
        "band": urgency_band(result.score).value,
        "explanation": result.explanation,
    })


@router.post("/tasks/{task_id}/toggle", response_model=ResponseEnvelope)
def toggle(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Flip a task between done and not done."""
    now = datetime.now()
    outcome = toggle_task(repo, task_id, user_id, now)
    db.commit()
    return success_response(_outcome_payload(outcome, now))


@router.post("/tasks/{task_id}/complete-yesterday", response_model=ResponseEnvelope)
def complete_yesterday(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Complete a task as of the end of yesterday."""
    now = datetime.now()
    outcome = complete_task_yesterday(repo, task_id, user_id, now)
    db.commit()
    return success_response(_outcome_payload(outcome, now))


# =============================================================================
# Badge
# =============================================================================


@router.get("/badge", response_model=ResponseEnvelope)
def get_badge(
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
) -> dict[str, Any]:
    """Number of tasks due today or overdue, outside archived contexts."""
    archived = {context.id for context in repo.list_contexts_for_user(user_id, archived=True)}
    tasks = [task for task in repo.list_tasks_for_user(user_id) if task.context_id not in archived]
    return success_response({"count": count_due_and_overdue_tasks(tasks)})


# =============================================================================
# Contexts
# =============================================================================


@router.get("/contexts", response_model=ResponseEnvelope)
def list_contexts(
    archived: bool | None = None,
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
) -> dict[str, Any]:
    """List the caller's contexts with their habit health."""
    now = datetime.now()
    tasks_by_context: dict[int, list[TaskSnapshot]] = {}
    for task in repo.list_tasks_for_user(user_id):
        tasks_by_context.setdefault(task.context_id, []).append(task)

    contexts = []
    for context in repo.list_contexts_for_user(user_id, archived=archived):
        payload = context_payload(context)
        completion = get_context_completion(tasks_by_context.get(context.id, []), now)
        payload["completion"] = {
            "percentage": completion.percentage,
            "completed": completion.completed,
            "total": completion.total,
        }
        contexts.append(payload)
    return success_response({"contexts": contexts, "total": len(contexts)})


@router.post("/contexts", response_model=ResponseEnvelope, status_code=status.HTTP_201_CREATED)
def create_context(
    data: CreateContextRequest,
    user_id: int = Depends(get_current_user_id),
    repo: SqlAlchemyRepository = Depends(get_repository),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Create a context, subject to the plan's limit."""
    context = context_service.create_context(
        repo,
        user_id,
        name=data.name,
        description=data.description,
        icon=data.icon,
        color=data.color,
        coefficient=data.coefficient,
    )
    db.commit()
    return success_response(context_payload(context))


@router.post("/contexts/{context_id}/archive", response_model=ResponseEnvelope)
def archive_context(
    context_id: int,
    repo: SqlAlchemyRepository = Depends(get_repository),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Archive a context; its open tasks are deleted."""
    context = context_service.archive_context(repo, context_id)
    db.commit()
    return success_response(context_payload(context))


@router.post("/contexts/{context_id}/unarchive", response_model=ResponseEnvelope)
def unarchive_context(
    context_id: int,
    repo: SqlAlchemyRepository = Depends(get_repository),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Restore an archived context."""
    context = context_service.unarchive_context(repo, context_id)
    db.commit()
    return success_response(context_payload(context))


__all__ = ["router"]
