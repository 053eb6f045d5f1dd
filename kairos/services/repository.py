"""
Persistence collaborator for Kairos.

The engine never talks to the database directly. It reads and writes through
the ``TaskRepository`` / ``ContextRepository`` protocols, which hand out
plain snapshots. ``SqlAlchemyRepository`` implements both on a SQLAlchemy
session scoped to one user: tasks and contexts owned by anyone else are
reported as missing.

The repository flushes but never commits; the caller owns the transaction.
Single-writer-per-task is assumed; nothing here locks or retries.

Usage:
    repo = SqlAlchemyRepository(session, user_id=42)
    task = repo.find_task(7)
    repo.update_task(7, {"completed": True, "completed_at": now})
    session.commit()
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session as DbSession

from kairos.core.context_types import ContextSnapshot
from kairos.core.task_types import TaskSnapshot
from kairos.lib.exceptions import NotFoundError, ValidationError
from kairos.models.context import Context
from kairos.models.habit_completion import HabitCompletion
from kairos.models.task import UPDATABLE_FIELDS, Task
from kairos.models.user import PLAN_FREE, User

_CREATE_FIELDS: frozenset[str] = UPDATABLE_FIELDS | {"user_id", "type"}
_CONTEXT_FIELDS: frozenset[str] = frozenset({
    "name", "description", "icon", "color", "coefficient", "archived", "is_inbox",
})


@dataclass(frozen=True)
class LoggedCompletion:
    """A habit completion row and the due date the habit had before it."""

    completed_at: datetime
    due_date_before: datetime | None


class TaskRepository(Protocol):
    """Task and habit-log persistence used by the completion engine."""

    def find_task(self, task_id: int) -> TaskSnapshot | None: ...

    def update_task(self, task_id: int, fields: Mapping[str, Any]) -> TaskSnapshot: ...

    def create_task(self, fields: Mapping[str, Any]) -> TaskSnapshot: ...

    def append_habit_completion(
        self, task_id: int, completed_at: datetime, due_date_before: datetime | None = None,
    ) -> None: ...

    def delete_most_recent_habit_completion(self, task_id: int) -> LoggedCompletion | None: ...

    def list_habit_completions(self, task_id: int) -> list[datetime]: ...

    def list_tasks_for_user(self, user_id: int) -> list[TaskSnapshot]: ...

    def find_context(self, context_id: int) -> ContextSnapshot | None: ...


class ContextRepository(Protocol):
    """Context persistence used by the inbox / archive rules."""

    def find_context(self, context_id: int) -> ContextSnapshot | None: ...

    def find_inbox_context(self, user_id: int) -> ContextSnapshot | None: ...

    def list_contexts_for_user(self, user_id: int, archived: bool | None = None) -> list[ContextSnapshot]: ...

    def create_context(self, fields: Mapping[str, Any]) -> ContextSnapshot: ...

    def update_context(self, context_id: int, fields: Mapping[str, Any]) -> ContextSnapshot: ...

    def count_contexts_for_user(self, user_id: int) -> int: ...

    def get_user_plan(self, user_id: int) -> str: ...

    def delete_incomplete_tasks_in_context(self, context_id: int) -> int: ...


class Repository(TaskRepository, ContextRepository, Protocol):
    """Both collaborators behind one object, as the API layer uses them."""


def _check_fields(fields: Mapping[str, Any], allowed: frozenset[str], entity: str) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValidationError(f"Unknown {entity} fields: {', '.join(sorted(unknown))}")


class SqlAlchemyRepository:
    """
    SQLAlchemy-backed implementation of both repository protocols.

    Args:
        session: Open SQLAlchemy session
        user_id: When set, every lookup is restricted to this owner
    """

    def __init__(self, session: DbSession, user_id: int | None = None) -> None:
        self._session = session
        self._user_id = user_id

    # =========================================================================
    # Tasks
    # =========================================================================

    def _get_task_row(self, task_id: int) -> Task | None:
        stmt = select(Task).where(Task.id == task_id)
        if self._user_id is not None:
            stmt = stmt.where(Task.user_id == self._user_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def _require_task_row(self, task_id: int) -> Task:
        row = self._get_task_row(task_id)
        if row is None:
            raise NotFoundError("Task", task_id)
        return row

    def find_task(self, task_id: int) -> TaskSnapshot | None:
        row = self._get_task_row(task_id)
        return row.to_snapshot() if row is not None else None

    def update_task(self, task_id: int, fields: Mapping[str, Any]) -> TaskSnapshot:
        _check_fields(fields, UPDATABLE_FIELDS, "task")
        row = self._require_task_row(task_id)
        for name, value in fields.items():
            setattr(row, name, list(value) if name == "tags" else value)
        self._session.flush()
        return row.to_snapshot()

    def create_task(self, fields: Mapping[str, Any]) -> TaskSnapshot:
        _check_fields(fields, _CREATE_FIELDS, "task")
        values = dict(fields)
        if "tags" in values:
            values["tags"] = list(values["tags"])
        row = Task(**values)
        self._session.add(row)
        self._session.flush()
        return row.to_snapshot()

    def append_habit_completion(
        self, task_id: int, completed_at: datetime, due_date_before: datetime | None = None,
    ) -> None:
        self._session.add(HabitCompletion(
            task_id=task_id, completed_at=completed_at, due_date_before=due_date_before,
        ))
        self._session.flush()

    def delete_most_recent_habit_completion(self, task_id: int) -> LoggedCompletion | None:
        stmt = (
            select(HabitCompletion)
            .where(HabitCompletion.task_id == task_id)
            .order_by(HabitCompletion.completed_at.desc(), HabitCompletion.id.desc())
            .limit(1)
        )
        latest = self._session.execute(stmt).scalar_one_or_none()
        if latest is None:
            return None
        entry = LoggedCompletion(latest.completed_at, latest.due_date_before)
        self._session.delete(latest)
        self._session.flush()
        return entry

    def list_habit_completions(self, task_id: int) -> list[datetime]:
        stmt = (
            select(HabitCompletion.completed_at)
            .where(HabitCompletion.task_id == task_id)
            .order_by(HabitCompletion.completed_at.asc(), HabitCompletion.id.asc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def list_tasks_for_user(self, user_id: int) -> list[TaskSnapshot]:
        stmt = select(Task).where(Task.user_id == user_id).order_by(Task.created_at.asc())
        return [row.to_snapshot() for row in self._session.execute(stmt).scalars().all()]

    def delete_incomplete_tasks_in_context(self, context_id: int) -> int:
        stmt = select(Task).where(Task.context_id == context_id, Task.completed.is_(False))
        if self._user_id is not None:
            stmt = stmt.where(Task.user_id == self._user_id)
        rows = self._session.execute(stmt).scalars().all()
        for row in rows:
            self._session.delete(row)
        self._session.flush()
        return len(rows)

    # =========================================================================
    # Contexts
    # =========================================================================

    def _get_context_row(self, context_id: int) -> Context | None:
        stmt = select(Context).where(Context.id == context_id)
        if self._user_id is not None:
            stmt = stmt.where(Context.user_id == self._user_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def find_context(self, context_id: int) -> ContextSnapshot | None:
        row = self._get_context_row(context_id)
        return row.to_snapshot() if row is not None else None

    def find_inbox_context(self, user_id: int) -> ContextSnapshot | None:
        stmt = (
            select(Context)
            .where(Context.user_id == user_id, Context.is_inbox.is_(True))
            .order_by(Context.id.asc())
            .limit(1)
        )
        row = self._session.execute(stmt).scalar_one_or_none()
        return row.to_snapshot() if row is not None else None

    def list_contexts_for_user(self, user_id: int, archived: bool | None = None) -> list[ContextSnapshot]:
        stmt = select(Context).where(Context.user_id == user_id)
        if archived is not None:
            stmt = stmt.where(Context.archived.is_(archived))
        stmt = stmt.order_by(Context.name.asc())
        return [row.to_snapshot() for row in self._session.execute(stmt).scalars().all()]

    def create_context(self, fields: Mapping[str, Any]) -> ContextSnapshot:
        _check_fields(fields, _CONTEXT_FIELDS | {"user_id"}, "context")
        row = Context(**fields)
        self._session.add(row)
        self._session.flush()
        return row.to_snapshot()

    def update_context(self, context_id: int, fields: Mapping[str, Any]) -> ContextSnapshot:
        _check_fields(fields, _CONTEXT_FIELDS, "context")
        row = self._get_context_row(context_id)
        if row is None:
            raise NotFoundError("Context", context_id)
        for name, value in fields.items():
            setattr(row, name, value)
        self._session.flush()
        return row.to_snapshot()

    def count_contexts_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Context).where(Context.user_id == user_id)
        return int(self._session.execute(stmt).scalar_one())

    def get_user_plan(self, user_id: int) -> str:
        user = self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user.plan or PLAN_FREE


__all__ = ["LoggedCompletion", "TaskRepository", "ContextRepository", "Repository", "SqlAlchemyRepository"]
