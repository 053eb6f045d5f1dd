"""
Context rules for Kairos: the inbox, plan limits and archiving.

Every user has at most one inbox context. Tasks created without a context
land there, and it can be neither modified nor archived. Archiving any
other context deletes its open tasks and keeps the completed ones as
history.
"""

from __future__ import annotations

import logging
from typing import Any

from kairos.config.settings import Settings, get_settings
from kairos.core.context_types import INBOX_NAME, ContextSnapshot
from kairos.lib.exceptions import LimitReachedError, NotFoundError, StateError, ValidationError
from kairos.models.user import PLAN_FREE
from kairos.services.repository import ContextRepository

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_ICON = "Home"
DEFAULT_CONTEXT_COLOR = "bg-gray-500"

_INBOX_FIELDS: dict[str, Any] = {
    "name": INBOX_NAME,
    "description": "Default context for new tasks",
    "icon": "Inbox",
    "color": "bg-blue-500",
    "coefficient": 0.0,
    "is_inbox": True,
}


def max_contexts_for_plan(plan: str, settings: Settings | None = None) -> int | None:
    """Context limit for a plan; None means unlimited."""
    settings = settings or get_settings()
    if settings.self_hosted or plan != PLAN_FREE:
        return None
    return settings.max_contexts_free


def get_or_create_inbox_context(repository: ContextRepository, user_id: int) -> ContextSnapshot:
    """Return the user's inbox, creating it on first use."""
    inbox = repository.find_inbox_context(user_id)
    if inbox is not None:
        return inbox

    inbox = repository.create_context({**_INBOX_FIELDS, "user_id": user_id})
    logger.info("Created inbox context %s for user %s", inbox.id, user_id)
    return inbox


def _require_context(repository: ContextRepository, context_id: int) -> ContextSnapshot:
    context = repository.find_context(context_id)
    if context is None:
        raise NotFoundError("Context", context_id)
    return context


def _clean_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Context name is required")
    return name.strip()


def create_context(
    repository: ContextRepository,
    user_id: int,
    name: str,
    description: str | None = None,
    icon: str | None = None,
    color: str | None = None,
    coefficient: float = 0.0,
    settings: Settings | None = None,
) -> ContextSnapshot:
    """
    Create a context, enforcing the plan's context limit.

    The inbox counts towards the limit like any other context.

    Raises:
        ValidationError: If the name is blank.
        LimitReachedError: If the plan allows no more contexts.
    """
    clean_name = _clean_name(name)

    limit = max_contexts_for_plan(repository.get_user_plan(user_id), settings)
    if limit is not None and repository.count_contexts_for_user(user_id) >= limit:
        raise LimitReachedError("contexts", limit)

    context = repository.create_context({
        "user_id": user_id,
        "name": clean_name,
        "description": description or None,
        "icon": icon or DEFAULT_CONTEXT_ICON,
        "color": color or DEFAULT_CONTEXT_COLOR,
        "coefficient": float(coefficient or 0.0),
    })
    logger.info("Created context %s for user %s", context.id, user_id)
    return context


def update_context(
    repository: ContextRepository,
    context_id: int,
    name: str,
    description: str | None = None,
    icon: str | None = None,
    color: str | None = None,
    coefficient: float = 0.0,
) -> ContextSnapshot:
    """
    Replace a context's editable fields.

    Raises:
        NotFoundError: If the context is missing.
        StateError: If it is the inbox.
        ValidationError: If the name is blank.
    """
    context = _require_context(repository, context_id)
    if context.is_inbox:
        raise StateError("Inbox context cannot be modified")

    return repository.update_context(context_id, {
        "name": _clean_name(name),
        "description": description or None,
        "icon": icon or DEFAULT_CONTEXT_ICON,
        "color": color or DEFAULT_CONTEXT_COLOR,
        "coefficient": float(coefficient or 0.0),
    })


def archive_context(repository: ContextRepository, context_id: int) -> ContextSnapshot:
    """
    Archive a context, deleting its open tasks.

    Raises:
        NotFoundError: If the context is missing.
        StateError: If it is the inbox.
    """
    context = _require_context(repository, context_id)
    if context.is_inbox:
        raise StateError("Inbox context cannot be archived")

    deleted = repository.delete_incomplete_tasks_in_context(context_id)
    archived = repository.update_context(context_id, {"archived": True})
    logger.info("Archived context %s (deleted %d open tasks)", context_id, deleted)
    return archived


def unarchive_context(repository: ContextRepository, context_id: int) -> ContextSnapshot:
    """
    Bring an archived context back.

    Raises:
        NotFoundError: If no archived context has this id.
    """
    context = repository.find_context(context_id)
    if context is None or not context.archived:
        raise NotFoundError("Archived context", context_id)

    restored = repository.update_context(context_id, {"archived": False})
    logger.info("Unarchived context %s", context_id)
    return restored


def resolve_task_context(
    repository: ContextRepository,
    user_id: int,
    context_id: int | None,
) -> ContextSnapshot:
    """
    Context a new task should live in: the given one, or the inbox.

    Raises:
        NotFoundError: If ``context_id`` is given but not owned by the user.
        StateError: If the context is archived.
    """
    if context_id is None:
        return get_or_create_inbox_context(repository, user_id)

    context = _require_context(repository, context_id)
    if context.user_id != user_id:
        raise NotFoundError("Context", context_id)
    if context.archived:
        raise StateError(f"Context {context_id} is archived")
    return context


__all__ = [
    "DEFAULT_CONTEXT_ICON",
    "DEFAULT_CONTEXT_COLOR",
    "max_contexts_for_plan",
    "get_or_create_inbox_context",
    "create_context",
    "update_context",
    "archive_context",
    "unarchive_context",
    "resolve_task_context",
]
