"""
Custom exception hierarchy for Kairos.

All exceptions inherit from KairosException, enabling a catch-all for
Kairos-specific errors while keeping the ability to catch specific
error types.

Taxonomy:
- ValidationError: caller-supplied data is structurally invalid
- NotFoundError: referenced task/context is missing or owned by someone else
- StateError: invalid state transition (e.g. archiving the inbox)
- UnknownTaskTypeError: unrecognized task variant in completion dispatch
- ConfigurationError: invalid settings or urgency constants
- LimitReachedError: the plan does not allow another context

Idempotent no-ops (uncompleting a task without history) never raise.
"""

from __future__ import annotations


class KairosException(Exception):
    """Base exception for all Kairos errors."""


class ConfigurationError(KairosException):
    """Missing environment variables, invalid config values, or startup failures."""


class ValidationError(KairosException):
    """Structurally invalid input, e.g. a recurring task without a frequency."""


class NotFoundError(KairosException):
    """A referenced task or context does not exist for the calling user."""

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class StateError(KairosException):
    """Invalid state transitions, missing required state."""


class UnknownTaskTypeError(StateError):
    """Completion dispatch met a task type it does not know. Programmer error."""

    def __init__(self, task_type: object) -> None:
        self.task_type = task_type
        super().__init__(f"Unknown task type: {task_type!r}")


class LimitReachedError(KairosException):
    """The user's plan does not allow creating another resource."""

    def __init__(self, resource: str, limit: int) -> None:
        self.resource = resource
        self.limit = limit
        super().__init__(f"Plan limit reached: at most {limit} {resource}")


__all__ = [
    "KairosException",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "StateError",
    "UnknownTaskTypeError",
    "LimitReachedError",
]
