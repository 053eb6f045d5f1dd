"""Plain-data view of a context (Home, Work, Inbox, ...)."""

from __future__ import annotations

from dataclasses import dataclass

INBOX_NAME = "Inbox"


@dataclass(frozen=True)
class ContextSnapshot:
    """
    A user-defined grouping of tasks.

    Attributes:
        id: Primary key
        user_id: Owner
        name: Display name
        coefficient: Added verbatim to the urgency of every task it contains
        archived: Archived contexts are hidden from active views
        is_inbox: The default catch-all context (at most one per user)
        description / icon / color: Display only
    """

    id: int
    user_id: int
    name: str
    coefficient: float = 0.0
    archived: bool = False
    is_inbox: bool = False
    description: str | None = None
    icon: str | None = None
    color: str | None = None


__all__ = ["ContextSnapshot", "INBOX_NAME"]
