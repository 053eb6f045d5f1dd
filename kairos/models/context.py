"""
Context Model for Kairos.

A context groups tasks (Home, Work, ...). Its ``coefficient`` is added to
the urgency of every task inside it.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from kairos.core.context_types import ContextSnapshot
from kairos.models.base import Base


class Context(Base):
    """
    Context model.

    Attributes:
        id: Primary key
        user_id: Foreign key to users.id
        name: Display name
        description: Optional free text
        icon: Icon name used by the UI
        color: Color token used by the UI
        coefficient: Urgency offset for contained tasks
        archived: Hidden from active views when True
        is_inbox: Default catch-all context
        created_at / updated_at: Timestamps
    """

    __tablename__ = "contexts"

    # Relationships
    user = relationship("User", back_populates="contexts")
    tasks = relationship("Task", back_populates="context", cascade="all, delete-orphan")

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    icon = Column(String(50), default="Folder", nullable=False)
    color = Column(String(20), default="gray", nullable=False)
    coefficient = Column(Float, default=0.0, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)
    is_inbox = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        Index("idx_context_user_archived", "user_id", "archived"),
        Index("idx_context_user_inbox", "user_id", "is_inbox"),
    )

    def to_snapshot(self) -> ContextSnapshot:
        """Detach the fields the engine reads."""
        return ContextSnapshot(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            coefficient=float(self.coefficient or 0.0),
            archived=bool(self.archived),
            is_inbox=bool(self.is_inbox),
            description=self.description,
            icon=self.icon,
            color=self.color,
        )

    def __repr__(self) -> str:
        return f"<Context(id={self.id}, user_id={self.user_id}, inbox={self.is_inbox})>"


__all__ = ["Context"]
