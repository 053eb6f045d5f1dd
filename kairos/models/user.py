"""
User Model for Kairos.

Authentication lives outside this package; the model only anchors
ownership of contexts and tasks and records the subscription plan.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from kairos.models.base import Base

PLAN_FREE = "FREE"
PLAN_PRO = "PRO"


class User(Base):
    """
    Owner of contexts and tasks.

    Attributes:
        id: Primary key
        email: Login email (unique)
        name: Display name
        plan: Subscription plan (FREE | PRO)
        created_at: Creation timestamp
    """

    __tablename__ = "users"

    # Relationships
    contexts = relationship("Context", back_populates="user", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    plan = Column(String(10), default=PLAN_FREE, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, plan={self.plan})>"


__all__ = ["User", "PLAN_FREE", "PLAN_PRO"]
