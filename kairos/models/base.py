"""
SQLAlchemy Base for Kairos.

This module provides the declarative base for all SQLAlchemy models.

Usage:
    from kairos.models.base import Base

    class MyModel(Base):
        __tablename__ = "my_table"
        ...
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base shared by every Kairos model."""


__all__ = ["Base"]
