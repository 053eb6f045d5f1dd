"""
FastAPI Dependencies for the database session and caller identity.

Authentication happens upstream; by the time a request arrives here the
caller's id is carried in the ``X-User-Id`` header.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from kairos.config.settings import get_settings
from kairos.services.repository import SqlAlchemyRepository

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Process-wide engine built from ``KAIROS_DATABASE_URL``."""
    database_url = get_settings().database_url
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Iterator[Session]:
    """One session per request; rolled back if the handler raised."""
    db = get_session_factory()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """
    Caller identity from the ``X-User-Id`` header.

    Raises HTTPException 401 if the header is missing or not an integer.
    """
    if x_user_id is None or not x_user_id.strip().isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return int(x_user_id.strip())


def get_repository(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> SqlAlchemyRepository:
    """Repository scoped to the calling user."""
    return SqlAlchemyRepository(db, user_id=user_id)


__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_current_user_id",
    "get_repository",
]
