"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

import logging
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from menu_booking.core.config import settings

logger = logging.getLogger(__name__)

_DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_pre_ping": True,
    "future": True,
}


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Engine options for the target dialect."""

    kwargs = dict(_DEFAULT_POOL_KWARGS)
    if db_url.startswith("sqlite"):
        # Requests run on worker threads; each session still owns its connection.
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout_seconds,
        }
    else:
        kwargs.update({"pool_size": 5, "max_overflow": 10, "pool_timeout": 5, "pool_recycle": 300})
    kwargs["echo"] = settings.database_echo
    return kwargs


def build_engine(db_url: Optional[str] = None) -> Engine:
    url = settings.get_database_url(db_url)
    new_engine = create_engine(url, **_build_engine_kwargs(url))
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _sqlite_on_connect)
    return new_engine


def _sqlite_on_connect(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    logger.debug("SQLite connection established")


engine: Engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables. Intended for local runs and tests; production uses Alembic."""
    from menu_booking import models  # noqa: F401  (registers mappers)

    Base.metadata.create_all(bind=bind or engine)


__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "engine",
    "get_db",
    "init_db",
]
