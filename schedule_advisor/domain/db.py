"""Roster database setup and session handling."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

DEFAULT_DB_URL = "sqlite:///schedule.db"


def _engine(db_url: str) -> Engine:
    return create_engine(db_url)


def init_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Create the roster, site, schedule and leave tables if missing."""
    Base.metadata.create_all(_engine(db_url))
    print(f"[INFO] Database initialized: {db_url}")


def get_session(db_url: str = DEFAULT_DB_URL) -> Session:
    return sessionmaker(bind=_engine(db_url))()


@contextmanager
def session_scope(db_url: str = DEFAULT_DB_URL) -> Iterator[Session]:
    """Session committed when the block succeeds and rolled back when it raises."""
    session = get_session(db_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Drop and recreate every table. All stored weeks, roster and leave are lost."""
    engine = _engine(db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print(f"[WARN] Database reset: {db_url}")
