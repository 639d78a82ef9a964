"""Database configuration for the expense tracking backend."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from expense_tracker.config import get_settings

LOG = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create the engine and make sure the SQLite data folder exists."""
    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, connect_args=connect_args, future=True)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

Base = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    """Create the expenses table if it does not already exist."""
    from . import models  # noqa: F401  # Import models for metadata registration

    target = bind or engine
    Base.metadata.create_all(bind=target)
    LOG.info("Database schema initialised at %s", target.url.render_as_string(hide_password=True))


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency that provides a database session."""
    with session_scope() as session:
        yield session
