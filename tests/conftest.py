"""Shared pytest configuration: in-memory database and an API test client."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest

# Must be set before the backend builds its process-wide engine.
os.environ.setdefault("EXPENSE_TRACKER_DATABASE_URL", "sqlite://")
os.environ.setdefault("EXPENSE_TRACKER_ENV", "development")


def _insert_repo_root() -> None:
    """Make the repository root importable when the package is not installed."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import expense_tracker.backend.models  # noqa: E402,F401  # Ensure models are registered with metadata
from expense_tracker.backend import database  # noqa: E402
from expense_tracker.backend.database import Base  # noqa: E402
from expense_tracker.backend.server import app  # noqa: E402


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    log_level = os.environ.get("EXPENSE_TRACKER_LOG_LEVEL", "INFO")
    return [f"expense-tracker repo: {Path.cwd()}", f"EXPENSE_TRACKER_LOG_LEVEL={log_level}"]


def make_memory_engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=test_engine)
    return test_engine


@pytest.fixture(scope="session")
def engine():
    test_engine = make_memory_engine()
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture()
def db_session(engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    TestingSessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False, future=True)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def client(db_session) -> Iterator[TestClient]:
    def override_get_db():
        yield db_session

    app.dependency_overrides[database.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
