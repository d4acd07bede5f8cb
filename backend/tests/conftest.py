"""
Test configuration and shared fixtures for the VetCare test suite.

Uses a fresh file-backed SQLite database per test, so tests are isolated
without needing a PostgreSQL server, and threaded tests can share the
database through separate connections.
"""

import os

# Must be set before any application module reads its configuration
os.environ.setdefault("DATABASE_URL", "sqlite:///./vetcare_test.db")
os.environ["MAIL_ENABLED"] = "false"
os.environ.setdefault("CLINIC_TIMEZONE", "UTC")

import pytest
from typing import Callable, Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.database import Base, get_db
# Import all models to ensure they're registered with SQLAlchemy before any relationships are resolved
from models import User, Pet, Vet, AvailabilitySlot, Appointment, Payment  # noqa: F401


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """
    Create a database engine backed by a fresh SQLite file for one test.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'vetcare.db'}",
        connect_args={"check_same_thread": False},
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine) -> Callable[[], Session]:
    """Factory for independent sessions on the test database (one per thread/request)."""
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Provide a database session for a test."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(session_factory) -> Generator[TestClient, None, None]:
    """
    TestClient whose requests use the test database.

    Each request gets its own session, like get_db does in production.
    """
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
