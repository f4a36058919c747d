"""
Shared fixtures for service and API tests.

Each test gets a fresh in-memory SQLite database.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from brainwave.config import get_settings
from brainwave.database import Base, get_db
from brainwave.models import user, topic, message  # noqa: F401 (register tables)
from brainwave.services.message_service import MessageManager
from brainwave.services.topic_service import TopicManager
from brainwave.services.user_service import UserManager

# Minimum bcrypt cost keeps hashing fast in tests
get_settings().security.BCRYPT_ROUNDS = 4


@pytest.fixture
def engine():
    """In-memory database shared by every session of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Database session for service-level tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    return UserManager(db)


@pytest.fixture
def topics(db, users):
    return TopicManager(db, users)


@pytest.fixture
def messages(db, users, topics):
    return MessageManager(db, users, topics)


@pytest.fixture
def client(session_factory):
    """FastAPI test client bound to the test database."""
    from main import app

    def override_get_db():
        """Override database dependency for testing."""
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
