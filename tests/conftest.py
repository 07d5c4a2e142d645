"""
Pytest Configuration and Fixtures.

Every test gets its own SQLite database file, so services run against a
real SQLAlchemy session (optimistic locking and the partial unique index
included) without needing Postgres or Redis.
"""
import os

# Settings are read at import time; configure before importing the package
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["CACHE_ENABLED"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from quizattempts.database import init_db
from quizattempts.schemas.quiz import QuizCreate
from quizattempts.services.attempt_service import AttemptService
from quizattempts.services.event_publisher import EventPublisher
from quizattempts.services.quiz_catalog import QuizCatalog
from quizattempts.utils.cache import CacheService
from tests.helpers import FakeClock, FakeRedis, mc_question


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: HTTP API tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'attempts.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog():
    return QuizCatalog(cache=CacheService(enabled=False))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def service(catalog, clock, fake_redis):
    """AttemptService with a fixed clock and an in-memory event transport"""
    return AttemptService(
        catalog=catalog,
        publisher=EventPublisher(redis_client=fake_redis, key="test:events"),
        clock=clock,
    )


@pytest.fixture
def make_quiz(db, catalog):
    """Register a quiz and return its definition"""

    def _make_quiz(questions=None, difficulty="medium", estimated_time_minutes=10):
        payload = QuizCreate(
            title="Photosynthesis basics",
            difficulty=difficulty,
            estimated_time_minutes=estimated_time_minutes,
            questions=questions or [mc_question("q1", 0), mc_question("q2", 1), mc_question("q3", 2)],
        )
        return catalog.register_quiz(db, payload)

    return _make_quiz


@pytest.fixture
def quiz(make_quiz):
    """Three multiple-choice questions, medium, 10 minute estimate"""
    return make_quiz()
