"""
Database engine, session factory and declarative base
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
import logging

from quizattempts.config import settings
from quizattempts.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

if settings.DATABASE_URL.startswith("sqlite"):
    # Local development and tests
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False}
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_conflict(db, context: str = "attempt"):
    """
    Commit the session, translating optimistic-lock failures

    Raises:
        ConcurrencyConflictError: another writer updated the row first
    """
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Concurrent update detected on {context}: {str(e)}")
        raise ConcurrencyConflictError(
            f"The {context} was modified concurrently. Reload it and retry."
        ) from e
    except Exception:
        db.rollback()
        raise


def check_connection(bind=None) -> bool:
    """Run a trivial query; used by the health endpoint"""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def init_db(bind=None):
    """Create all tables"""
    # Import models so they register on Base.metadata
    import quizattempts.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
