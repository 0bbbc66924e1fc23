"""
Database session management
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ems.core.config import settings
from ems.core.exceptions import DependencyError
from ems.db.base import Base

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
    echo=False
)

# Create all tables automatically on startup for SQLite
if "sqlite" in settings.DATABASE_URL:
    import ems.models  # noqa: F401  registers every table on Base.metadata
    Base.metadata.create_all(bind=engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, operation: str) -> None:
    """
    Commit a primary write, turning store failures into DependencyError.

    The session is rolled back first so it stays usable by the caller's
    error handling.
    """
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store failure during %s: %s", operation, exc)
        raise DependencyError(f"Could not complete {operation}; please retry") from exc
