"""
Database session management and the atomic unit of work used by every
ledger mutation.
"""
import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from app.core.exceptions import LedgerConsistencyError, LedgerNotFoundError
from app.db.base import Base

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    """
    Keyword arguments for create_engine.

    Server databases run at READ COMMITTED so that reads made after the trip
    lock is granted see everything committed by the mutation that held it.
    """
    options = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    if not database_url.startswith("sqlite"):
        options["isolation_level"] = "READ COMMITTED"
    return options


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables."""
    import app.models  # noqa: F401  registers all tables on Base.metadata
    Base.metadata.create_all(bind=engine)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block of writes as one unit: commit on success, roll back on any
    error. Storage failures are re-raised as LedgerConsistencyError so the
    caller sees a single error type for "nothing was written".
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Atomic unit rolled back on storage error: {e}", exc_info=True)
        raise LedgerConsistencyError("Operation failed and was rolled back") from e
    except Exception:
        db.rollback()
        logger.error("Atomic unit rolled back", exc_info=True)
        raise


def lock_trip(db: Session, trip_id: int):
    """
    Take a row lock on the trip so concurrent mutations of the same trip
    serialize for the rest of the current transaction.
    """
    from app.models.trip import Trip

    trip = db.query(Trip).filter(Trip.id == trip_id).with_for_update().first()
    if not trip:
        raise LedgerNotFoundError("Trip not found")
    return trip
