"""Database session management with connection pooling"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError

from ccb_gateway.config import settings
from ccb_gateway.domain.exceptions import ConcurrentUpdateError, DomainException, UnexpectedError
from ccb_gateway.infrastructure.observability.metrics import record_operation

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
    return {"pool_size": 10, "max_overflow": 10, "pool_recycle": 3600}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, operation: str) -> Iterator[Session]:
    """
    Commit the session when the block succeeds, roll back otherwise.

    Every exit records the operation outcome (success or rejected).
    Version mismatches on accounts and withdrawals surface as
    ConcurrentUpdateError; other database failures become UnexpectedError
    with the detail logged here.
    """
    try:
        yield db
        db.commit()
    except DomainException:
        db.rollback()
        record_operation(operation, success=False)
        raise
    except StaleDataError as e:
        db.rollback()
        record_operation(operation, success=False)
        logger.warning("Concurrent update rejected", extra={"operation": operation})
        raise ConcurrentUpdateError("Record was modified by another request, please retry") from e
    except SQLAlchemyError as e:
        db.rollback()
        record_operation(operation, success=False)
        logger.error(f"Database error during {operation}: {e}", extra={"operation": operation})
        raise UnexpectedError(f"Database failure during {operation}") from e
    else:
        record_operation(operation)
