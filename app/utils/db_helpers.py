"""
Database Helper Utilities for Concurrency Control

Provides:
- Database dialect detection (PostgreSQL vs SQLite)
- Translation of SQLAlchemy failures into the inventory error taxonomy
- A scoped transaction for multi-statement writes
- Row locking and compare-and-decrement for capacity counters
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def is_postgres(db: Session) -> bool:
    """Check if the database is PostgreSQL"""
    try:
        return db.bind.dialect.name == 'postgresql'
    except AttributeError:
        return False


@contextmanager
def store_guard(db: Session, operation: str) -> Iterator[Session]:
    """
    Run store statements, converting driver/ORM failures.

    IntegrityError becomes ConflictError, any other SQLAlchemyError
    becomes StoreUnavailableError. The session is rolled back first so it
    stays usable for the caller.
    """
    try:
        yield db
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity violation during {operation}: {e.orig}")
        raise ConflictError(
            "Write conflicts with existing inventory data",
            operation=operation,
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store failure during {operation}: {e}")
        raise StoreUnavailableError(operation=operation) from e


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[Session]:
    """
    Scoped transaction: commit on success, roll back on any error.

    Example:
        with atomic(db, "upsert_range"):
            db.execute(delete(...))
            db.add(new_range)
    """
    with store_guard(db, operation):
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise


def acquire_row_lock(
    db: Session,
    model: Type[T],
    filter_condition,
    nowait: bool = False,
) -> Optional[T]:
    """
    Acquire a row-level lock on a database record.

    Args:
        db: Database session
        model: SQLAlchemy model class
        filter_condition: Filter to find the row
        nowait: If True, raise error immediately if lock unavailable (PostgreSQL only)

    Returns:
        The locked model instance, or None if not found
    """
    query = db.query(model).filter(filter_condition)

    # Only apply locking on PostgreSQL
    if is_postgres(db):
        query = query.with_for_update(nowait=nowait) if nowait else query.with_for_update()

    return query.first()


def compare_and_decrement(
    db: Session,
    model: Type[T],
    filter_condition,
    column_name: str,
    amount: int,
    extra_values: Optional[dict] = None,
) -> bool:
    """
    Atomically decrement a counter only if it stays non-negative.

    Issues UPDATE ... SET col = col - amount WHERE <filter> AND col >= amount
    so two writers racing for the last unit cannot both succeed, on any dialect.

    Returns True if a row was decremented.
    """
    column = getattr(model, column_name)
    values = {column_name: column - amount}
    if extra_values:
        values.update(extra_values)

    result = db.execute(
        update(model)
        .where(filter_condition, column >= amount)
        .values(values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
