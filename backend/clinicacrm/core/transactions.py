"""
Database transaction management utilities.

Provides a context manager for safe database transactions with automatic
rollback on error.

Usage:
    with transaction(db):
        db.add(note)
        # Automatically commits on success, rolls back on error
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError


logger = logging.getLogger(__name__)


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """
    Context manager for database transactions with automatic rollback.

    Ensures that all database operations within the context succeed together
    or all fail together. Automatically commits on success, rolls back on error.

    Args:
        db: SQLAlchemy database session

    Yields:
        The same database session

    Raises:
        Any exception raised within the context
    """
    try:
        yield db
        db.commit()
        logger.debug("Transaction committed successfully")
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back due to error: {e}")
        raise


def safe_commit(db: Session) -> bool:
    """
    Safely commit a database session with error handling.

    Returns True on success, False on error (with automatic rollback).
    Used for non-critical writes such as API key usage counters.

    Args:
        db: SQLAlchemy database session

    Returns:
        True if commit succeeded, False if it failed
    """
    try:
        db.commit()
        return True
    except SQLAlchemyError as e:
        logger.error(f"Commit failed: {e}")
        db.rollback()
        return False
