"""Unit-of-work helper for multi-step workflow writes.

Each step inside ``atomic`` is flushed on its own so a failure is attributed
to the step that caused it. Any failure rolls back every step already applied
in the block; if that rollback fails too the sequence is left partially
applied and CompensationError is raised for manual follow-up.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.errors import CompensationError, StoreError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[None]:
    try:
        yield
        db.commit()
    except (SQLAlchemyError, StoreError) as exc:
        logger.error("Store failure during %s, undoing applied steps: %s", operation, exc)
        try:
            db.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.critical("Rollback failed during %s; data may be inconsistent: %s", operation, rollback_exc)
            raise CompensationError(
                f"Could not {operation}: the change was partially applied and needs investigation."
            ) from rollback_exc
        if isinstance(exc, StoreError):
            raise
        raise StoreError(f"Could not {operation} just now.") from exc


def flush(db: Session, step: str) -> None:
    """Flush pending writes, naming the step in the StoreError on failure."""
    try:
        db.flush()
    except SQLAlchemyError as exc:
        raise StoreError(f"Could not {step}.") from exc
