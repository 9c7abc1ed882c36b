"""Version store: immutable, gap-free numbered snapshots per event."""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.datetimes import isoformat
from eventflow.errors import StoreError
from eventflow.models.event import Event
from eventflow.models.event_version import EventVersion
from eventflow.services import store
from eventflow.services.diff_service import is_empty
from eventflow.services.field_registry import CORE_FIELDS, EXTENSION_FIELDS

logger = logging.getLogger(__name__)


def event_snapshot(event: Event, include_empty: bool = True) -> dict[str, Any]:
    """JSON-safe snapshot of every editable field of an event."""
    snapshot: dict[str, Any] = {}
    for field in CORE_FIELDS:
        value = getattr(event, field)
        if isinstance(value, datetime):
            value = isoformat(value)
        snapshot[field] = value
    public = event.public_fields or {}
    for field in EXTENSION_FIELDS:
        snapshot[field] = public.get(field)
    if not include_empty:
        snapshot = {k: v for k, v in snapshot.items() if not is_empty(v)}
    return snapshot


def next_version_number(db: Session, event_id: str) -> int:
    try:
        latest = db.query(func.max(EventVersion.version)).filter(EventVersion.event_id == event_id).scalar()
    except SQLAlchemyError as exc:
        raise StoreError("Could not read the latest event version.") from exc
    return (latest or 0) + 1


def stage_version(
    db: Session,
    event_id: str,
    actor_id: Optional[str],
    payload: dict[str, Any],
    submitted_at: Optional[datetime] = None,
) -> EventVersion:
    """Insert the next version inside the caller's unit of work.

    The unique (event_id, version) constraint turns a racing writer into a
    StoreError instead of a duplicate number.
    """
    version = EventVersion(
        event_id=event_id,
        version=next_version_number(db, event_id),
        payload=payload,
        submitted_by=actor_id,
        submitted_at=submitted_at,
    )
    db.add(version)
    store.flush(db, "log the event version")
    logger.debug("Staged version %d for event %s", version.version, event_id)
    return version


def list_versions(db: Session, event_id: str) -> list[EventVersion]:
    try:
        return (
            db.query(EventVersion)
            .filter(EventVersion.event_id == event_id)
            .order_by(EventVersion.version)
            .all()
        )
    except SQLAlchemyError as exc:
        raise StoreError("Could not load event versions.") from exc


def latest_version(db: Session, event_id: str) -> Optional[EventVersion]:
    try:
        return (
            db.query(EventVersion)
            .filter(EventVersion.event_id == event_id)
            .order_by(EventVersion.version.desc())
            .first()
        )
    except SQLAlchemyError as exc:
        raise StoreError("Could not load event versions.") from exc
