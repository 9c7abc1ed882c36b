"""Audit logger: append-only "who did what to which entity" records.

Audit writes are advisory. ``record_audit_entry`` commits on its own and a
failure is logged and swallowed so it never undoes or blocks the workflow
step that triggered it.
"""
import json
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.errors import StoreError
from eventflow.models.audit_log import AuditLogEntry

logger = logging.getLogger(__name__)

EVENT_ENTITY = "event"


def _serialise_meta(meta: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if meta is None:
        return None
    try:
        return json.loads(json.dumps(meta, default=str))
    except (TypeError, ValueError) as exc:
        logger.warning("Could not serialise audit meta: %s", exc)
        return None


def record_audit_entry(
    db: Session,
    entity_id: str,
    action: str,
    actor_id: Optional[str],
    meta: Optional[dict[str, Any]] = None,
    entity_type: str = EVENT_ENTITY,
) -> Optional[AuditLogEntry]:
    """Append one audit entry; returns None when the insert failed."""
    entry = AuditLogEntry(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        meta=_serialise_meta(meta),
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Failed to record audit entry %s for %s %s: %s", action, entity_type, entity_id, exc)
        return None
    logger.info("Audit %s on %s %s by %s", action, entity_type, entity_id, actor_id)
    return entry


def list_audit_log(db: Session, entity_id: str, entity_type: str = EVENT_ENTITY) -> list[AuditLogEntry]:
    """Entries for one entity, oldest first; insertion order breaks ties."""
    try:
        return (
            db.query(AuditLogEntry)
            .filter(AuditLogEntry.entity_type == entity_type, AuditLogEntry.entity_id == entity_id)
            .order_by(AuditLogEntry.created_at, AuditLogEntry.id)
            .all()
        )
    except SQLAlchemyError as exc:
        raise StoreError(f"Could not load audit log: {exc}") from exc
