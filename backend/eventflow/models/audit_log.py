"""AuditLogEntry ORM model.

Entity-agnostic, append-only. ``entity_id`` is deliberately not a foreign key
so any entity type can be logged. The integer primary key breaks ties between
entries sharing a creation timestamp.
"""
from sqlalchemy import Column, DateTime, Integer, JSON, String

from eventflow.database import Base
from eventflow.datetimes import utcnow


class AuditLogEntry(Base):
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    actor_id = Column(String(36), nullable=True)
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
