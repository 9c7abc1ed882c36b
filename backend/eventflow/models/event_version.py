"""EventVersion ORM model: append-only numbered snapshots of an event."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, UniqueConstraint

from eventflow.database import Base
from eventflow.datetimes import utcnow


class EventVersion(Base):
    __tablename__ = "event_versions"
    __table_args__ = (UniqueConstraint("event_id", "version", name="uq_event_versions_event_version"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    submitted_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)  # null for unsubmitted drafts
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
