"""AiContentVersion ORM model.

History of generated marketing metadata for an event. Written by the copy
generation integration; the workflow core only reads it to build timelines.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String

from eventflow.database import Base
from eventflow.datetimes import utcnow


class AiContentVersion(Base):
    __tablename__ = "ai_content_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    generated_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
