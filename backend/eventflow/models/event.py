"""Event ORM model."""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from eventflow.database import Base
from eventflow.datetimes import utcnow


class EventStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"
    needs_revisions = "needs_revisions"
    approved = "approved"
    rejected = "rejected"
    completed = "completed"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String(36), ForeignKey("venues.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    event_type = Column(String(100), nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=False, index=True)
    end_at = Column(DateTime(timezone=True), nullable=False)
    venue_space = Column(String(500), nullable=True)  # comma-delimited space names
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.draft)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    assignee_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    expected_headcount = Column(Integer, nullable=True)
    wet_promo = Column(Text, nullable=True)
    food_promo = Column(Text, nullable=True)
    cost_total = Column(Float, nullable=True)
    cost_details = Column(Text, nullable=True)
    goal_focus = Column(String(120), nullable=True)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    # Marketing fields added over time, keyed by the field registry
    public_fields = Column(JSON, nullable=False, default=dict)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    venue = relationship("Venue", lazy="joined")
    creator = relationship("User", foreign_keys=[created_by])
    assignee = relationship("User", foreign_keys=[assignee_id])
