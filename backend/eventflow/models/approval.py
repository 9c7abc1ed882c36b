"""Approval ORM model: one immutable row per reviewer decision."""
import enum

from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text

from eventflow.database import Base
from eventflow.datetimes import utcnow


class ApprovalDecision(str, enum.Enum):
    approved = "approved"
    needs_revisions = "needs_revisions"
    rejected = "rejected"


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    decision = Column(SAEnum(ApprovalDecision), nullable=False)
    reviewer_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    feedback_text = Column(Text, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
