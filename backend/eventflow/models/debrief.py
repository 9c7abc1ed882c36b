"""Debrief ORM model: post-event outcomes, one row per event (upserted)."""
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from eventflow.database import Base
from eventflow.datetimes import utcnow


class Debrief(Base):
    __tablename__ = "debriefs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, unique=True)
    attendance = Column(Integer, nullable=True)
    baseline_attendance = Column(Integer, nullable=True)
    wet_takings = Column(Float, nullable=True)
    food_takings = Column(Float, nullable=True)
    baseline_wet_takings = Column(Float, nullable=True)
    baseline_food_takings = Column(Float, nullable=True)
    promo_effectiveness = Column(Integer, nullable=True)  # 1-5
    highlights = Column(Text, nullable=True)
    issues = Column(Text, nullable=True)
    guest_sentiment_notes = Column(Text, nullable=True)
    operational_notes = Column(Text, nullable=True)
    would_book_again = Column(Boolean, nullable=True)
    next_time_actions = Column(Text, nullable=True)
    sales_uplift_value = Column(Float, nullable=True)
    sales_uplift_percent = Column(Float, nullable=True)
    submitted_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
