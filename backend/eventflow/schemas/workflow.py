"""Pydantic schemas for workflow transitions, debriefs and planning views."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from eventflow.schemas.event import EventOut


class SubmitRequest(BaseModel):
    reviewer_id: Optional[str] = None


class DecisionRequest(BaseModel):
    decision: str  # approved, needs_revisions, rejected
    feedback: Optional[str] = None


class AssigneeRequest(BaseModel):
    assignee_id: Optional[str] = None


class DebriefIn(BaseModel):
    attendance: Optional[int] = None
    baseline_attendance: Optional[int] = None
    wet_takings: Optional[float] = None
    food_takings: Optional[float] = None
    baseline_wet_takings: Optional[float] = None
    baseline_food_takings: Optional[float] = None
    promo_effectiveness: Optional[int] = None
    highlights: Optional[str] = None
    issues: Optional[str] = None
    guest_sentiment_notes: Optional[str] = None
    operational_notes: Optional[str] = None
    would_book_again: Optional[bool] = None
    next_time_actions: Optional[str] = None


class DebriefOut(DebriefIn):
    event_id: str
    sales_uplift_value: Optional[float] = None
    sales_uplift_percent: Optional[float] = None
    submitted_by: str
    updated_at: datetime

    model_config = {"from_attributes": True}


class SlaOut(BaseModel):
    tone: str
    label: str
    action: Optional[str] = None
    diff_days: Optional[int] = None

    model_config = {"from_attributes": True}


class QueueItemOut(BaseModel):
    event: EventOut
    sla: SlaOut

    model_config = {"from_attributes": True}


class ConflictOut(BaseModel):
    event_id: str
    event_title: str
    conflicting_event_id: str
    conflicting_event_title: str
    venue_id: str
    venue_name: Optional[str] = None
    shared_spaces: list[str]
    label: str

    model_config = {"from_attributes": True}
