"""Pydantic schemas for Events and their history."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class EventFields(BaseModel):
    """Editable fields; values are normalised by the field registry."""

    venue_id: Optional[str] = None
    title: Optional[str] = None
    event_type: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    venue_space: Optional[str] = None
    expected_headcount: Optional[int] = None
    wet_promo: Optional[str] = None
    food_promo: Optional[str] = None
    cost_total: Optional[float] = None
    cost_details: Optional[str] = None
    goal_focus: Optional[str] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    public_title: Optional[str] = None
    public_teaser: Optional[str] = None
    public_description: Optional[str] = None
    booking_url: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_slug: Optional[str] = None


class EventOut(BaseModel):
    id: str
    venue_id: str
    title: str
    event_type: Optional[str] = None
    start_at: datetime
    end_at: datetime
    venue_space: Optional[str] = None
    status: str
    created_by: str
    assignee_id: Optional[str] = None
    expected_headcount: Optional[int] = None
    wet_promo: Optional[str] = None
    food_promo: Optional[str] = None
    cost_total: Optional[float] = None
    cost_details: Optional[str] = None
    goal_focus: Optional[str] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    public_fields: dict[str, Any] = {}
    submitted_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class VersionOut(BaseModel):
    event_id: str
    version: int
    payload: dict[str, Any]
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApprovalOut(BaseModel):
    event_id: str
    decision: str
    reviewer_id: str
    feedback_text: Optional[str] = None
    decided_at: datetime

    model_config = {"from_attributes": True}


class AuditLogOut(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    action: str
    actor_id: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class FieldChangeOut(BaseModel):
    field: str
    before: Any = None
    after: Any = None
    source: str

    model_config = {"from_attributes": True}


class TimelineEntryOut(BaseModel):
    kind: str
    version: int
    occurred_at: datetime
    actor_id: Optional[str] = None
    changes: list[FieldChangeOut] = []

    model_config = {"from_attributes": True}
