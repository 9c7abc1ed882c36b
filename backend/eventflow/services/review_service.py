"""Read surfaces for reviewers and planners."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.errors import StoreError
from eventflow.models.event import Event, EventStatus
from eventflow.models.user import UserRole
from eventflow.services.event_service import DECISION_STATES
from eventflow.services.policy import Actor
from eventflow.services.sla_service import SlaStatus, get_sla_status


@dataclass
class QueueItem:
    event: Event
    sla: SlaStatus


def review_queue(db: Session, actor: Actor, now: Optional[datetime] = None) -> list[QueueItem]:
    """Events awaiting a decision, soonest first; reviewers only see their own."""
    query = db.query(Event).filter(Event.status.in_(list(DECISION_STATES)))
    if actor.role == UserRole.reviewer:
        query = query.filter(Event.assignee_id == actor.id)
    try:
        events = query.order_by(Event.start_at).all()
    except SQLAlchemyError as exc:
        raise StoreError("Unable to load the review queue.") from exc
    return [QueueItem(event=event, sla=get_sla_status(event.start_at, now=now)) for event in events]


def list_events_for(db: Session, actor: Actor) -> list[Event]:
    query = db.query(Event)
    if actor.role == UserRole.venue_manager:
        query = query.filter(Event.created_by == actor.id)
    elif actor.role == UserRole.reviewer:
        query = query.filter(Event.assignee_id == actor.id)
    try:
        return query.order_by(Event.start_at).all()
    except SQLAlchemyError as exc:
        raise StoreError("Unable to load events.") from exc


def status_counts(db: Session) -> dict[str, int]:
    counts = {status.value: 0 for status in EventStatus}
    try:
        rows = db.query(Event.status, func.count(Event.id)).group_by(Event.status).all()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load status counts.") from exc
    for status, count in rows:
        counts[EventStatus(status).value] = count
    return counts
