"""Event API routes: thin adapters over the lifecycle services."""
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventflow.database import get_db
from eventflow.dependencies import get_actor
from eventflow.schemas.event import (
    ApprovalOut,
    AuditLogOut,
    EventFields,
    EventOut,
    TimelineEntryOut,
    VersionOut,
)
from eventflow.schemas.workflow import (
    AssigneeRequest,
    DebriefIn,
    DebriefOut,
    DecisionRequest,
    SlaOut,
    SubmitRequest,
)
from eventflow.models.approval import Approval
from eventflow.services import (
    audit_service,
    debrief_service,
    diff_service,
    event_service,
    review_service,
    sla_service,
    version_service,
)
from eventflow.services.policy import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventFields, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Create a draft event (version 1 + ``event.created`` audit entry)."""
    return event_service.create_draft(db, actor, payload.model_dump(exclude_unset=True))


@router.get("/", response_model=list[EventOut])
def list_events(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Events visible to the caller: planners see all, managers their own, reviewers their queue."""
    return review_service.list_events_for(db, actor)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventFields,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Save a draft (only fields sent in the body are changed)."""
    return event_service.update_draft(db, event_id, actor, payload.model_dump(exclude_unset=True))


@router.post("/{event_id}/submit", response_model=EventOut)
def submit_event(
    event_id: str,
    payload: SubmitRequest | None = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    reviewer_id = payload.reviewer_id if payload else None
    return event_service.submit_event(db, event_id, actor, reviewer_id=reviewer_id)


@router.post("/{event_id}/decision", response_model=EventOut)
def record_decision(
    event_id: str,
    payload: DecisionRequest,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return event_service.record_decision(db, event_id, actor, payload.decision, payload.feedback)


@router.post("/{event_id}/assignee", response_model=EventOut)
def update_assignee(
    event_id: str,
    payload: AssigneeRequest,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return event_service.reassign_event(db, event_id, actor, payload.assignee_id)


@router.put("/{event_id}/debrief", response_model=DebriefOut)
def submit_debrief(
    event_id: str,
    payload: DebriefIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Upsert the debrief and mark the event completed."""
    return debrief_service.submit_debrief(db, event_id, actor, payload.model_dump())


@router.get("/{event_id}/versions", response_model=list[VersionOut])
def list_versions(event_id: str, db: Session = Depends(get_db)):
    event_service.get_event(db, event_id)
    return version_service.list_versions(db, event_id)


@router.get("/{event_id}/approvals", response_model=list[ApprovalOut])
def list_approvals(event_id: str, db: Session = Depends(get_db)):
    event_service.get_event(db, event_id)
    return (
        db.query(Approval)
        .filter(Approval.event_id == event_id)
        .order_by(Approval.decided_at, Approval.id)
        .all()
    )


@router.get("/{event_id}/audit", response_model=list[AuditLogOut])
def list_audit(event_id: str, db: Session = Depends(get_db)):
    return audit_service.list_audit_log(db, event_id)


@router.get("/{event_id}/timeline", response_model=list[TimelineEntryOut])
def get_timeline(
    event_id: str,
    source: str = Query("all", description="all, manual or ai"),
    db: Session = Depends(get_db),
):
    """Manual saves and generated-copy history merged newest first."""
    event_service.get_event(db, event_id)
    entries = diff_service.build_timeline(db, event_id, source=source)
    return [TimelineEntryOut.model_validate(entry) for entry in entries]


@router.get("/{event_id}/sla", response_model=SlaOut)
def get_sla(event_id: str, db: Session = Depends(get_db)):
    event = event_service.get_event(db, event_id)
    return SlaOut.model_validate(sla_service.get_sla_status(event.start_at))
