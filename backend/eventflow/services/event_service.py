"""Event lifecycle state machine.

Responsibilities:
- Status graph: draft -> submitted -> {needs_revisions, approved, rejected};
  needs_revisions -> submitted; approved -> completed
- Access policy per operation (services.policy), checked after the status
  precondition
- Version snapshot on every save and every transition
- Approval row for every reviewer decision
- Audit entry and notifications once the primary writes have committed

The primary writes of each operation (event row, version, approval) go
through ``store.atomic``: they land together or not at all. Audit entries and
notifications are advisory and never undo a committed step.
"""
import logging
from datetime import datetime
from typing import Any, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.datetimes import as_utc, isoformat, utcnow
from eventflow.errors import NotFoundError, PreconditionError, StoreError, ValidationError
from eventflow.models.approval import Approval, ApprovalDecision
from eventflow.models.event import Event, EventStatus
from eventflow.models.user import User, UserRole
from eventflow.models.venue import Venue
from eventflow.services import audit_service, notification_service, store, version_service
from eventflow.services.field_registry import label_for, normalise_fields, split_fields
from eventflow.services.policy import Actor, Operation, authorize

logger = logging.getLogger(__name__)

TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.draft: frozenset({EventStatus.submitted}),
    EventStatus.submitted: frozenset({
        EventStatus.needs_revisions, EventStatus.approved, EventStatus.rejected,
    }),
    # Decisions may still be recorded while revisions are outstanding
    EventStatus.needs_revisions: frozenset({
        EventStatus.submitted, EventStatus.needs_revisions, EventStatus.approved, EventStatus.rejected,
    }),
    EventStatus.approved: frozenset({EventStatus.completed}),
    EventStatus.rejected: frozenset(),
    EventStatus.completed: frozenset(),
}

EDITABLE_STATES = frozenset({EventStatus.draft, EventStatus.needs_revisions})
DECISION_STATES = frozenset({EventStatus.submitted, EventStatus.needs_revisions})
TERMINAL_STATES = frozenset({EventStatus.completed, EventStatus.rejected})

REQUIRED_FIELDS = {
    "venue_id": "Choose a venue",
    "title": "Add a short title",
    "start_at": "Add a start time",
    "end_at": "Add an end time",
}


# ── Status graph ───────────────────────────────────────────────────
def can_transition(current: EventStatus, target: EventStatus) -> bool:
    return EventStatus(target) in TRANSITIONS[EventStatus(current)]


def assert_transition(current: EventStatus, target: EventStatus) -> None:
    if not can_transition(current, target):
        raise PreconditionError(
            f"An event cannot move from {EventStatus(current).value} to {EventStatus(target).value}."
        )


def require_status(event: Event, allowed: frozenset[EventStatus], verb: str) -> None:
    if event.status not in allowed:
        states = " or ".join(sorted(s.value for s in allowed))
        raise PreconditionError(
            f"Only events that are {states} can {verb}; this one is {event.status.value}."
        )


# ── Lookups ────────────────────────────────────────────────────────
def get_event(db: Session, event_id: str) -> Event:
    try:
        event = db.query(Event).filter(Event.id == event_id).first()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load the event.") from exc
    if not event:
        raise NotFoundError("Event not found")
    return event


def _get_user(db: Session, user_id: Optional[str]) -> Optional[User]:
    if not user_id:
        return None
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load the user.") from exc


def list_planners(db: Session) -> list[User]:
    try:
        return db.query(User).filter(User.role == UserRole.central_planner).order_by(User.created_at).all()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load planners.") from exc


# ── Field checks ───────────────────────────────────────────────────
def _check_required(values: dict[str, Any]) -> None:
    missing = {field: message for field, message in REQUIRED_FIELDS.items() if not values.get(field)}
    if missing:
        raise ValidationError("Check the highlighted fields.", missing)
    if as_utc(values["start_at"]) >= as_utc(values["end_at"]):
        raise ValidationError("The event must end after it starts.", {"end_at": "End after the start time"})


def _check_venue(db: Session, venue_id: str) -> Venue:
    try:
        venue = db.query(Venue).filter(Venue.id == venue_id).first()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load the venue.") from exc
    if not venue:
        raise ValidationError("Choose a venue before saving.", {"venue_id": "Choose a venue"})
    return venue


def _stored_value(event: Event, field: str, is_extension: bool) -> Any:
    if is_extension:
        return (event.public_fields or {}).get(field)
    value = getattr(event, field)
    return as_utc(value) if isinstance(value, datetime) else value


def _changed_labels(event: Event, core: dict[str, Any], extension: dict[str, Any]) -> list[str]:
    """Labels of fields whose incoming value differs from the stored row."""
    labels = [label_for(f) for f, v in core.items() if _stored_value(event, f, False) != v]
    labels += [label_for(f) for f, v in extension.items() if _stored_value(event, f, True) != v]
    return labels


# ── Store steps (each flushed separately inside a unit of work) ────
def _apply_status(db: Session, event: Event, status: EventStatus) -> None:
    event.status = status
    store.flush(db, "update the event status")


def assign_reviewer(db: Session, event: Event, assignee_id: Optional[str]) -> None:
    """Single-statement assignee write."""
    event.assignee_id = assignee_id
    store.flush(db, "assign the reviewer")


def _insert_approval(
    db: Session,
    event_id: str,
    reviewer_id: str,
    decision: ApprovalDecision,
    feedback: Optional[str],
    decided_at: datetime,
) -> Approval:
    approval = Approval(
        event_id=event_id,
        decision=decision,
        reviewer_id=reviewer_id,
        feedback_text=feedback,
        decided_at=decided_at,
    )
    db.add(approval)
    store.flush(db, "record the decision")
    return approval


def _refresh(db: Session, event: Event) -> Event:
    try:
        db.refresh(event)
    except SQLAlchemyError as exc:
        raise StoreError("Could not reload the event.") from exc
    return event


# ── Operations ─────────────────────────────────────────────────────
def create_draft(db: Session, actor: Actor, fields: dict[str, Any]) -> Event:
    """Insert a draft event, its first version and an ``event.created`` audit entry.

    Version 1 holds every field that was non-empty at creation.
    """
    cleaned = normalise_fields(fields)
    _check_required(cleaned)
    _check_venue(db, cleaned["venue_id"])
    core, extension = split_fields(cleaned)

    event = Event(
        **core,
        public_fields=extension,
        status=EventStatus.draft,
        created_by=actor.id,
        assignee_id=actor.id,
    )
    with store.atomic(db, "create the draft"):
        db.add(event)
        store.flush(db, "create the event")
        initial = version_service.event_snapshot(event, include_empty=False)
        version_service.stage_version(db, event.id, actor.id, initial)
    _refresh(db, event)

    audit_service.record_audit_entry(db, event.id, "event.created", actor.id, {
        "status": EventStatus.draft.value,
        "assigneeId": actor.id,
        "changes": [label_for(field) for field in initial],
    })
    logger.info("Created draft '%s' (%s) by %s", event.title, event.id, actor.id)
    return event


def update_draft(db: Session, event_id: str, actor: Actor, fields: dict[str, Any]) -> Event:
    """Save draft edits.

    Every save appends a full snapshot version, even when nothing changed;
    the ``event.updated`` audit entry is only written when a field differs.
    """
    event = get_event(db, event_id)
    require_status(event, EDITABLE_STATES, "be edited")
    authorize(Operation.update_draft, actor, event)

    cleaned = normalise_fields(fields)
    core, extension = split_fields(cleaned)
    merged = {field: _stored_value(event, field, False) for field in REQUIRED_FIELDS}
    merged.update({k: v for k, v in core.items() if k in REQUIRED_FIELDS})
    _check_required(merged)
    if "venue_id" in core and core["venue_id"] != event.venue_id:
        _check_venue(db, core["venue_id"])

    labels = _changed_labels(event, core, extension)
    with store.atomic(db, "save the draft"):
        for field, value in core.items():
            setattr(event, field, value)
        if extension:
            event.public_fields = {**(event.public_fields or {}), **extension}
        store.flush(db, "update the event")
        snapshot = version_service.event_snapshot(event)
        snapshot["status"] = event.status.value
        version_service.stage_version(db, event.id, actor.id, snapshot)
    _refresh(db, event)

    if labels:
        audit_service.record_audit_entry(db, event.id, "event.updated", actor.id, {"changes": labels})
    logger.info("Saved draft %s (%d changed fields)", event.id, len(labels))
    return event


def _resolve_reviewer(db: Session, event: Event, reviewer_id: Optional[str]) -> Optional[User]:
    """Explicit choice, else a current assignee who can review, else the
    venue default reviewer, else the earliest-created reviewer account."""
    if reviewer_id:
        reviewer = _get_user(db, reviewer_id)
        if reviewer is None or not reviewer.can_review:
            raise ValidationError("Choose a valid reviewer.", {"reviewer_id": "Choose a reviewer"})
        return reviewer

    current = _get_user(db, event.assignee_id)
    if current is not None and current.can_review:
        return current

    venue = event.venue
    if venue is not None and venue.default_reviewer_id:
        default = _get_user(db, venue.default_reviewer_id)
        if default is not None and default.can_review:
            return default

    try:
        return (
            db.query(User)
            .filter(User.role == UserRole.reviewer)
            .order_by(User.created_at, User.id)
            .first()
        )
    except SQLAlchemyError as exc:
        raise StoreError("Could not load reviewers.") from exc


def submit_event(db: Session, event_id: str, actor: Actor, reviewer_id: Optional[str] = None) -> Event:
    event = get_event(db, event_id)
    require_status(event, EDITABLE_STATES, "be submitted")
    authorize(Operation.submit, actor, event)
    assert_transition(event.status, EventStatus.submitted)

    reviewer = _resolve_reviewer(db, event, reviewer_id)
    if reviewer is None:
        logger.warning("No reviewer available for event %s; submitting unassigned", event.id)
    previous_status = event.status
    previous_assignee = event.assignee_id
    next_assignee = reviewer.id if reviewer is not None else previous_assignee
    now = utcnow()

    with store.atomic(db, "submit the event"):
        event.submitted_at = now
        _apply_status(db, event, EventStatus.submitted)
        if next_assignee != previous_assignee:
            assign_reviewer(db, event, next_assignee)
        version_service.stage_version(
            db, event.id, actor.id,
            {"status": EventStatus.submitted.value, "submitted_at": isoformat(now)},
            submitted_at=now,
        )
    _refresh(db, event)

    changes = ["Status"]
    if next_assignee != previous_assignee:
        changes.append("Assignee")
    audit_service.record_audit_entry(db, event.id, "event.submitted", actor.id, {
        "status": EventStatus.submitted.value,
        "previousStatus": previous_status.value,
        "assigneeId": next_assignee,
        "previousAssigneeId": previous_assignee,
        "changes": changes,
    })
    notification_service.notify(
        notification_service.EVENT_SUBMITTED, reviewer, event, submitted_by=actor.id,
    )
    logger.info("Submitted event %s for review by %s", event.id, next_assignee)
    return event


def _parse_decision(decision: Union[str, ApprovalDecision, None]) -> ApprovalDecision:
    try:
        return ApprovalDecision(decision)
    except ValueError:
        raise ValidationError("Choose a decision before saving.", {"decision": "Choose a decision"}) from None


def record_decision(
    db: Session,
    event_id: str,
    actor: Actor,
    decision: Union[str, ApprovalDecision],
    feedback: Optional[str] = None,
) -> Event:
    """Apply a reviewer decision.

    Steps, in order: status update, assignee handoff, decision version,
    approval row. A store failure at any step undoes the steps already
    applied. Approval clears the assignee; the other decisions hand the event
    back to its creator. The audit entry and the creator notification follow
    the commit and are best-effort.
    """
    decision = _parse_decision(decision)
    event = get_event(db, event_id)
    require_status(event, DECISION_STATES, "receive a decision")
    authorize(Operation.record_decision, actor, event)
    target = EventStatus(decision.value)
    assert_transition(event.status, target)

    note = feedback.strip() if isinstance(feedback, str) and feedback.strip() else None
    previous_status = event.status
    now = utcnow()
    previous_assignee = event.assignee_id
    next_assignee = None if decision == ApprovalDecision.approved else event.created_by

    with store.atomic(db, "save the decision"):
        _apply_status(db, event, target)
        if next_assignee != previous_assignee:
            assign_reviewer(db, event, next_assignee)
        version = version_service.stage_version(db, event.id, actor.id, {
            "decision": decision.value,
            "note": note,
            "decided_at": isoformat(now),
            "decided_by": actor.id,
        })
        version_number = version.version
        _insert_approval(db, event.id, actor.id, decision, note, now)
    _refresh(db, event)

    changes = ["Status"] if previous_status != target else []
    if note:
        changes.append("Feedback")
    if next_assignee != previous_assignee:
        changes.append("Assignee")
    audit_service.record_audit_entry(db, event.id, f"event.{decision.value}", actor.id, {
        "status": target.value,
        "previousStatus": previous_status.value,
        "feedback": note,
        "version": version_number,
        "changes": changes,
        "assigneeId": next_assignee,
        "previousAssigneeId": previous_assignee,
    })
    notification_service.notify(
        notification_service.REVIEW_DECISION, _get_user(db, event.created_by), event,
        decision=decision.value, feedback=note,
    )
    logger.info("Recorded %s on event %s by %s", decision.value, event.id, actor.id)
    return event


def reassign_event(db: Session, event_id: str, actor: Actor, assignee_id: Optional[str]) -> Event:
    """Planner-only change of assignee, independent of status."""
    event = get_event(db, event_id)
    authorize(Operation.reassign, actor, event)

    new_assignee = None
    if assignee_id:
        new_assignee = _get_user(db, assignee_id)
        if new_assignee is None:
            raise ValidationError("Provide a valid user.", {"assignee_id": "Unknown user"})

    previous_id = event.assignee_id
    if previous_id == assignee_id:
        logger.info("Assignee unchanged for event %s", event.id)
        return event
    previous_assignee = _get_user(db, previous_id)

    with store.atomic(db, "update the assignee"):
        assign_reviewer(db, event, assignee_id)
    _refresh(db, event)

    audit_service.record_audit_entry(db, event.id, "event.assignee_updated", actor.id, {
        "assigneeId": assignee_id,
        "previousAssigneeId": previous_id,
        "changes": ["Assignee"],
    })
    notification_service.notify(
        notification_service.ASSIGNEE_UPDATED, new_assignee, event,
        assigned=True, previous_assignee_id=previous_id,
    )
    notification_service.notify(
        notification_service.ASSIGNEE_UPDATED, previous_assignee, event,
        assigned=False, assignee_id=assignee_id,
    )
    logger.info("Reassigned event %s from %s to %s", event.id, previous_id, assignee_id)
    return event