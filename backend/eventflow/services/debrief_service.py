"""Post-event debriefs.

A debrief is a mutable, upserted record; its history lives in the audit log,
where every save records which of the tracked fields changed along with the
computed sales uplift. Saving a debrief also marks an approved event
completed.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.database import get_service_session
from eventflow.errors import StoreError, ValidationError
from eventflow.models.debrief import Debrief
from eventflow.models.event import Event, EventStatus
from eventflow.services import audit_service, notification_service, store
from eventflow.services.event_service import require_status, assert_transition, get_event, list_planners
from eventflow.services.policy import Actor, Operation, authorize

logger = logging.getLogger(__name__)

DEBRIEF_STATES = frozenset({EventStatus.approved, EventStatus.completed})

DEBRIEF_FIELD_LABELS = {
    "attendance": "Attendance",
    "baseline_attendance": "Baseline attendance",
    "wet_takings": "Wet takings",
    "food_takings": "Food takings",
    "baseline_wet_takings": "Baseline wet takings",
    "baseline_food_takings": "Baseline food takings",
    "promo_effectiveness": "Promo effectiveness",
    "highlights": "Highlights",
    "issues": "Issues",
    "guest_sentiment_notes": "Guest sentiment",
    "operational_notes": "Operational notes",
    "would_book_again": "Would book again",
    "next_time_actions": "Next time actions",
}

_INTEGER_FIELDS = {"attendance", "baseline_attendance"}
_MONEY_FIELDS = {"wet_takings", "food_takings", "baseline_wet_takings", "baseline_food_takings"}
_TEXT_FIELDS = {"highlights", "issues", "guest_sentiment_notes", "operational_notes", "next_time_actions"}


@dataclass(frozen=True)
class SalesUplift:
    event_total: Optional[float]
    baseline_total: Optional[float]
    uplift_value: Optional[float]
    uplift_percent: Optional[float]


def compute_sales_uplift(values: dict[str, Any]) -> SalesUplift:
    wet, food = values.get("wet_takings"), values.get("food_takings")
    base_wet, base_food = values.get("baseline_wet_takings"), values.get("baseline_food_takings")
    has_event = wet is not None or food is not None
    has_baseline = base_wet is not None or base_food is not None
    if not has_event and not has_baseline:
        return SalesUplift(None, None, None, None)

    event_total = (wet or 0) + (food or 0)
    baseline_total = (base_wet or 0) + (base_food or 0)
    uplift_value = event_total - baseline_total
    uplift_percent = uplift_value / baseline_total * 100 if baseline_total > 0 else None
    return SalesUplift(event_total, baseline_total, uplift_value, uplift_percent)


def normalise_debrief(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = sorted(set(fields) - set(DEBRIEF_FIELD_LABELS))
    if unknown:
        raise ValidationError(f"Unknown debrief fields: {', '.join(unknown)}")

    errors: dict[str, str] = {}
    cleaned: dict[str, Any] = {}
    for field in DEBRIEF_FIELD_LABELS:
        raw = fields.get(field)
        if isinstance(raw, str):
            raw = raw.strip() or None
        if raw is None:
            cleaned[field] = None
        elif field in _TEXT_FIELDS:
            cleaned[field] = str(raw)
        elif field == "would_book_again":
            if not isinstance(raw, bool):
                errors[field] = "Answer yes or no"
            cleaned[field] = raw if isinstance(raw, bool) else None
        else:
            try:
                number = float(raw)
            except (TypeError, ValueError):
                errors[field] = "Use a number"
                continue
            if not math.isfinite(number):
                errors[field] = "Use a number"
            elif number < 0:
                errors[field] = "Cannot be negative"
            elif field == "promo_effectiveness" and not (number.is_integer() and 1 <= number <= 5):
                errors[field] = "Rate between 1 and 5"
            elif field in _INTEGER_FIELDS and not number.is_integer():
                errors[field] = "Use a whole number"
            if field in errors:
                continue
            cleaned[field] = number if field in _MONEY_FIELDS else int(number)
    if errors:
        raise ValidationError("Check the debrief details.", errors)
    return cleaned


def _changed_labels(previous: Optional[Debrief], values: dict[str, Any]) -> list[str]:
    labels = []
    for field, label in DEBRIEF_FIELD_LABELS.items():
        before = getattr(previous, field) if previous is not None else None
        if before != values[field]:
            labels.append(label)
    return labels


def _mark_completed(db: Session, event: Event) -> str:
    """Move the event to completed, elevated path first.

    Returns which path performed the write ("service", "actor" or "unchanged").
    """
    if event.status == EventStatus.completed:
        return "unchanged"
    assert_transition(event.status, EventStatus.completed)

    service_session = get_service_session()
    if service_session is not None:
        try:
            with service_session:
                service_session.query(Event).filter(Event.id == event.id).update(
                    {"status": EventStatus.completed}, synchronize_session=False,
                )
                service_session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Elevated completion failed for event %s, using actor session: %s", event.id, exc)
        else:
            try:
                # close the actor's read snapshot so the refresh sees the elevated write
                db.commit()
                db.refresh(event)
            except SQLAlchemyError as exc:
                db.rollback()
                raise StoreError("Could not reload the completed event.") from exc
            return "service"

    with store.atomic(db, "mark the event completed"):
        event.status = EventStatus.completed
        store.flush(db, "update the event status")
    return "actor"


def get_debrief(db: Session, event_id: str) -> Optional[Debrief]:
    try:
        return db.query(Debrief).filter(Debrief.event_id == event_id).first()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load the debrief.") from exc


def submit_debrief(db: Session, event_id: str, actor: Actor, fields: dict[str, Any]) -> Debrief:
    event = get_event(db, event_id)
    require_status(event, DEBRIEF_STATES, "be debriefed")
    authorize(Operation.submit_debrief, actor, event)
    values = normalise_debrief(fields)
    uplift = compute_sales_uplift(values)

    previous = get_debrief(db, event.id)
    labels = _changed_labels(previous, values)

    with store.atomic(db, "save the debrief"):
        debrief = previous or Debrief(event_id=event.id)
        for field, value in values.items():
            setattr(debrief, field, value)
        debrief.sales_uplift_value = uplift.uplift_value
        debrief.sales_uplift_percent = uplift.uplift_percent
        debrief.submitted_by = actor.id
        db.add(debrief)
        store.flush(db, "save the debrief")

    previous_status = event.status
    completion_path = _mark_completed(db, event)

    audit_service.record_audit_entry(db, event.id, "event.debrief_updated", actor.id, {
        "changes": labels,
        "status": EventStatus.completed.value,
        "previousStatus": previous_status.value,
        "completedVia": completion_path,
        "eventTotal": uplift.event_total,
        "baselineTotal": uplift.baseline_total,
        "salesUpliftValue": uplift.uplift_value,
        "salesUpliftPercent": uplift.uplift_percent,
    })
    db.refresh(debrief)
    notification_service.notify_many(
        notification_service.POST_EVENT_DIGEST, list_planners(db), event,
        attendance=debrief.attendance,
        sales_uplift_value=uplift.uplift_value,
        sales_uplift_percent=uplift.uplift_percent,
        changes=labels,
    )
    logger.info("Saved debrief for event %s (%d changed fields)", event.id, len(labels))
    return debrief
