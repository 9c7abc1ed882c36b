"""Venue space conflict detection.

Two upcoming events conflict when they share a venue, reserve at least one
common space (case-insensitive) and their time windows overlap as half-open
intervals, so an event ending exactly when another starts is not a conflict.
The pairwise scan is quadratic; candidate sets are a venue group's upcoming
calendar, i.e. dozens of rows.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.datetimes import as_utc, utcnow
from eventflow.errors import StoreError
from eventflow.models.event import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictPair:
    event_id: str
    event_title: str
    conflicting_event_id: str
    conflicting_event_title: str
    venue_id: str
    venue_name: Optional[str]
    shared_spaces: tuple[str, ...]

    @property
    def label(self) -> str:
        venue = self.venue_name or self.venue_id
        return f"{venue} · {format_spaces_label(', '.join(self.shared_spaces))}"


def parse_venue_spaces(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def format_spaces_label(value: Optional[str]) -> str:
    spaces = parse_venue_spaces(value)
    if not spaces:
        return "Space: Not specified"
    label = "Spaces" if len(spaces) > 1 else "Space"
    return f"{label}: {', '.join(spaces)}"


def _overlaps(first: Event, second: Event) -> bool:
    return as_utc(first.end_at) > as_utc(second.start_at) and as_utc(first.start_at) < as_utc(second.end_at)


def detect_conflicts(events: Iterable[Event]) -> list[ConflictPair]:
    """Every conflicting unordered pair, reported once, independent of input order."""
    unique = {event.id: event for event in events}
    ordered = sorted(unique.values(), key=lambda e: (as_utc(e.start_at), e.id))
    spaces = {
        event.id: {space.lower(): space for space in parse_venue_spaces(event.venue_space)}
        for event in ordered
    }

    conflicts: list[ConflictPair] = []
    for i, first in enumerate(ordered):
        for second in ordered[i + 1:]:
            if first.venue_id != second.venue_id:
                continue
            shared = spaces[first.id].keys() & spaces[second.id].keys()
            if not shared or not _overlaps(first, second):
                continue
            venue = getattr(first, "venue", None)
            conflicts.append(ConflictPair(
                event_id=first.id,
                event_title=first.title,
                conflicting_event_id=second.id,
                conflicting_event_title=second.title,
                venue_id=first.venue_id,
                venue_name=venue.name if venue is not None else None,
                shared_spaces=tuple(sorted(spaces[first.id][key] for key in shared)),
            ))
    return conflicts


def find_upcoming_conflicts(db: Session, now: Optional[datetime] = None) -> list[ConflictPair]:
    """Load events starting at or after ``now`` and report their conflicts."""
    now = now or utcnow()
    try:
        events = db.query(Event).filter(Event.start_at >= now).order_by(Event.start_at).all()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load events for the conflict check.") from exc

    conflicts = detect_conflicts(events)
    logger.info("Conflict check over %d upcoming events found %d conflicts", len(events), len(conflicts))
    return conflicts
