"""Snapshot diff engine and the combined history timeline.

``diff_snapshots`` compares two free-form field snapshots and reports one
change per differing field. The same engine is applied to the manual version
stream (EventVersion) and to the generated-copy stream (AiContentVersion);
``build_timeline`` folds both into one feed with a ``kind`` discriminant.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventflow.datetimes import as_utc
from eventflow.errors import StoreError, ValidationError
from eventflow.models.ai_content_version import AiContentVersion
from eventflow.models.event_version import EventVersion

MANUAL = "manual"
AI = "ai"
SOURCES = (MANUAL, AI)
TIMELINE_FILTERS = ("all",) + SOURCES

IGNORED_FIELDS = frozenset({
    "id",
    "created_at",
    "updated_at",
    "version",
    "submitted_at",
    "submitted_by",
    "cloned_at",
    "cloned_from",
})


@dataclass(frozen=True)
class FieldChange:
    field: str
    before: Any
    after: Any
    source: str = MANUAL


@dataclass
class TimelineEntry:
    kind: str
    version: int
    occurred_at: datetime
    actor_id: Optional[str]
    changes: list[FieldChange] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)


def _serialise(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def normalise_value(value: Any) -> Any:
    """Canonical form for comparison: arrays sorted, object keys ordered."""
    if isinstance(value, (list, tuple)):
        return sorted((normalise_value(item) for item in value), key=_serialise)
    if isinstance(value, dict):
        return {key: normalise_value(value[key]) for key in sorted(value)}
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return value


def _values_equal(left: Any, right: Any) -> bool:
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(_values_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, dict) or isinstance(right, dict):
        return _serialise(left) == _serialise(right)
    return left == right


def is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def diff_snapshots(
    previous: Optional[dict[str, Any]],
    current: Optional[dict[str, Any]],
    source: str = MANUAL,
    ignored_fields: Iterable[str] = (),
) -> list[FieldChange]:
    """Ordered list of per-field changes between two snapshots.

    Fields appear in first-seen order (previous keys, then new keys). When
    ``previous`` is None every non-empty field of ``current`` is reported as a
    change from None.
    """
    if source not in SOURCES:
        raise ValidationError(f"Unknown diff source: {source}")
    if previous is None and current is None:
        return []

    ignored = IGNORED_FIELDS | set(ignored_fields)
    before_record = previous or {}
    after_record = current or {}
    fields = list(dict.fromkeys([*before_record, *after_record]))

    changes: list[FieldChange] = []
    for name in fields:
        if name in ignored:
            continue
        before = normalise_value(before_record.get(name))
        after = normalise_value(after_record.get(name))
        if previous is None and is_empty(after):
            continue
        if not _values_equal(before, after):
            changes.append(FieldChange(field=name, before=before, after=after, source=source))
    return changes


def _entries_for(rows: list, kind: str, occurred: Callable, actor: Callable) -> list[TimelineEntry]:
    entries = []
    previous_payload: Optional[dict[str, Any]] = None
    for row in sorted(rows, key=lambda r: r.version):
        payload = row.payload or {}
        entries.append(TimelineEntry(
            kind=kind,
            version=row.version,
            occurred_at=occurred(row),
            actor_id=actor(row),
            changes=diff_snapshots(previous_payload, payload, source=kind),
            payload=payload,
        ))
        previous_payload = payload
    return entries


def merge_timelines(*streams: Iterable[TimelineEntry], source: str = "all") -> list[TimelineEntry]:
    """Newest first; ties on timestamp broken by version, highest first."""
    if source not in TIMELINE_FILTERS:
        raise ValidationError(f"Unknown timeline filter: {source}")
    merged = [entry for stream in streams for entry in stream if source == "all" or entry.kind == source]
    return sorted(merged, key=lambda e: (as_utc(e.occurred_at), e.version), reverse=True)


def build_timeline(db: Session, event_id: str, source: str = "all") -> list[TimelineEntry]:
    """Unified history for one event across manual saves and generated copy."""
    if source not in TIMELINE_FILTERS:
        raise ValidationError(f"Unknown timeline filter: {source}")
    try:
        versions = db.query(EventVersion).filter(EventVersion.event_id == event_id).all()
        ai_versions = db.query(AiContentVersion).filter(AiContentVersion.event_id == event_id).all()
    except SQLAlchemyError as exc:
        raise StoreError("Could not load the event history.") from exc

    manual = _entries_for(
        versions, MANUAL,
        occurred=lambda r: as_utc(r.submitted_at or r.created_at),
        actor=lambda r: r.submitted_by,
    )
    generated = _entries_for(
        ai_versions, AI,
        occurred=lambda r: as_utc(r.created_at),
        actor=lambda r: r.generated_by,
    )
    return merge_timelines(manual, generated, source=source)
