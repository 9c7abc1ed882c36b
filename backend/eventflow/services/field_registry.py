"""Versioned registry of editable event fields.

Core fields are real columns on ``events``; extension fields are the public
marketing copy that grew incrementally and lives in ``events.public_fields``.
Every field carries the human label used in audit ``changes`` lists and the
registry version that introduced it.
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from eventflow.datetimes import parse_timestamp
from eventflow.errors import ValidationError

REGISTRY_VERSION = 3

CORE = "core"
EXTENSION = "extension"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    since: int
    kind: str = CORE


_FIELDS = (
    FieldSpec("title", "Title", 1),
    FieldSpec("event_type", "Type", 1),
    FieldSpec("start_at", "Start time", 1),
    FieldSpec("end_at", "End time", 1),
    FieldSpec("venue_id", "Venue", 1),
    FieldSpec("venue_space", "Space", 1),
    FieldSpec("expected_headcount", "Headcount", 1),
    FieldSpec("wet_promo", "Wet promotion", 1),
    FieldSpec("food_promo", "Food promotion", 1),
    FieldSpec("goal_focus", "Goals", 1),
    FieldSpec("notes", "Notes", 1),
    FieldSpec("cost_total", "Total cost", 2),
    FieldSpec("cost_details", "Cost details", 2),
    FieldSpec("terms", "Terms and conditions", 2),
    FieldSpec("public_title", "Public title", 3, EXTENSION),
    FieldSpec("public_teaser", "Public teaser", 3, EXTENSION),
    FieldSpec("public_description", "Public description", 3, EXTENSION),
    FieldSpec("booking_url", "Booking link", 3, EXTENSION),
    FieldSpec("seo_title", "SEO title", 3, EXTENSION),
    FieldSpec("seo_description", "SEO description", 3, EXTENSION),
    FieldSpec("seo_slug", "SEO slug", 3, EXTENSION),
)

FIELD_REGISTRY: dict[str, FieldSpec] = {spec.name: spec for spec in _FIELDS}
CORE_FIELDS: tuple[str, ...] = tuple(spec.name for spec in _FIELDS if spec.kind == CORE)
EXTENSION_FIELDS: tuple[str, ...] = tuple(spec.name for spec in _FIELDS if spec.kind == EXTENSION)
EDITABLE_FIELDS: tuple[str, ...] = CORE_FIELDS + EXTENSION_FIELDS

_TEXT_LIMITS = {
    "title": 255,
    "event_type": 100,
    "wet_promo": 240,
    "food_promo": 240,
    "goal_focus": 120,
    "cost_details": 500,
    "notes": 5000,
    "terms": 3000,
    "public_title": 255,
    "public_teaser": 500,
    "public_description": 5000,
    "seo_title": 255,
    "seo_description": 500,
}
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def label_for(field: str) -> str:
    spec = FIELD_REGISTRY.get(field)
    return spec.label if spec else field.replace("_", " ").capitalize()


def fields_at(version: int) -> tuple[str, ...]:
    """Field names known to a given registry version."""
    return tuple(spec.name for spec in _FIELDS if spec.since <= version)


def normalise_venue_space(value: Any) -> Optional[str]:
    """Trim, drop blanks and de-duplicate case-insensitively (first spelling wins)."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        entries = [str(item) for item in value]
    else:
        entries = str(value).split(",")
    unique: list[str] = []
    seen: set[str] = set()
    for entry in entries:
        item = entry.strip()
        if not item or item.lower() in seen:
            continue
        seen.add(item.lower())
        unique.append(item)
    return ", ".join(unique) or None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(field: str, value: Any, errors: dict[str, str]) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        errors[field] = "Use a number"
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors[field] = "Use a number"
        return None
    if not math.isfinite(number):
        errors[field] = "Use a number"
        return None
    return number


def normalise_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate caller-supplied editable fields and coerce them to storage form.

    Only keys present in ``fields`` are returned, so partial updates stay
    partial. Raises ValidationError listing every offending field.
    """
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(
            f"Unknown event fields: {', '.join(unknown)}",
            {name: "Unknown field" for name in unknown},
        )

    errors: dict[str, str] = {}
    cleaned: dict[str, Any] = {}
    for field, raw in fields.items():
        if field in ("start_at", "end_at"):
            try:
                cleaned[field] = parse_timestamp(raw)
            except ValueError:
                errors[field] = "Use a valid date and time"
        elif field == "venue_space":
            cleaned[field] = normalise_venue_space(raw)
        elif field == "venue_id":
            cleaned[field] = _text(raw)
        elif field == "expected_headcount":
            number = _number(field, raw, errors)
            if number is not None and (not number.is_integer() or not 0 <= number <= 10000):
                errors[field] = "Use a whole number between 0 and 10000"
            cleaned[field] = int(number) if number is not None and field not in errors else None
        elif field == "cost_total":
            number = _number(field, raw, errors)
            if number is not None and number < 0:
                errors[field] = "Cost cannot be negative"
            cleaned[field] = number
        else:
            text = _text(raw)
            limit = _TEXT_LIMITS.get(field)
            if text is not None and limit and len(text) > limit:
                errors[field] = f"Keep this under {limit} characters"
            cleaned[field] = text

    if cleaned.get("seo_slug") and not _SLUG_RE.match(cleaned["seo_slug"]):
        errors["seo_slug"] = "Use lowercase words separated by hyphens"
    booking_url = cleaned.get("booking_url")
    if booking_url and not booking_url.startswith(("http://", "https://")):
        errors["booking_url"] = "Use a full URL (including https://)"
    if "title" in cleaned and cleaned["title"] is not None and len(cleaned["title"]) < 3:
        errors["title"] = "Add a short title"

    if errors:
        raise ValidationError("Check the highlighted fields.", errors)
    return cleaned


def split_fields(fields: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split normalised fields into (core columns, extension map)."""
    core = {k: v for k, v in fields.items() if FIELD_REGISTRY[k].kind == CORE}
    extension = {k: v for k, v in fields.items() if FIELD_REGISTRY[k].kind == EXTENSION}
    return core, extension
