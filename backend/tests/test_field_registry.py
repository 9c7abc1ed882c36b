"""Tests for the editable-field registry and input normalisation (no database)."""
from datetime import datetime, timezone

import pytest

from eventflow.errors import ValidationError
from eventflow.services.field_registry import (
    CORE_FIELDS,
    EDITABLE_FIELDS,
    EXTENSION_FIELDS,
    FIELD_REGISTRY,
    REGISTRY_VERSION,
    fields_at,
    label_for,
    normalise_fields,
    normalise_venue_space,
    split_fields,
)


def _field_errors(fields):
    with pytest.raises(ValidationError) as exc_info:
        normalise_fields(fields)
    return exc_info.value.field_errors


class TestRegistry:

    def test_labels(self):
        assert label_for("start_at") == "Start time"
        assert label_for("seo_slug") == "SEO slug"
        assert label_for("mystery_field") == "Mystery field"

    def test_versions(self):
        assert all(spec.since <= REGISTRY_VERSION for spec in FIELD_REGISTRY.values())
        assert "cost_total" not in fields_at(1)
        assert "cost_total" in fields_at(2)
        assert "public_title" not in fields_at(2)
        assert set(fields_at(REGISTRY_VERSION)) == set(EDITABLE_FIELDS)

    def test_core_and_extension_are_disjoint(self):
        assert not set(CORE_FIELDS) & set(EXTENSION_FIELDS)
        assert "booking_url" in EXTENSION_FIELDS
        assert "venue_space" in CORE_FIELDS


class TestNormaliseFields:

    def test_unknown_field_rejected(self):
        assert _field_errors({"colour": "red"}) == {"colour": "Unknown field"}

    def test_strings_trimmed_and_blank_is_null(self):
        cleaned = normalise_fields({"title": "  Quiz Night ", "notes": "   "})
        assert cleaned == {"title": "Quiz Night", "notes": None}

    def test_partial_input_stays_partial(self):
        assert set(normalise_fields({"notes": "Bring pens"})) == {"notes"}

    def test_venue_space_deduplicated(self):
        cleaned = normalise_fields({"venue_space": "Main Bar, main bar , Garden,,"})
        assert cleaned["venue_space"] == "Main Bar, Garden"

    def test_venue_space_from_list(self):
        assert normalise_venue_space(["Garden", " Snug "]) == "Garden, Snug"

    def test_headcount_accepts_numeric_string(self):
        assert normalise_fields({"expected_headcount": "40"})["expected_headcount"] == 40

    @pytest.mark.parametrize("value", [10001, -1, 12.5, "lots", True])
    def test_headcount_rejected(self, value):
        assert "expected_headcount" in _field_errors({"expected_headcount": value})

    def test_negative_cost_rejected(self):
        assert _field_errors({"cost_total": -5}) == {"cost_total": "Cost cannot be negative"}

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", float("nan"), "1e400"])
    @pytest.mark.parametrize("field", ["cost_total", "expected_headcount"])
    def test_non_finite_numbers_rejected(self, field, value):
        assert _field_errors({field: value}) == {field: "Use a number"}

    def test_slug_format(self):
        assert normalise_fields({"seo_slug": "quiz-night-2"})["seo_slug"] == "quiz-night-2"
        assert "seo_slug" in _field_errors({"seo_slug": "Quiz Night"})

    def test_booking_url_must_be_http(self):
        assert "booking_url" in _field_errors({"booking_url": "www.barons.example/book"})

    def test_short_title_rejected(self):
        assert _field_errors({"title": "ab"}) == {"title": "Add a short title"}

    def test_long_text_rejected(self):
        assert "goal_focus" in _field_errors({"goal_focus": "x" * 121})

    def test_every_error_reported_together(self):
        errors = _field_errors({"cost_total": -1, "seo_slug": "Bad Slug", "title": "x"})
        assert set(errors) == {"cost_total", "seo_slug", "title"}


class TestTimestamps:
    """Naive wall-clock input is read in the venue timezone."""

    def test_summer_time(self):
        cleaned = normalise_fields({"start_at": "2025-07-01T19:00"})
        assert cleaned["start_at"] == datetime(2025, 7, 1, 18, 0, tzinfo=timezone.utc)

    def test_winter_time(self):
        cleaned = normalise_fields({"start_at": "2025-01-10T19:00"})
        assert cleaned["start_at"] == datetime(2025, 1, 10, 19, 0, tzinfo=timezone.utc)

    def test_explicit_utc(self):
        cleaned = normalise_fields({"end_at": "2025-05-01T20:00:00Z"})
        assert cleaned["end_at"] == datetime(2025, 5, 1, 20, 0, tzinfo=timezone.utc)

    def test_unparsable(self):
        assert _field_errors({"start_at": "soon"}) == {"start_at": "Use a valid date and time"}


class TestSplitFields:

    def test_split(self):
        core, extension = split_fields({"title": "Quiz Night", "public_title": "Quiz!"})
        assert core == {"title": "Quiz Night"}
        assert extension == {"public_title": "Quiz!"}
