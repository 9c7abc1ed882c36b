"""Tests for venue space conflict detection (no database)."""
from datetime import datetime, timezone
from types import SimpleNamespace

from eventflow.services.conflict_service import (
    detect_conflicts,
    format_spaces_label,
    parse_venue_spaces,
)


def _event(event_id, start_hour, end_hour, spaces="Main Bar", venue_id="venue-1", title=None):
    return SimpleNamespace(
        id=event_id,
        title=title or f"Event {event_id}",
        venue_id=venue_id,
        venue=SimpleNamespace(name="The Star"),
        venue_space=spaces,
        start_at=datetime(2025, 5, 1, start_hour, 0, tzinfo=timezone.utc),
        end_at=datetime(2025, 5, 1, end_hour, 0, tzinfo=timezone.utc),
    )


class TestDetectConflicts:
    """Same venue, shared space and overlapping window."""

    def test_overlapping_events_in_same_space(self):
        quiz = _event("a", 18, 20, title="Quiz Night")
        karaoke = _event("b", 19, 21, title="Karaoke")
        conflicts = detect_conflicts([quiz, karaoke])
        assert len(conflicts) == 1
        pair = conflicts[0]
        assert (pair.event_id, pair.conflicting_event_id) == ("a", "b")
        assert pair.shared_spaces == ("Main Bar",)
        assert pair.venue_name == "The Star"

    def test_pair_reported_once_regardless_of_input_order(self):
        quiz, karaoke = _event("a", 18, 20), _event("b", 19, 21)
        forward = detect_conflicts([quiz, karaoke])
        backward = detect_conflicts([karaoke, quiz])
        assert forward == backward
        assert len(forward) == 1

    def test_duplicate_input_rows_are_deduplicated(self):
        quiz, karaoke = _event("a", 18, 20), _event("b", 19, 21)
        assert len(detect_conflicts([quiz, karaoke, quiz])) == 1

    def test_touching_windows_do_not_conflict(self):
        assert detect_conflicts([_event("a", 18, 20), _event("b", 20, 22)]) == []

    def test_non_overlapping_windows_do_not_conflict(self):
        assert detect_conflicts([_event("a", 12, 14), _event("b", 18, 20)]) == []

    def test_different_spaces_do_not_conflict(self):
        assert detect_conflicts([_event("a", 18, 20, "Garden"), _event("b", 19, 21, "Main Bar")]) == []

    def test_different_venues_do_not_conflict(self):
        first = _event("a", 18, 20, venue_id="venue-1")
        second = _event("b", 19, 21, venue_id="venue-2")
        assert detect_conflicts([first, second]) == []

    def test_space_match_is_case_insensitive(self):
        first = _event("a", 18, 20, "Main Bar, Garden")
        second = _event("b", 19, 21, "main bar")
        conflicts = detect_conflicts([first, second])
        assert conflicts[0].shared_spaces == ("Main Bar",)

    def test_events_without_spaces_never_conflict(self):
        assert detect_conflicts([_event("a", 18, 20, None), _event("b", 19, 21, "")]) == []

    def test_three_way_overlap_reports_each_pair(self):
        events = [_event("a", 18, 22), _event("b", 19, 21), _event("c", 20, 23)]
        pairs = {(c.event_id, c.conflicting_event_id) for c in detect_conflicts(events)}
        assert pairs == {("a", "b"), ("a", "c"), ("b", "c")}

    def test_label(self):
        pair = detect_conflicts([_event("a", 18, 20), _event("b", 19, 21)])[0]
        assert pair.label == "The Star · Space: Main Bar"


class TestSpacesLabel:

    def test_parse_trims_and_drops_blanks(self):
        assert parse_venue_spaces(" Main Bar, ,Garden ,") == ["Main Bar", "Garden"]

    def test_parse_empty(self):
        assert parse_venue_spaces(None) == []

    def test_single_space(self):
        assert format_spaces_label("Main Bar") == "Space: Main Bar"

    def test_multiple_spaces(self):
        assert format_spaces_label("Main Bar, Garden") == "Spaces: Main Bar, Garden"

    def test_not_specified(self):
        assert format_spaces_label("  ") == "Space: Not specified"
