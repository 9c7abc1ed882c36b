"""Tests for the unified history timeline built from both version streams."""
from datetime import datetime, timezone

import pytest

from eventflow.errors import ValidationError
from eventflow.models.ai_content_version import AiContentVersion
from eventflow.models.user import UserRole
from eventflow.services import diff_service, event_service
from tests.conftest import actor_for, draft_fields, make_user, make_venue


@pytest.fixture
def history(db):
    """A draft saved twice plus two rounds of generated copy."""
    manager = make_user(db, UserRole.venue_manager, "Manager")
    venue = make_venue(db)
    actor = actor_for(manager)
    event = event_service.create_draft(db, actor, draft_fields(venue.id))
    event_service.update_draft(db, event.id, actor, {"title": "Quiz Night Live"})

    db.add_all([
        AiContentVersion(
            event_id=event.id, version=1, generated_by=manager.id,
            payload={"public_title": "Quiz!", "seo_slug": "quiz"},
            created_at=datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc),
        ),
        AiContentVersion(
            event_id=event.id, version=2, generated_by=manager.id,
            payload={"public_title": "Quiz Night!", "seo_slug": "quiz"},
            created_at=datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc),
        ),
    ])
    db.commit()
    return event


class TestTimeline:

    def test_all_sources_newest_first(self, db, history):
        entries = diff_service.build_timeline(db, history.id)
        assert [(e.kind, e.version) for e in entries] == [
            ("ai", 2), ("ai", 1), ("manual", 2), ("manual", 1),
        ]

    def test_manual_only(self, db, history):
        entries = diff_service.build_timeline(db, history.id, source="manual")
        assert {e.kind for e in entries} == {"manual"}

        latest, first = entries
        title_change = next(c for c in latest.changes if c.field == "title")
        assert (title_change.before, title_change.after) == ("Quiz Night", "Quiz Night Live")
        assert {c.field for c in first.changes} == {"title", "start_at", "end_at", "venue_id", "venue_space"}
        assert all(c.before is None for c in first.changes)

    def test_generated_copy_only(self, db, history):
        entries = diff_service.build_timeline(db, history.id, source="ai")
        assert [e.version for e in entries] == [2, 1]
        assert [(c.field, c.before, c.after, c.source) for c in entries[0].changes] == [
            ("public_title", "Quiz!", "Quiz Night!", "ai"),
        ]

    def test_unknown_filter(self, db, history):
        with pytest.raises(ValidationError):
            diff_service.build_timeline(db, history.id, source="robots")
