"""Tests for planner dashboards and the reviewer queue."""
from datetime import datetime, timedelta, timezone

from tests.conftest import create_test_user, create_test_venue


def _create(client, actor_id, venue_id, title, start, hours=2, space="Main Bar"):
    resp = client.post("/api/events/", params={"actor_user_id": actor_id}, json={
        "venue_id": venue_id,
        "title": title,
        "start_at": start.isoformat(),
        "end_at": (start + timedelta(hours=hours)).isoformat(),
        "venue_space": space,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestConflicts:

    def test_upcoming_clash(self, client):
        manager = create_test_user(client, name="Manager")
        venue = create_test_venue(client)
        start = (datetime.now(timezone.utc) + timedelta(days=14)).replace(hour=18, minute=0, second=0, microsecond=0)
        quiz = _create(client, manager["id"], venue["id"], "Quiz Night", start)
        karaoke = _create(client, manager["id"], venue["id"], "Karaoke", start + timedelta(hours=1), space="main bar, Garden")
        _create(client, manager["id"], venue["id"], "Brunch", start - timedelta(hours=6))

        resp = client.get("/api/planning/conflicts")
        assert resp.status_code == 200
        conflicts = resp.json()
        assert len(conflicts) == 1
        assert conflicts[0]["event_id"] == quiz["id"]
        assert conflicts[0]["conflicting_event_id"] == karaoke["id"]
        assert conflicts[0]["shared_spaces"] == ["Main Bar"]
        assert conflicts[0]["label"] == "The Star · Space: Main Bar"


class TestStatusCounts:

    def test_counts_are_zero_filled(self, client):
        manager = create_test_user(client, name="Manager")
        create_test_user(client, name="Reviewer", role="reviewer")
        venue = create_test_venue(client)
        start = datetime.now(timezone.utc) + timedelta(days=7)
        first = _create(client, manager["id"], venue["id"], "Quiz Night", start)
        _create(client, manager["id"], venue["id"], "Karaoke", start + timedelta(days=1))
        client.post(f"/api/events/{first['id']}/submit", params={"actor_user_id": manager["id"]})

        counts = client.get("/api/planning/status-counts").json()
        assert counts == {
            "draft": 1,
            "submitted": 1,
            "needs_revisions": 0,
            "approved": 0,
            "rejected": 0,
            "completed": 0,
        }


class TestReviewQueue:

    def test_reviewer_sees_own_assignments_with_sla(self, client):
        manager = create_test_user(client, name="Manager")
        reviewer = create_test_user(client, name="Reviewer", role="reviewer")
        other_reviewer = create_test_user(client, name="Other Reviewer", role="reviewer")
        planner = create_test_user(client, name="Planner", role="central_planner")
        venue = create_test_venue(client)
        start = datetime.now(timezone.utc) + timedelta(days=1, hours=1)
        event = _create(client, manager["id"], venue["id"], "Quiz Night", start)
        client.post(f"/api/events/{event['id']}/submit", params={"actor_user_id": manager["id"]})

        queue = client.get("/api/reviews/queue", params={"actor_user_id": reviewer["id"]}).json()
        assert len(queue) == 1
        assert queue[0]["event"]["id"] == event["id"]
        assert queue[0]["sla"]["tone"] == "warning"
        assert queue[0]["sla"]["action"] == "Follow up within 24h"

        assert client.get("/api/reviews/queue", params={"actor_user_id": other_reviewer["id"]}).json() == []
        assert len(client.get("/api/reviews/queue", params={"actor_user_id": planner["id"]}).json()) == 1


class TestHealth:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}
