"""Tests for User and Venue endpoints."""
from tests.conftest import create_test_user, create_test_venue


class TestUserCRUD:
    """User create / get / list."""

    def test_create_user(self, client):
        data = create_test_user(client, name="Alice", role="reviewer")
        assert data["full_name"] == "Alice"
        assert data["role"] == "reviewer"
        assert "id" in data

    def test_default_role(self, client):
        resp = client.post("/api/users/", json={"email": "bob@barons.example"})
        assert resp.status_code == 201
        assert resp.json()["role"] == "venue_manager"

    def test_unknown_role(self, client):
        resp = client.post("/api/users/", json={"email": "x@barons.example", "role": "owner"})
        assert resp.status_code == 422

    def test_duplicate_email(self, client):
        client.post("/api/users/", json={"email": "dup@barons.example"})
        resp = client.post("/api/users/", json={"email": "dup@barons.example"})
        assert resp.status_code == 409

    def test_get_user(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/users/{user['id']}")
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Test User"

    def test_get_user_not_found(self, client):
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404

    def test_list_users_by_role(self, client):
        create_test_user(client, name="Alice", role="reviewer")
        create_test_user(client, name="Bob")
        resp = client.get("/api/users/", params={"role": "reviewer"})
        assert resp.status_code == 200
        assert [u["full_name"] for u in resp.json()] == ["Alice"]


class TestVenues:

    def test_create_and_list(self, client):
        reviewer = create_test_user(client, name="Reviewer", role="reviewer")
        venue = create_test_venue(client, name="The Crown", default_reviewer_id=reviewer["id"])
        assert venue["default_reviewer_id"] == reviewer["id"]
        create_test_venue(client, name="The Anchor")

        resp = client.get("/api/venues/")
        assert resp.status_code == 200
        assert [v["name"] for v in resp.json()] == ["The Anchor", "The Crown"]

    def test_default_reviewer_must_review(self, client):
        manager = create_test_user(client, name="Manager")
        resp = client.post("/api/venues/", json={"name": "The Crown", "default_reviewer_id": manager["id"]})
        assert resp.status_code == 422
