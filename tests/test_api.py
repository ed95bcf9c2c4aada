"""
End-to-end API tests against an in-memory SQLite database.

The long-lived GET /api/v1/events/matches stream is covered at the hub and
sink level (test_notification_hub.py, test_queue_sink.py); here broadcasts
are observed through a RecordingSink registered on the app's hub.
"""

import json
import uuid

import pytest

from clubber.routes.core import metrics_auth_error
from tests.conftest import ADMIN_HEADERS, RecordingSink, register_user

PROBLEM_JSON = "application/problem+json"


def create_match(client, competition, title="Reds vs Blues", status="Upcoming", date="2026-05-01T18:00:00"):
    response = client.post(
        "/api/v1/matches",
        json={"title": title, "competition": competition, "date": date, "status": status},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201, response.text
    return response.json()


def frames(sink):
    return [json.loads(chunk[len("data: "):-2]) for chunk in sink.chunks]


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Healthy"
        assert body["db"] == "Connected"
        assert isinstance(body["sseConnections"], int)

    def test_metrics_auth(self):
        assert metrics_auth_error(None, "") is None
        assert metrics_auth_error(None, "s3cret") is not None
        assert metrics_auth_error("Basic s3cret", "s3cret") is not None
        assert metrics_auth_error("Bearer nope", "s3cret") == "invalid token"
        assert metrics_auth_error("Bearer s3cret", "s3cret") is None

    def test_metrics(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "clubber_sse_connections_active" in response.text


class TestAuth:
    def test_register_and_login(self, client):
        body = register_user(client)
        assert body["succeeded"] is True
        assert body["token"]
        assert body["user"]["username"].startswith("user_")

        login = client.post(
            "/api/v1/auth/login",
            json={"username": body["user"]["username"], "password": "s3cret-pass"},
        )
        assert login.status_code == 200
        assert login.json()["message"] == "Login successful."

    def test_duplicate_username(self, client):
        body = register_user(client)
        response = client.post(
            "/api/v1/auth/register",
            json={"username": body["user"]["username"], "password": "another-pass"},
        )
        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        problem = response.json()
        assert problem["title"] == "Registration failed"
        assert problem["detail"] == "Username already exists."
        assert problem["instance"] == "/api/v1/auth/register"

    def test_wrong_password(self, client):
        body = register_user(client)
        response = client.post(
            "/api/v1/auth/login",
            json={"username": body["user"]["username"], "password": "wrong-pass"},
        )
        assert response.status_code == 401
        assert response.json()["title"] == "Login failed"

    def test_validation_error_is_problem(self, client):
        response = client.post("/api/v1/auth/register", json={"username": "ab", "password": "x"})
        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert response.json()["title"] == "Validation failed"

    def test_matches_require_token(self, client):
        response = client.get("/api/v1/matches")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/matches", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestAdminKey:
    def test_missing_key(self, client, competition_tag):
        response = client.post(
            "/api/v1/matches",
            json={"title": "X", "competition": competition_tag, "date": "2026-05-01T18:00:00"},
        )
        assert response.status_code == 401

    def test_wrong_key(self, client):
        response = client.post("/api/v1/events/matches", json={"x": 1}, headers={"X-API-Key": "nope"})
        assert response.status_code == 403


class TestMatchSearch:
    def test_filter_by_competition_and_status(self, client, auth_headers, competition_tag):
        for n in range(5):
            create_match(client, competition_tag, title=f"Game {n}", status="Live" if n < 2 else "Upcoming")

        everything = client.get(
            "/api/v1/matches", params={"competition": competition_tag.upper()}, headers=auth_headers
        ).json()
        assert everything["totalCount"] == 5

        live = client.get(
            "/api/v1/matches",
            params={"competition": competition_tag, "status": "live"},
            headers=auth_headers,
        ).json()
        assert live["totalCount"] == 2
        assert {m["status"] for m in live["data"]} == {"Live"}
        assert all(m["streamURL"].startswith("https://cdn.example.com/live/") for m in live["data"])

    def test_pagination_envelope(self, client, auth_headers, competition_tag):
        for n in range(7):
            create_match(client, competition_tag, title=f"Game {n}", date=f"2026-05-0{n + 1}T18:00:00")

        body = client.get(
            "/api/v1/matches",
            params={"competition": competition_tag, "page": 2, "pageSize": 3},
            headers=auth_headers,
        ).json()
        assert body["page"] == 2
        assert body["pageSize"] == 3
        assert body["totalCount"] == 7
        assert [m["title"] for m in body["data"]] == ["Game 3", "Game 4", "Game 5"]

    def test_out_of_range_paging_is_clamped(self, client, auth_headers, competition_tag):
        create_match(client, competition_tag)
        body = client.get(
            "/api/v1/matches",
            params={"competition": competition_tag, "page": -3, "pageSize": 1000},
            headers=auth_headers,
        ).json()
        assert body["page"] == 1
        assert body["pageSize"] == 100
        assert body["totalCount"] == 1

    def test_sort_descending_by_title(self, client, auth_headers, competition_tag):
        for title in ["beta", "Alpha", "gamma"]:
            create_match(client, competition_tag, title=title)
        body = client.get(
            "/api/v1/matches",
            params={"competition": competition_tag, "sortBy": "title", "sortDescending": "true"},
            headers=auth_headers,
        ).json()
        assert [m["title"] for m in body["data"]] == ["gamma", "beta", "Alpha"]

    def test_live_endpoint(self, client, auth_headers, competition_tag):
        created = create_match(client, competition_tag, status="Live")
        live = client.get("/api/v1/matches/live", headers=auth_headers).json()
        assert created["id"] in {m["id"] for m in live}
        assert {m["status"] for m in live} == {"Live"}

    def test_get_by_id(self, client, auth_headers, competition_tag):
        created = create_match(client, competition_tag, status="OnDemand")
        response = client.get(f"/api/v1/matches/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["streamURL"] == f"https://cdn.example.com/replay/{created['id']}"

    def test_missing_match_is_problem(self, client, auth_headers):
        response = client.get(f"/api/v1/matches/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert response.json()["title"] == "Match not found"


class TestMatchEvents:
    def test_status_change_is_broadcast(self, client, hub, competition_tag):
        created = create_match(client, competition_tag)
        sink = RecordingSink()
        connection_id = hub.register(sink)
        try:
            response = client.put(
                f"/api/v1/matches/{created['id']}",
                json={"status": "Live"},
                headers=ADMIN_HEADERS,
            )
            assert response.status_code == 200
            assert response.json()["streamURL"].endswith(f"live/{created['id']}")
        finally:
            hub.deregister(connection_id)

        events = frames(sink)
        assert len(events) == 1
        assert events[0]["type"] == "match_status_changed"
        assert events[0]["matchId"] == created["id"]
        assert events[0]["status"] == "Live"
        assert events[0]["previousStatus"] == "Upcoming"

    def test_update_without_status_change_is_quiet(self, client, hub, competition_tag):
        created = create_match(client, competition_tag)
        sink = RecordingSink()
        connection_id = hub.register(sink)
        try:
            response = client.put(
                f"/api/v1/matches/{created['id']}",
                json={"title": "Renamed"},
                headers=ADMIN_HEADERS,
            )
            assert response.json()["title"] == "Renamed"
        finally:
            hub.deregister(connection_id)
        assert sink.chunks == []

    def test_create_and_delete_are_broadcast(self, client, hub, competition_tag):
        sink = RecordingSink()
        connection_id = hub.register(sink)
        try:
            created = create_match(client, competition_tag)
            response = client.delete(f"/api/v1/matches/{created['id']}", headers=ADMIN_HEADERS)
            assert response.status_code == 204
        finally:
            hub.deregister(connection_id)

        assert [e["type"] for e in frames(sink)] == ["match_created", "match_deleted"]

    def test_manual_broadcast(self, client, hub):
        sink = RecordingSink()
        connection_id = hub.register(sink)
        try:
            response = client.post(
                "/api/v1/events/matches",
                json={"id": 42, "status": "Live"},
                headers=ADMIN_HEADERS,
            )
        finally:
            hub.deregister(connection_id)

        assert response.status_code == 200
        assert response.json()["delivered"] >= 1
        assert sink.chunks == ['data: {"id":42,"status":"Live"}\n\n']

    def test_failing_client_dropped_on_broadcast(self, client, hub):
        from tests.conftest import FailingSink

        bad_id = hub.register(FailingSink())
        response = client.post("/api/v1/events/matches", json={"ping": True}, headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["dropped"] >= 1
        assert bad_id not in hub


class TestPlaylist:
    def test_add_duplicate_remove(self, client, auth_headers, competition_tag):
        created = create_match(client, competition_tag, status="Live")
        match_id = created["id"]

        added = client.post(f"/api/v1/playlist/{match_id}", headers=auth_headers)
        assert added.status_code == 200
        assert added.json()["message"] == "Match added to playlist successfully."
        assert [m["id"] for m in added.json()["playlist"]["matches"]] == [match_id]

        again = client.post(f"/api/v1/playlist/{match_id}", headers=auth_headers)
        assert again.status_code == 200
        assert again.json()["message"] == "Match already in playlist."

        page = client.get("/api/v1/playlist", headers=auth_headers).json()
        assert page["totalCount"] == 1
        assert page["data"][0]["streamURL"].endswith(f"live/{match_id}")

        removed = client.delete(f"/api/v1/playlist/{match_id}", headers=auth_headers)
        assert removed.status_code == 200
        assert removed.json()["playlist"]["matches"] == []

    def test_add_unknown_match(self, client, auth_headers):
        response = client.post(f"/api/v1/playlist/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 400
        problem = response.json()
        assert problem["title"] == "Add match to playlist failed"
        assert problem["detail"] == "Match not found."

    def test_remove_not_in_playlist(self, client, auth_headers):
        response = client.delete(f"/api/v1/playlist/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Match not found in the playlist."

    def test_deleting_match_removes_playlist_entry(self, client, auth_headers, competition_tag):
        created = create_match(client, competition_tag)
        client.post(f"/api/v1/playlist/{created['id']}", headers=auth_headers)

        client.delete(f"/api/v1/matches/{created['id']}", headers=ADMIN_HEADERS)

        assert client.get("/api/v1/playlist", headers=auth_headers).json()["totalCount"] == 0

    def test_playlists_are_per_user(self, client, auth_headers, competition_tag):
        created = create_match(client, competition_tag)
        client.post(f"/api/v1/playlist/{created['id']}", headers=auth_headers)

        other = register_user(client)
        other_headers = {"Authorization": f"Bearer {other['token']}"}
        assert client.get("/api/v1/playlist", headers=other_headers).json()["totalCount"] == 0
