"""Integration tests for the HTTP API."""
import json

import pytest
from fastapi.testclient import TestClient

from navaspurthi.api.app import create_app
from navaspurthi.services import event_policy_service, registration_service

ADMIN_HEADERS = {"X-Admin-Token": "test-token"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    """API client backed by an empty registrations file."""
    monkeypatch.setattr(registration_service, "REGISTRATIONS_FILE", str(tmp_path / "registrations.json"))
    monkeypatch.setenv("ADMIN_API_TOKEN", "test-token")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("STRICT_EVENT_NAMES", raising=False)
    event_policy_service._clear_cache()
    yield TestClient(create_app())
    event_policy_service._clear_cache()


def register(client, email="asha@example.com", events=None):
    body = {"name": "Asha Rao", "email": email, "events": events or [{"name": "Solo Dance"}]}
    return client.post("/api/registrations", json=body)


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestCreateRegistration:
    """Tests for POST /api/registrations."""

    def test_success_returns_201(self, client):
        response = register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ok"
        assert body["registration"]["events"] == ["Solo Dance"]
        assert body["registration"]["status"] == "pending"

    def test_rejection_returns_400_with_code(self, client):
        response = register(client, events=[{"name": "Solo Dance"}, {"name": "Debate"}])

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert body["code"] == "MultipleSoloEvents"
        assert body["details"]["events"] == ["Solo Dance", "Debate"]

    def test_duplicate_solo_across_requests(self, client):
        assert register(client).status_code == 201

        response = register(client, events=[{"name": "Debate"}])

        assert response.status_code == 400
        assert response.json()["code"] == "DuplicateSoloRegistration"

    def test_form_post_with_events_json_string(self, client):
        events = [{"name": "Photography"}, {"name": "Quiz", "participants": ["Asha Rao", "Meera"]}]
        response = client.post(
            "/api/registrations",
            data={"fullName": "Asha Rao", "email": "asha@example.com", "events": json.dumps(events)},
        )

        assert response.status_code == 201
        assert response.json()["registration"]["total_participants"] == 2

    def test_form_post_with_malformed_events(self, client):
        response = client.post(
            "/api/registrations",
            data={"name": "Asha Rao", "email": "asha@example.com", "events": "[broken"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidFieldValue"

    def test_non_object_body_rejected(self, client):
        response = client.post("/api/registrations", json=["Solo Dance"])

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidFieldValue"


class TestReadRegistrations:
    """Tests for GET endpoints."""

    def test_list_with_filters(self, client):
        register(client)
        register(client, email="ravi@example.com", events=[{"name": "Photography"}])

        response = client.get("/api/registrations", params={"event": "photography"})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["registrations"][0]["email"] == "ravi@example.com"

    def test_get_by_id(self, client):
        registration_id = register(client).json()["registration"]["registration_id"]

        response = client.get(f"/api/registrations/{registration_id}")

        assert response.status_code == 200
        assert response.json()["registration"]["registration_id"] == registration_id

    def test_get_missing_returns_404(self, client):
        assert client.get("/api/registrations/NV25-NOPE-0000").status_code == 404


class TestAdminEndpoints:
    """Tests for status changes, deletes and stats."""

    def test_status_requires_token(self, client):
        registration_id = register(client).json()["registration"]["registration_id"]

        response = client.patch(f"/api/registrations/{registration_id}/status", json={"status": "confirmed"})

        assert response.status_code == 401

    def test_confirm_registration(self, client):
        registration_id = register(client).json()["registration"]["registration_id"]

        response = client.patch(
            f"/api/registrations/{registration_id}/status", json={"status": "confirmed"}, headers=ADMIN_HEADERS
        )

        assert response.status_code == 200
        assert response.json()["registration"]["status"] == "confirmed"

    def test_illegal_transition_returns_409(self, client):
        registration_id = register(client).json()["registration"]["registration_id"]
        client.patch(f"/api/registrations/{registration_id}/status", json={"status": "cancelled"}, headers=ADMIN_HEADERS)

        response = client.patch(
            f"/api/registrations/{registration_id}/status", json={"status": "confirmed"}, headers=ADMIN_HEADERS
        )

        assert response.status_code == 409

    def test_unknown_status_returns_422(self, client):
        registration_id = register(client).json()["registration"]["registration_id"]

        response = client.patch(
            f"/api/registrations/{registration_id}/status", json={"status": "approved"}, headers=ADMIN_HEADERS
        )

        assert response.status_code == 422

    def test_delete_then_404(self, client):
        registration_id = register(client).json()["registration"]["registration_id"]

        response = client.delete(f"/api/registrations/{registration_id}", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert client.get(f"/api/registrations/{registration_id}").status_code == 404
        assert client.delete(f"/api/registrations/{registration_id}", headers=ADMIN_HEADERS).status_code == 404

    def test_stats(self, client):
        register(client)

        response = client.get("/api/registrations/stats", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["by_event"] == {"Solo Dance": 1}

    def test_export_requires_token(self, client):
        assert client.get("/api/registrations/export").status_code == 401

    def test_export_csv(self, client):
        client.post(
            "/api/registrations",
            json={"name": "Rao, Asha", "email": "asha@example.com", "college": "RV College, Bengaluru",
                  "events": [{"name": "Solo Dance"}]},
        )

        response = client.get("/api/registrations/export", params={"status": "pending"}, headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("Registration ID,Name,Email")
        assert '"Rao, Asha"' in lines[1]
        assert '"RV College, Bengaluru"' in lines[1]


class TestEventsAndChatbot:
    """Tests for catalogue and chatbot endpoints."""

    def test_events_grouped_by_class(self, client):
        body = client.get("/api/events").json()

        assert set(body) == {"solo", "group", "exception"}
        cricket = next(e for e in body["group"] if e["name"] == "Cricket")
        assert cricket["class"] == "group"
        assert (cricket["min_size"], cricket["max_size"]) == (11, 11)

    def test_single_event_by_alias(self, client):
        response = client.get("/api/events/mehndi")

        assert response.status_code == 200
        assert response.json()["name"] == "Mehendi"

    def test_unknown_event_returns_404(self, client):
        assert client.get("/api/events/underwater-chess").status_code == 404

    def test_chatbot_quick_reply(self, client):
        response = client.post("/api/chatbot", json={"message": "Where is the venue?", "sessionId": "abc"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["type"] == "quick"
        assert body["sessionId"] == "abc"

    def test_chatbot_fallback_without_key(self, client):
        body = client.post("/api/chatbot", json={"message": "Tell me about cricket rules"}).json()

        assert body["type"] == "fallback"

    def test_chatbot_requires_message(self, client):
        assert client.post("/api/chatbot", json={"message": "  "}).status_code == 400

    def test_suggestions(self, client):
        body = client.get("/api/chatbot/suggestions").json()

        assert body["success"] is True
        assert "How do I register?" in body["suggestions"]
