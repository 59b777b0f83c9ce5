"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from supportdesk.api import create_fastapi_app
from supportdesk.api.routes import control
from supportdesk.app import Application
from supportdesk.config import TypingConfig
from supportdesk.lifecycle import ALREADY_ACTIVE_MESSAGE


@pytest.fixture
def client():
    """TestClient over an in-memory application; the lifespan runs inside `with`."""
    application = Application(db_path=":memory:", typing=TypingConfig.instant())
    with TestClient(create_fastapi_app(application)) as test_client:
        yield test_client


def _new_conversation(client, customer_id="cust-1") -> dict:
    response = client.post(f"/api/customers/{customer_id}/conversations")
    assert response.status_code == 201
    return response.json()


class TestAuthRoutes:
    """Tests for /api/auth."""

    def test_customer_login(self, client):
        response = client.post(
            "/api/auth/customer/login",
            json={"username": "rahul.sharma", "password": "password123"},
        )
        assert response.status_code == 200
        assert response.json()["id"] == "cust-1"
        assert response.json()["role"] == "customer"

        me = client.get("/api/auth/me")
        assert me.json()["name"] == "Rahul Sharma"

    def test_bad_credentials(self, client):
        response = client.post(
            "/api/auth/agent/login",
            json={"username": "amit.kumar", "password": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_phone_login_and_logout(self, client):
        response = client.post("/api/auth/phone-login", json={"phone": "+919876543211"})
        assert response.json()["id"] == "cust-2"

        assert client.post("/api/auth/logout").json() == {"status": "ok"}
        assert client.get("/api/auth/me").status_code == 401

    def test_me_without_sign_in(self, client):
        """Test that nobody signed in maps to 401."""
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not signed in"

    def test_agent_login(self, client):
        response = client.post(
            "/api/auth/agent/login",
            json={"username": "sneha.singh", "password": "password123"},
        )
        assert response.json()["role"] == "agent"
        assert response.json()["status"] == "online"


class TestChatRoutes:
    """Tests for the customer chat routes."""

    def test_create_conversation_greets(self, client):
        turn = _new_conversation(client)

        assert turn["flow"] == "greeting"
        assert [o["value"] for o in turn["options"]] == [
            "apply_loan",
            "documents",
            "status",
            "agent",
        ]
        assert turn["conversation"]["status"] == "waiting"
        assert turn["conversation"]["messages"][0]["sender"] == "bot"
        assert "internal_notes" not in turn["conversation"]

    def test_unknown_customer(self, client):
        assert client.post("/api/customers/cust-9/conversations").status_code == 404

    def test_status_check_scenario(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]

        turn = client.post(
            f"/api/conversations/{conversation_id}/options", json={"value": "status"}
        ).json()
        assert turn["awaiting_input"] is True

        turn = client.post(
            f"/api/conversations/{conversation_id}/messages", json={"text": "LA-2024-001"}
        ).json()
        reply = turn["conversation"]["messages"][-1]["content"]
        assert "UNDER REVIEW" in reply
        assert "₹5,00,000" in reply

        turn = client.post(
            f"/api/conversations/{conversation_id}/messages",
            json={"text": "I want to talk to an agent"},
        ).json()
        assert turn["conversation"]["status"] == "active"

    def test_second_ticket_refused(self, client):
        first = _new_conversation(client)["conversation"]["id"]
        client.post(f"/api/conversations/{first}/options", json={"value": "agent"})

        second = _new_conversation(client)["conversation"]["id"]
        turn = client.post(
            f"/api/conversations/{second}/options", json={"value": "agent"}
        ).json()

        assert turn["conversation"]["status"] == "waiting"
        assert turn["conversation"]["messages"][-1]["content"] == ALREADY_ACTIVE_MESSAGE

        listing = client.get("/api/customers/cust-1/conversations").json()
        assert listing["has_active_ticket"] is True
        assert [c["id"] for c in listing["conversations"]] == [second, first]

    def test_empty_message_rejected(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        response = client.post(
            f"/api/conversations/{conversation_id}/messages", json={"text": "  "}
        )
        assert response.status_code == 400

    def test_attachment_only_message(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        turn = client.post(
            f"/api/conversations/{conversation_id}/messages",
            json={
                "attachments": [
                    {"id": "att-1", "name": "pan.jpg", "mime_type": "image/jpeg", "size": 512}
                ]
            },
        ).json()

        customer_message = turn["conversation"]["messages"][-2]
        assert customer_message["sender"] == "customer"
        assert customer_message["attachments"][0]["name"] == "pan.jpg"

    def test_unknown_conversation(self, client):
        assert client.get("/api/conversations/conv-missing").status_code == 404
        response = client.post(
            "/api/conversations/conv-missing/messages", json={"text": "hello"}
        )
        assert response.status_code == 404

    def test_search(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        client.post(
            f"/api/conversations/{conversation_id}/messages",
            json={"text": "Question about my MSME loan"},
        )

        found = client.get("/api/customers/cust-1/conversations", params={"q": "msme"})
        assert [c["id"] for c in found.json()["conversations"]] == [conversation_id]
        missing = client.get("/api/customers/cust-1/conversations", params={"q": "zzz"})
        assert missing.json()["conversations"] == []

    def test_loan_applications(self, client):
        response = client.get("/api/customers/cust-2/loan-applications")
        assert [a["id"] for a in response.json()] == ["LA-2024-002"]


class TestDashboardRoutes:
    """Tests for the agent dashboard routes."""

    def test_open_assigns_and_marks_read(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]

        listing = client.get("/api/dashboard/conversations").json()
        assert listing[0]["unread_count"] == 1

        opened = client.post(
            f"/api/dashboard/conversations/{conversation_id}/open",
            json={"agent_id": "agent-1"},
        ).json()
        assert opened["status"] == "active"
        assert opened["assigned_agent_name"] == "Amit Kumar"
        assert opened["unread_count"] == 0

        assigned = client.get(
            "/api/dashboard/conversations",
            params={"status": "assigned", "agent_id": "agent-1"},
        ).json()
        assert [c["id"] for c in assigned] == [conversation_id]

    def test_reply_note_resolve_and_rate(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        base = f"/api/dashboard/conversations/{conversation_id}"

        reply = client.post(
            f"{base}/reply", json={"agent_id": "agent-1", "text": "Hello Rahul"}
        ).json()
        assert reply["messages"][-1]["sender"] == "agent"

        noted = client.post(
            f"{base}/notes", json={"agent_id": "agent-1", "text": "VIP customer"}
        ).json()
        assert noted["internal_notes"][0]["content"] == "VIP customer"

        resolved = client.post(f"{base}/resolve", json={"agent_id": "agent-1"}).json()
        assert resolved["status"] == "resolved"
        assert resolved["resolved_at"] is not None
        assert resolved["needs_rating"] is True

        rated = client.post(
            f"/api/conversations/{conversation_id}/rating", json={"score": 5}
        ).json()
        assert rated["rating"]["score"] == 5
        assert rated["needs_rating"] is False

        closed = client.post(f"{base}/reply", json={"agent_id": "agent-1", "text": "PS"})
        assert closed.status_code == 409

    def test_invalid_transition(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        client.post(
            f"/api/conversations/{conversation_id}/messages", json={"text": "thanks"}
        )

        response = client.post(
            f"/api/dashboard/conversations/{conversation_id}/escalate",
            json={"agent_id": "agent-1"},
        )
        assert response.status_code == 409

    def test_pick_up_conflict(self, client):
        first = _new_conversation(client)["conversation"]["id"]
        client.post(f"/api/conversations/{first}/options", json={"value": "agent"})
        second = _new_conversation(client)["conversation"]["id"]

        response = client.post(
            f"/api/dashboard/conversations/{second}/open", json={"agent_id": "agent-2"}
        )
        assert response.status_code == 409

    def test_rating_unresolved(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        response = client.post(
            f"/api/conversations/{conversation_id}/rating", json={"score": 4}
        )
        assert response.status_code == 400
        out_of_range = client.post(
            f"/api/conversations/{conversation_id}/rating", json={"score": 9}
        )
        assert out_of_range.status_code == 422

    def test_unknown_agent(self, client):
        conversation_id = _new_conversation(client)["conversation"]["id"]
        response = client.post(
            f"/api/dashboard/conversations/{conversation_id}/open",
            json={"agent_id": "agent-9"},
        )
        assert response.status_code == 401

    def test_quick_replies(self, client):
        assert len(client.get("/api/dashboard/quick-replies").json()) == 6
        closing = client.get("/api/dashboard/quick-replies", params={"category": "closing"})
        assert [r["id"] for r in closing.json()] == ["qr-6"]


class TestObservabilityAndControl:
    """Tests for trace events and control routes."""

    def test_trace_events(self, client):
        _new_conversation(client)

        events = client.get(
            "/api/trace-events", params={"event_type": "conversation_created"}
        ).json()
        assert len(events) == 1
        assert events[0]["actor"] == "customer:cust-1"

    def test_trace_events_bad_timestamp(self, client):
        assert client.get("/api/trace-events", params={"after": "yesterday"}).status_code == 400

    def test_reset(self, client):
        _new_conversation(client)
        assert client.post("/api/control/reset").json() == {"status": "ok"}
        assert client.get("/api/dashboard/conversations").json() == []

    def test_sim_not_configured(self, client):
        control.set_sim_instance(None)
        assert client.post("/api/control/sim/start").status_code == 404
