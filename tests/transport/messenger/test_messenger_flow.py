"""
Messenger Relay Integration Tests

End-to-end flow through the HTTP routes:
webhook → normalization → profile cache → broadcast, and
frontend → /send-message → Send API.

The Graph API and the broadcast call are mocked.
"""

import hashlib
import hmac
import json
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from infra.bootstrap import RelayBootstrap, get_bootstrap
from main import app
from transport.messenger.graph import GraphAPIError


@pytest.fixture
def broadcast(bootstrap):
    """Capture every broadcast frame."""
    mock = AsyncMock(return_value=1)
    bootstrap.broadcast_channel.broadcast = mock
    return mock


@pytest.fixture
def client(bootstrap, broadcast):
    app.dependency_overrides[get_bootstrap] = lambda: bootstrap
    yield TestClient(app)
    app.dependency_overrides.clear()


def _webhook(*events, obj="page"):
    return {"object": obj, "entry": [{"messaging": list(events)}]}


VERIFY_TOKEN = "verify-secret"

SCENARIO_EVENT = {
    "sender": {"id": "U1"},
    "recipient": {"id": "A1"},
    "message": {"mid": "m1", "text": "hi"},
    "timestamp": 123,
}


class TestWebhookVerification:

    def test_valid_subscription(self, client):
        response = client.get(
            "/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": VERIFY_TOKEN, "hub.challenge": "1158201444"},
        )

        assert response.status_code == 200
        assert response.text == "1158201444"

    def test_wrong_token(self, client):
        response = client.get(
            "/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "c"},
        )

        assert response.status_code == 403
        assert response.content == b""

    def test_wrong_mode(self, client):
        response = client.get(
            "/webhook",
            params={"hub.mode": "unsubscribe", "hub.verify_token": VERIFY_TOKEN, "hub.challenge": "c"},
        )

        assert response.status_code == 403

    def test_no_parameters(self, client):
        assert client.get("/webhook").status_code == 403


class TestWebhookEvents:

    def test_scenario_text_message(self, client, broadcast, graph):
        """Known page, fetched profile: the frontend gets the normalized event."""
        response = client.post("/webhook", json=_webhook(SCENARIO_EVENT))

        assert response.status_code == 200
        assert response.text == "EVENT_RECEIVED"
        graph.get_user_profile.assert_awaited_once_with("U1", "T1")
        broadcast.assert_awaited_once_with(
            "facebook-event",
            {
                "pageId": "A1",
                "sender": {"id": "U1", "name": "Jane Doe", "profile_pic": "https://cdn.example/jane.jpg"},
                "message": {"mid": "m1", "text": "hi", "timestamp": 123},
            },
        )

    def test_profile_failure_uses_fallback(self, client, broadcast, graph):
        graph.get_user_profile.side_effect = GraphAPIError("Invalid OAuth access token.", 400)
        event = dict(SCENARIO_EVENT, sender={"id": "24681357"})

        response = client.post("/webhook", json=_webhook(event))

        assert response.status_code == 200
        data = broadcast.await_args.args[1]
        assert data["sender"] == {"id": "24681357", "name": "User 1357", "profile_pic": None}

    def test_cached_sender_issues_no_profile_call(self, client, bootstrap, broadcast, graph):
        client.post("/webhook", json=_webhook(SCENARIO_EVENT))
        graph.get_user_profile.reset_mock()

        client.post("/webhook", json=_webhook(dict(SCENARIO_EVENT, message={"mid": "m2", "text": "again"})))

        graph.get_user_profile.assert_not_awaited()
        assert broadcast.await_count == 2
        assert "U1" in bootstrap.profile_cache

    def test_non_page_object_is_404(self, client, broadcast):
        response = client.post("/webhook", json=_webhook(SCENARIO_EVENT, obj="instagram"))

        assert response.status_code == 404
        broadcast.assert_not_awaited()

    def test_echoes_and_receipts_are_not_broadcast(self, client, broadcast):
        echo = dict(SCENARIO_EVENT, message={"mid": "m9", "text": "from page", "is_echo": True})
        receipt = {"sender": {"id": "U1"}, "recipient": {"id": "A1"}, "read": {"watermark": 1}}

        response = client.post("/webhook", json=_webhook(echo, receipt))

        assert response.text == "EVENT_RECEIVED"
        broadcast.assert_not_awaited()

    def test_every_event_in_entry_is_broadcast(self, client, broadcast):
        second = dict(SCENARIO_EVENT, message={"mid": "m2", "text": "there"})

        client.post("/webhook", json=_webhook(SCENARIO_EVENT, second))

        mids = [call.args[1]["message"]["mid"] for call in broadcast.await_args_list]
        assert mids == ["m1", "m2"]

    def test_image_message_has_attachments_and_no_text(self, client, broadcast):
        attachments = [{"type": "image", "payload": {"url": "https://cdn.example/cat.png"}}]
        event = dict(SCENARIO_EVENT, message={"mid": "m3", "attachments": attachments})

        client.post("/webhook", json=_webhook(event))

        message = broadcast.await_args.args[1]["message"]
        assert message == {"mid": "m3", "attachments": attachments, "timestamp": 123}

    def test_invalid_json(self, client):
        response = client.post(
            "/webhook",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    def test_non_list_messaging_is_acknowledged(self, client, broadcast):
        response = client.post("/webhook", json={"object": "page", "entry": [{"messaging": 5}]})

        assert response.status_code == 200
        assert response.text == "EVENT_RECEIVED"
        broadcast.assert_not_awaited()


class TestWebhookSignature:

    @pytest.fixture
    def signed_client(self, bootstrap, broadcast):
        bootstrap.config = replace(bootstrap.config, app_secret="app-secret")
        app.dependency_overrides[get_bootstrap] = lambda: bootstrap
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_signed_payload_is_accepted(self, signed_client, broadcast):
        body = json.dumps(_webhook(SCENARIO_EVENT)).encode()
        signature = "sha256=" + hmac.new(b"app-secret", body, hashlib.sha256).hexdigest()

        response = signed_client.post(
            "/webhook",
            content=body,
            headers={"Content-Type": "application/json", "X-Hub-Signature-256": signature},
        )

        assert response.status_code == 200
        broadcast.assert_awaited_once()

    def test_unsigned_payload_is_rejected(self, signed_client, broadcast):
        response = signed_client.post("/webhook", json=_webhook(SCENARIO_EVENT))

        assert response.status_code == 403
        broadcast.assert_not_awaited()


class TestSendMessage:

    def test_text_send_by_default(self, client, graph):
        response = client.post("/send-message", json={"psid": "U1", "message": "hello", "pageId": "A1"})

        assert response.status_code == 200
        assert response.text == "Message sent successfully"
        graph.send_message.assert_awaited_once_with(
            {"recipient": {"id": "U1"}, "message": {"text": "hello"}, "messaging_type": "RESPONSE"},
            "T1",
        )

    def test_image_send(self, client, graph):
        response = client.post(
            "/send-message",
            json={"psid": "U1", "message": "https://cdn.example/cat.png", "pageId": "A1", "messageType": "image"},
        )

        assert response.status_code == 200
        payload = graph.send_message.await_args.args[0]
        assert payload["message"]["attachment"]["payload"] == {
            "url": "https://cdn.example/cat.png",
            "is_reusable": True,
        }

    @pytest.mark.parametrize(
        "body",
        [
            {"message": "hello", "pageId": "A1"},
            {"psid": "U1", "pageId": "A1"},
            {"psid": "U1", "message": "hello"},
            {},
        ],
    )
    def test_missing_fields(self, client, graph, body):
        response = client.post("/send-message", json=body)

        assert response.status_code == 400
        assert response.text == "Missing required fields: psid, message, pageId"
        assert response.headers["X-Error-Code"] == "missing_fields"
        graph.send_message.assert_not_awaited()

    def test_no_body(self, client, graph):
        response = client.post("/send-message")

        assert response.status_code == 400
        graph.send_message.assert_not_awaited()

    def test_unconfigured_page(self, client, graph):
        response = client.post("/send-message", json={"psid": "U1", "message": "hello", "pageId": "B2"})

        assert response.status_code == 500
        assert response.text == "Token for page B2 not configured."
        assert response.headers["X-Error-Code"] == "credential_not_configured"
        graph.send_message.assert_not_awaited()

    def test_send_api_failure(self, client, graph):
        graph.send_message.side_effect = GraphAPIError("(#551) This person isn't available right now.", 400)

        response = client.post("/send-message", json={"psid": "U1", "message": "hello", "pageId": "A1"})

        assert response.status_code == 500
        assert response.text == "Failed to send message"
        assert response.headers["X-Error-Code"] == "send_failed"

    def test_numeric_psid_is_accepted(self, client, graph):
        response = client.post("/send-message", json={"psid": 1234567890, "message": "hi", "pageId": "A1"})

        assert response.status_code == 200
        payload = graph.send_message.await_args.args[0]
        assert payload["recipient"] == {"id": "1234567890"}

    def test_null_message_type_sends_text(self, client, graph):
        response = client.post(
            "/send-message",
            json={"psid": "U1", "message": "hello", "pageId": "A1", "messageType": None},
        )

        assert response.status_code == 200
        graph.send_message.assert_awaited_once_with(
            {"recipient": {"id": "U1"}, "message": {"text": "hello"}, "messaging_type": "RESPONSE"},
            "T1",
        )


class TestPagesInfo:

    def test_configured_pages(self, client):
        response = client.get("/pages-info")

        assert response.status_code == 200
        assert response.json() == [
            {"id": "A1", "name": "My Page", "picture": {"data": {"url": "https://cdn.example/page.jpg"}}},
        ]

    def test_no_pages_configured(self, relay_config, graph):
        bootstrap = RelayBootstrap(replace(relay_config, accounts=[]), graph=graph)
        app.dependency_overrides[get_bootstrap] = lambda: bootstrap
        try:
            response = TestClient(app).get("/pages-info")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json() == []
        graph.get_page_info.assert_not_awaited()

    def test_failed_page_is_left_out(self, client, graph):
        graph.get_page_info.side_effect = GraphAPIError("Unsupported get request.", 400)

        response = client.get("/pages-info")

        assert response.status_code == 200
        assert response.json() == []

    def test_non_dict_page_response_is_left_out(self, client, graph):
        graph.get_page_info.side_effect = None
        graph.get_page_info.return_value = ["not", "a", "dict"]

        response = client.get("/pages-info")

        assert response.status_code == 200
        assert response.json() == []

    def test_unexpected_error(self, client, graph):
        graph.get_page_info.side_effect = RuntimeError("connection pool closed")

        response = client.get("/pages-info")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch page info"}


class TestHealth:

    def test_live(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}
