"""
Tests for the relay HTTP API.
"""

from types import SimpleNamespace

from fastapi.testclient import TestClient
from starlette.requests import Request

from hookrelay.core.config import AppConfig, RelayConfig, ServerConfig
from hookrelay.ui.api import client_key
from hookrelay.ui.http_server import create_app

from conftest import OPERATOR_URL, OWNER_URL, SOURCE_URL, WebhookRecorder, build_service, from_client

VALID = {"sourceUrl": SOURCE_URL, "message": "hello there"}


def make_request(config, forwarded=None, peer=("192.0.2.10", 50000)):
    headers = []
    if forwarded:
        headers.append((b"x-forwarded-for", forwarded.encode()))
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/webhook",
        "headers": headers,
        "client": peer,
        "app": SimpleNamespace(state=SimpleNamespace(config=config)),
    }
    return Request(scope)


class TestDirectWebhook:
    """POST /api/webhook"""

    def test_success(self, client, recorder):
        response = client.post("/api/webhook", json=VALID, headers=from_client(1))

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert recorder.urls == [OPERATOR_URL]

    def test_invalid_input(self, client, recorder):
        response = client.post(
            "/api/webhook",
            json={"sourceUrl": "https://evil.example.com/hook", "message": "hi"},
            headers=from_client(1),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid input"
        assert body["errors"][0]["field"] == "sourceUrl"
        assert body["errors"][0]["message"] == "Must be a valid Discord webhook URL"
        assert recorder.requests == []

    def test_malformed_json(self, client, recorder):
        response = client.post(
            "/api/webhook",
            content=b"{not json",
            headers={"Content-Type": "application/json", **from_client(1)},
        )

        assert response.status_code == 400
        assert recorder.requests == []

    def test_snake_case_keys_rejected(self, client, recorder):
        response = client.post(
            "/api/webhook",
            json={"source_url": SOURCE_URL, "message": "hi"},
            headers=from_client(1),
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "sourceUrl"
        assert recorder.requests == []

    def test_rate_limited(self, client, recorder):
        first = client.post("/api/webhook", json=VALID, headers=from_client(1))
        second = client.post("/api/webhook", json=VALID, headers=from_client(1))

        assert first.status_code == 200
        assert second.status_code == 429
        assert second.json()["message"] == (
            "Rate limit exceeded. Please try again in 25 seconds."
        )
        assert second.headers["Retry-After"] == "25"
        assert len(recorder.requests) == 1

    def test_rate_limit_is_per_client(self, client, recorder):
        assert client.post("/api/webhook", json=VALID, headers=from_client(1)).status_code == 200
        assert client.post("/api/webhook", json=VALID, headers=from_client(2)).status_code == 200
        assert len(recorder.requests) == 2

    def test_delivery_failed(self, config):
        recorder = WebhookRecorder(failing=[OPERATOR_URL])
        app = create_app(config=config, service=build_service(recorder))

        with TestClient(app) as client:
            response = client.post("/api/webhook", json=VALID, headers=from_client(1))

        assert response.status_code == 500
        assert response.json() == {
            "message": "Failed to forward message",
            "error": "Connection refused",
        }

    def test_unexpected_error(self, client, service, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(service, "submit_direct", boom)
        response = client.post("/api/webhook", json=VALID, headers=from_client(1))

        assert response.status_code == 500
        assert response.json() == {"message": "An unexpected error occurred"}


class TestDualhook:
    """POST /api/dualhook"""

    def test_register(self, client, recorder, service):
        response = client.post(
            "/api/dualhook",
            json={"directoryName": "promo", "webhook": OWNER_URL},
            headers={"Origin": "https://relay.example", **from_client(1)},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Dualhook created successfully",
            "url": "https://relay.example/promo",
        }
        assert service.registry.lookup("promo") == OWNER_URL
        assert recorder.urls == [OWNER_URL]

    def test_unsendable_webhook_rejected(self, client, recorder, service):
        response = client.post(
            "/api/dualhook",
            json={"directoryName": "promo", "webhook": "https://discord.com/api/webhooks/1/tok\x7f"},
            headers=from_client(1),
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Must be a valid Discord webhook URL"}
        assert not service.registry.exists("promo")
        assert recorder.requests == []

    def test_snake_case_keys_rejected(self, client, service):
        response = client.post(
            "/api/dualhook",
            json={"directory_name": "promo", "webhook": OWNER_URL},
            headers=from_client(1),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Directory name and webhook URL are required"
        assert not service.registry.exists("promo")

    def test_url_falls_back_to_request_base(self, client):
        response = client.post(
            "/api/dualhook",
            json={"directoryName": "promo", "webhook": OWNER_URL},
            headers=from_client(1),
        )

        assert response.json()["url"] == "http://testserver/promo"

    def test_name_taken(self, client, recorder, service):
        service.registry.register("promo", OPERATOR_URL)

        response = client.post(
            "/api/dualhook",
            json={"directoryName": "promo", "webhook": OWNER_URL},
            headers=from_client(1),
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "This directory name is already taken. Please choose a different name."
        )
        assert recorder.requests == []

    def test_missing_fields(self, client):
        response = client.post(
            "/api/dualhook", json={"directoryName": "promo"}, headers=from_client(1)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Directory name and webhook URL are required"

    def test_invalid_webhook(self, client):
        response = client.post(
            "/api/dualhook",
            json={"directoryName": "promo", "webhook": "https://evil.example.com/hook"},
            headers=from_client(1),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Must be a valid Discord webhook URL"

    def test_confirmation_failure_keeps_directory(self, config):
        recorder = WebhookRecorder(failing=[OWNER_URL])
        service = build_service(recorder)
        app = create_app(config=config, service=service)

        with TestClient(app) as client:
            response = client.post(
                "/api/dualhook",
                json={"directoryName": "promo", "webhook": OWNER_URL},
                headers=from_client(1),
            )

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to send confirmation message"
        assert service.registry.exists("promo")

    def test_rate_limited(self, client):
        client.post(
            "/api/dualhook",
            json={"directoryName": "one", "webhook": OWNER_URL},
            headers=from_client(1),
        )
        response = client.post(
            "/api/dualhook",
            json={"directoryName": "two", "webhook": OWNER_URL},
            headers=from_client(1),
        )

        assert response.status_code == 429


class TestDirectoryWebhook:
    """POST /api/{directory}/webhook"""

    def test_registered_directory_sends_two_notifications(self, client, recorder):
        register = client.post(
            "/api/dualhook",
            json={"directoryName": "promo", "webhook": OWNER_URL},
            headers=from_client(1),
        )
        assert register.status_code == 200
        recorder.requests.clear()

        response = client.post("/api/promo/webhook", json=VALID, headers=from_client(2))

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert sorted(recorder.urls) == sorted([OWNER_URL, OPERATOR_URL])

    def test_unregistered_directory_sends_to_operator(self, client, recorder, service):
        response = client.post("/api/ghost/webhook", json=VALID, headers=from_client(1))

        assert response.status_code == 200
        assert recorder.urls == [OPERATOR_URL]
        assert not service.registry.exists("ghost")

    def test_invalid_input(self, client, recorder):
        response = client.post(
            "/api/promo/webhook", json={"sourceUrl": SOURCE_URL}, headers=from_client(1)
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "message"
        assert recorder.requests == []


class TestClientKey:
    """Test throttle key extraction."""

    def test_ignores_forwarded_for_by_default(self, recorder):
        config = AppConfig(
            relay=RelayConfig(operator_webhook_url=OPERATOR_URL),
            server=ServerConfig(trust_forwarded_for=False),
        )
        app = create_app(config=config, service=build_service(recorder))

        with TestClient(app) as client:
            first = client.post("/api/webhook", json=VALID, headers=from_client(1))
            second = client.post("/api/webhook", json=VALID, headers=from_client(2))

        assert first.status_code == 200
        # Both requests come from the same test client address
        assert second.status_code == 429

    def test_first_forwarded_address_wins(self, config):
        request = make_request(config, forwarded="203.0.113.9, 10.0.0.1")
        assert client_key(request) == "203.0.113.9"

    def test_falls_back_to_peer_address(self, config):
        request = make_request(config)
        assert client_key(request) == "192.0.2.10"

    def test_unknown_without_peer(self, config):
        request = make_request(config, peer=None)
        assert client_key(request) == "unknown"


class TestHealth:
    """GET /health"""

    def test_health(self, client, service):
        service.registry.register("promo", OWNER_URL)

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["directories"] == 1
        assert body["throttled_clients"] == 0
        assert body["operator_configured"] is True
