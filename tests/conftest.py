"""
Shared fixtures for hookrelay tests.

Outbound webhooks are intercepted with httpx.MockTransport; nothing here
touches the network.
"""

import json
from typing import Iterable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from hookrelay.core.config import AppConfig, RelayConfig, ServerConfig, ThrottleConfig
from hookrelay.directory.store import DirectoryRegistry
from hookrelay.relay.client import WebhookClient
from hookrelay.relay.service import RelayService
from hookrelay.throttle.limiter import SubmissionThrottle
from hookrelay.ui.http_server import create_app

OPERATOR_URL = "https://discord.com/api/webhooks/100/operator-token"
OWNER_URL = "https://discordapp.com/api/webhooks/200/owner-token"
SOURCE_URL = "https://discord.com/api/webhooks/300/source-token"


class WebhookRecorder:
    """MockTransport handler that records every webhook POST."""

    def __init__(self, status_code: int = 204, failing: Iterable[str] = ()):
        self.status_code = status_code
        self.failing = set(failing)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) in self.failing:
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(self.status_code)

    @property
    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]

    def contents(self) -> List[str]:
        return [json.loads(r.content)["content"] for r in self.requests]

    def content_for(self, url: str) -> str:
        for request in self.requests:
            if str(request.url) == url:
                return json.loads(request.content)["content"]
        raise AssertionError(f"No request sent to {url}")


@pytest.fixture
def recorder() -> WebhookRecorder:
    return WebhookRecorder()


def build_service(
    recorder: WebhookRecorder,
    operator_endpoint=OPERATOR_URL,
    throttle: SubmissionThrottle = None,
) -> RelayService:
    return RelayService(
        registry=DirectoryRegistry(),
        throttle=throttle or SubmissionThrottle(),
        client=WebhookClient(transport=httpx.MockTransport(recorder)),
        operator_endpoint=operator_endpoint,
    )


@pytest.fixture
def service(recorder) -> RelayService:
    return build_service(recorder)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        relay=RelayConfig(operator_webhook_url=OPERATOR_URL),
        throttle=ThrottleConfig(),
        server=ServerConfig(trust_forwarded_for=True, public_base_url=None),
    )


@pytest.fixture
def client(config, service):
    app = create_app(config=config, service=service)
    with TestClient(app) as test_client:
        yield test_client


def from_client(n: int) -> dict:
    """Headers that give a request its own throttle key."""
    return {"X-Forwarded-For": f"198.51.100.{n}"}
