# tests/conftest.py
from typing import Any, Callable, Iterator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


def make_settings(**overrides: Any) -> Settings:
    base: dict[str, Any] = {
        "RESEND_API_KEY": None,
        "RESEND_FROM": None,
        "SUPPORT_EMAIL_TO": None,
        "INTERAKT_API_URL": None,
        "INTERAKT_API_KEY": None,
        "INTERAKT_SENDER_ID": None,
        "SUPPORT_WHATSAPP_TO": None,
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)


class FakeProviders:
    """Records outbound requests and answers with a per-host status."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.status.get(request.url.host, 200)
        return httpx.Response(status, json={"id": "msg_1"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def providers() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
def app_factory(providers: FakeProviders) -> Callable[..., FastAPI]:
    def _make(**overrides: Any) -> FastAPI:
        return create_app(make_settings(**overrides), transport=providers.transport)

    return _make


@pytest.fixture
def client_factory(app_factory) -> Iterator[Callable[..., TestClient]]:
    clients: list[TestClient] = []

    def _make(**overrides: Any) -> TestClient:
        app = app_factory(**overrides)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.__exit__(None, None, None)


@pytest.fixture
def client(client_factory) -> TestClient:
    return client_factory()


def ticket_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "out_of_zone",
        "distance_km": 12,
        "max_km": 8,
        "pincode": "560001",
        "customer": {
            "name": "A",
            "whatsapp": "+919876543210",
            "contact": "+919876543210",
            "address": {"line1": "X", "city": "Y"},
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture(name="ticket_payload")
def ticket_payload_fixture() -> Callable[..., dict[str, Any]]:
    return ticket_payload
