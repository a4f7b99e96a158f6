# tests/test_tickets.py
import json
import re

from fastapi.testclient import TestClient

CONFIGURED_SETTINGS = {
    "RESEND_API_KEY": "re_test",
    "RESEND_FROM": "support@shop.test",
    "INTERAKT_API_URL": "https://wa.provider.test/v1/message",
    "INTERAKT_API_KEY": "ik_test",
}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_create_and_get_ticket(client, ticket_payload):
    r = client.post("/support", json=ticket_payload())
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["status"] == "created"
    assert re.fullmatch(r"SUP\d{6}", body["id"])

    r2 = client.get(f"/tickets/{body['id']}")
    assert r2.status_code == 200
    data = r2.json()
    assert data["id"] == body["id"]
    assert data["type"] == "out_of_zone"
    assert data["pincode"] == "560001"
    assert data["distance_km"] == 12
    assert data["customer"]["address"]["city"] == "Y"
    assert data["created_at"]


def test_resubmit_same_id_replaces_ticket(client, ticket_payload):
    r = client.post("/support", json=ticket_payload(id="SUP123456", reason="first"))
    assert r.json()["status"] == "created"
    first = client.get("/tickets/SUP123456").json()

    r2 = client.post("/support", json=ticket_payload(id="SUP123456", reason="second"))
    assert r2.status_code == 200
    assert r2.json() == {"ok": True, "status": "updated", "id": "SUP123456"}

    data = client.get("/tickets/SUP123456").json()
    assert data["reason"] == "second"
    assert data["created_at"] == first["created_at"]

    listing = client.get("/debug/tickets").json()
    assert listing["count"] == 1


def test_get_not_found_returns_404(client):
    r = client.get("/tickets/SUP000000")
    assert r.status_code == 404
    assert r.json() == {"ok": False, "error": "not_found", "detail": "Ticket not found"}


def test_create_validation_errors(client, ticket_payload):
    # unknown type
    r1 = client.post("/support", json=ticket_payload(type="refund"))
    assert r1.status_code == 400
    assert r1.json()["error"] == "invalid_payload"

    # missing customer
    payload = ticket_payload()
    del payload["customer"]
    r2 = client.post("/support", json=payload)
    assert r2.status_code == 400

    # not an object at all
    r3 = client.post("/support", json=["out_of_zone"])
    assert r3.status_code == 400

    assert client.get("/debug/tickets").json()["count"] == 0


def test_notify_unknown_ticket_returns_404(client, providers):
    r = client.post("/support/notify", json={"id": "SUP999999", "email": "ops@shop.test"})
    assert r.status_code == 404
    assert providers.requests == []
    assert client.get("/debug/tickets").json()["count"] == 0


def test_notify_without_credentials_skips_everything(client, providers, ticket_payload):
    tid = client.post("/support", json=ticket_payload()).json()["id"]

    r = client.post(
        "/support/notify",
        json={"id": tid, "email": "ops@shop.test", "whatsapp": "+919876543210"},
    )
    assert r.status_code == 200
    assert r.json() == {"ok": True, "id": tid, "email": "skipped", "whatsapp": "skipped"}
    assert providers.requests == []


def test_notify_sends_to_both_channels(client_factory, providers, ticket_payload):
    client = client_factory(**CONFIGURED_SETTINGS)
    tid = client.post("/support", json=ticket_payload()).json()["id"]

    r = client.post(
        "/support/notify",
        json={"id": tid, "email": "ops@shop.test", "whatsapp": "+919876543210"},
    )
    assert r.status_code == 200
    assert r.json()["email"] == "sent"
    assert r.json()["whatsapp"] == "sent"
    hosts = sorted(req.url.host for req in providers.requests)
    assert hosts == ["api.resend.com", "wa.provider.test"]


def test_notify_provider_failure_is_reported_per_channel(client_factory, providers, ticket_payload):
    providers.status["api.resend.com"] = 500
    client = client_factory(**CONFIGURED_SETTINGS)
    tid = client.post("/support", json=ticket_payload()).json()["id"]

    r = client.post(
        "/support/notify",
        json={"id": tid, "email": "ops@shop.test", "whatsapp": "+919876543210"},
    )
    assert r.status_code == 200
    assert r.json()["email"] == "failed"
    assert r.json()["whatsapp"] == "sent"


def test_debug_tickets_lists_most_recent(client_factory, ticket_payload):
    client = client_factory(DEBUG_TICKETS_LIMIT=2)
    for n in range(3):
        client.post("/support", json=ticket_payload(id=f"SUP00000{n}"))

    r = client.get("/debug/tickets")
    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 3
    assert [t["id"] for t in data["tickets"]] == ["SUP000001", "SUP000002"]


def test_debug_routes_can_be_disabled(client_factory):
    client = client_factory(ENABLE_DEBUG_ROUTES=False)
    assert client.get("/debug/tickets").status_code == 404


def test_oversized_body_is_rejected(client_factory, ticket_payload):
    client = client_factory(MAX_BODY_BYTES=64)
    r = client.post("/support", json=ticket_payload())
    assert r.status_code == 413
    assert r.json()["error"] == "payload_too_large"


def test_oversized_chunked_body_is_rejected(client_factory, ticket_payload):
    client = client_factory(MAX_BODY_BYTES=64)
    raw = json.dumps(ticket_payload()).encode()

    def chunks():
        for start in range(0, len(raw), 32):
            yield raw[start:start + 32]

    r = client.post("/support", content=chunks(), headers={"content-type": "application/json"})
    assert r.status_code == 413
    assert r.json()["error"] == "payload_too_large"
    assert client.get("/debug/tickets").json()["count"] == 0


def test_chunked_body_under_limit_is_accepted(client, ticket_payload):
    raw = json.dumps(ticket_payload()).encode()

    def chunks():
        yield raw[:20]
        yield raw[20:]

    r = client.post("/support", content=chunks(), headers={"content-type": "application/json"})
    assert r.status_code == 200
    assert r.json()["status"] == "created"


def test_unexpected_error_returns_500_json(app_factory):
    app = app_factory()

    def explode():
        raise RuntimeError("boom")

    app.add_api_route("/explode", explode, methods=["GET"])
    client = TestClient(app, raise_server_exceptions=False)

    r = client.get("/explode")
    assert r.status_code == 500
    assert r.json() == {"ok": False, "error": "internal_error"}
