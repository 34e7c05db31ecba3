"""HTTP surface."""

import time
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from nebula_checkout import Settings
from nebula_checkout.sessions import SessionManager
from nebula_checkout.wire import create_app

BODY = {
    "idempotencyKey": "checkout:wire-1",
    "subtotal": 100,
    "discount": 0,
    "total": 100,
    "rewardId": None,
    "items": [{"productId": "tee", "name": "Nebula Tee", "quantity": 1, "unitAmount": 100}],
    "method": "nebula_pay",
}


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(SessionManager(settings))) as c:
        yield c


def test_lists_payment_methods(client: TestClient) -> None:
    response = client.get("/payment-methods")

    assert response.status_code == 200
    methods = response.json()
    assert len(methods) == 9
    cash = next(m for m in methods if m["id"] == "cash_meetup")
    assert cash["requiresReview"] is True
    assert "settlementEta" in cash


def test_create_session_camel_case(client: TestClient) -> None:
    response = client.post("/payment-sessions", json=BODY)

    assert response.status_code == 200
    session = response.json()
    assert session["id"].startswith("ps_")
    assert session["reference"].startswith("NEB-")
    assert session["status"] == "pending"
    assert session["amount"] == 100
    assert session["currency"] == "EUR"
    assert {"createdAt", "expiresAt", "instructions"} <= session.keys()


def test_same_key_same_session(client: TestClient) -> None:
    first = client.post("/payment-sessions", json=BODY).json()
    second = client.post("/payment-sessions", json=BODY).json()
    assert first["id"] == second["id"]
    assert first["reference"] == second["reference"]


def test_get_session_reflects_finalize(client: TestClient) -> None:
    created = client.post("/payment-sessions", json=BODY).json()
    time.sleep(0.15)

    response = client.get(f"/payment-sessions/{created['id']}")
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"


def test_unknown_session_is_404(client: TestClient) -> None:
    response = client.get("/payment-sessions/ps_nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Unknown payment session ps_nope"


def test_rejects_bad_request(client: TestClient) -> None:
    response = client.post("/payment-sessions", json={**BODY, "method": "paypal"})
    assert response.status_code == 422

    response = client.post("/payment-sessions", json={**BODY, "idempotencyKey": ""})
    assert response.status_code == 422
