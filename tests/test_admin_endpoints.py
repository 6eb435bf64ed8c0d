"""Tests for operator endpoints."""

from fastapi.testclient import TestClient

from picaso.api.app import create_app
from picaso.containers import AppContainer
from picaso.domain.orders import (
    DEFAULT_RECIPIENT,
    INTENT_FAILED,
    INTENT_FULFILLED,
    FulfillmentIntent,
    PaymentSession,
)
from tests.conftest import (
    FakeFulfillmentClient,
    FakePaymentClient,
    InMemoryFulfillmentRepository,
)

_ADMIN = {"X-Admin-Token": "admin-token"}


def _intent(session_id: str, status: str) -> FulfillmentIntent:
    return FulfillmentIntent(
        session_id=session_id,
        image_url="https://x/img.png",
        prompt="a red fox in snow",
        recipient=DEFAULT_RECIPIENT,
        status=status,
    )


def test_admin_health_requires_token(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/admin/health").status_code == 401
    assert client.get("/admin/health", headers=_ADMIN).json() == {"status": "ok"}


def test_printful_store_check(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/admin/printful/store", headers=_ADMIN)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["store"]["name"] == "PICASO Test Store"


def test_manual_order_requires_token(
    container: AppContainer, fulfillment_client: FakeFulfillmentClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/create-printful-order", json={"sessionId": "cs_1"})

    assert response.status_code == 401
    assert fulfillment_client.calls == []


def test_manual_order_creates_print_order(
    container: AppContainer,
    payment_client: FakePaymentClient,
    fulfillment_client: FakeFulfillmentClient,
) -> None:
    payment_client.sessions["cs_1"] = PaymentSession(
        session_id="cs_1",
        url=None,
        metadata={"prompt": "a red fox in snow", "imageUrl": "https://x/img.png"},
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/api/create-printful-order", json={"sessionId": "cs_1"}, headers=_ADMIN
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "orderId": 9001}
    assert fulfillment_client.orders[0]["recipient"].name == "Test Customer"


def test_manual_order_unknown_session_returns_error(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/create-printful-order", json={"sessionId": "cs_missing"}, headers=_ADMIN
    )

    assert response.status_code == 500
    assert "cs_missing" in response.json()["error"]


def test_manual_order_without_session_id_is_400(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/create-printful-order", json={}, headers=_ADMIN)

    assert response.status_code == 400
    assert response.json() == {"error": "Session id is required"}


def test_list_fulfillments_filters_by_status(
    container: AppContainer,
    fulfillment_repository: InMemoryFulfillmentRepository,
) -> None:
    fulfillment_repository.save_intent(_intent("cs_ok", INTENT_FULFILLED))
    fulfillment_repository.save_intent(_intent("cs_bad", INTENT_FAILED))
    client = TestClient(create_app(container))

    response = client.get(
        "/admin/fulfillments", params={"status": "failed"}, headers=_ADMIN
    )

    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is True
    assert [row["session_id"] for row in data["fulfillments"]] == ["cs_bad"]
    assert data["fulfillments"][0]["recipient"]["name"] == "PICASO Customer"


def test_retry_fulfillment(
    container: AppContainer,
    fulfillment_repository: InMemoryFulfillmentRepository,
    fulfillment_client: FakeFulfillmentClient,
) -> None:
    fulfillment_repository.save_intent(_intent("cs_bad", INTENT_FAILED))
    client = TestClient(create_app(container))

    response = client.post("/admin/fulfillments/cs_bad/retry", headers=_ADMIN)

    assert response.status_code == 200
    assert response.json() == {"success": True, "orderId": 9001}
    assert fulfillment_client.calls == ["upload", "order"]
    assert fulfillment_repository.intents["cs_bad"].status == INTENT_FULFILLED


def test_retry_already_fulfilled_is_400(
    container: AppContainer,
    fulfillment_repository: InMemoryFulfillmentRepository,
) -> None:
    fulfillment_repository.save_intent(_intent("cs_ok", INTENT_FULFILLED))
    client = TestClient(create_app(container))

    response = client.post("/admin/fulfillments/cs_ok/retry", headers=_ADMIN)

    assert response.status_code == 400
    assert "already fulfilled" in response.json()["error"]
