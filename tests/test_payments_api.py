import pytest
from fastapi.testclient import TestClient

from src.api.endpoints.payments import build_transaction_client, get_transaction_client
from src.api.main import app
from src.integrations.clients.mocks.transactions import MockTransactionClient
from src.integrations.clients.real_http.relay import RelayTransactionClient
from src.integrations.clients.real_http.transactions import MaksekeskusClient
from src.integrations.contracts.interfaces import TransactionStatus
from src.integrations.errors import GatewayConfigError, TransportError

BODY = {
    "amount": "19.5",
    "reference": "order-2002",
    "email": "buyer@example.com",
    "returnUrl": "https://shop.example.com/checkout/return",
    "cancelUrl": "https://shop.example.com/checkout/cancel",
    "notificationUrl": "https://shop.example.com/api/payments/notify",
}


@pytest.fixture
def mock_client():
    fake = MockTransactionClient()
    app.dependency_overrides[get_transaction_client] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(mock_client):
    return TestClient(app)


def test_health(api_client):
    response = api_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_transaction_returns_payment_url(api_client, mock_client):
    response = api_client.post("/api/v1/payments/transactions", json=BODY)

    assert response.status_code == 200
    data = response.json()
    assert data["reference"] == "order-2002"
    assert data["payment_url"].startswith("https://payment.test.maksekeskus.ee/mock/")
    transaction_id = mock_client.transaction_id_for("order-2002")
    assert mock_client.payloads[transaction_id]["transaction"]["amount"] == "19.50"


def test_create_transaction_rejects_invalid_body(api_client):
    response = api_client.post("/api/v1/payments/transactions", json={**BODY, "amount": 0})
    assert response.status_code == 422


def test_create_transaction_invalid_url_maps_to_422(api_client):
    response = api_client.post("/api/v1/payments/transactions", json={**BODY, "returnUrl": "checkout/return"})
    assert response.status_code == 422
    assert response.json()["detail"] == "Failed to create transaction."


def test_status_endpoint(api_client, mock_client):
    mock_client.script_statuses("t1", [TransactionStatus.PENDING])

    response = api_client.get("/api/v1/payments/transactions/t1/status")

    assert response.status_code == 200
    assert response.json() == {"transaction_id": "t1", "status": "pending"}


def test_verify_endpoint(api_client, mock_client):
    response = api_client.post("/api/v1/payments/verify", json={"transactionId": "t1"})

    assert response.status_code == 200
    assert response.json() == {"transaction_id": "t1", "verified": True}


def test_gateway_failure_is_reported_without_details(api_client, mock_client):
    mock_client.script_statuses("t1", [TransportError("connect to 10.0.0.5:443 refused")])

    response = api_client.post("/api/v1/payments/verify", json={"transactionId": "t1"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to verify payment."


def test_build_transaction_client_selects_implementation():
    assert isinstance(build_transaction_client({}), MockTransactionClient)
    assert isinstance(
        build_transaction_client({"MAKSEKESKUS_STORE_ID": "s", "MAKSEKESKUS_SECRET_KEY": "k"}),
        MaksekeskusClient,
    )
    assert isinstance(build_transaction_client({"PAYMENT_RELAY_URL": "https://hook"}), RelayTransactionClient)


def test_build_transaction_client_fails_fast_on_partial_credentials():
    with pytest.raises(GatewayConfigError):
        build_transaction_client({"MAKSEKESKUS_STORE_ID": "s"})
