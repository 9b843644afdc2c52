"""Pytest fixtures for the checkout transaction clients."""

from typing import Callable

import httpx
import pytest

from src.integrations.contracts.interfaces import TransactionRequest
from src.utils.config_loader import GatewayConfig, RelayConfig
from tests.fakes import GATEWAY_URL, RELAY_URL, RecordingHandler, RecordingSleep


@pytest.fixture
def transaction_request():
    return TransactionRequest(
        amount=9,
        reference="order-1001",
        email="buyer@example.com",
        return_url="https://shop.example.com/checkout/return",
        cancel_url="https://shop.example.com/checkout/cancel",
        notification_url="https://shop.example.com/api/payments/notify",
    )


@pytest.fixture
def gateway_config():
    return GatewayConfig(store_id="store-1", secret_key="s3cret", base_url=GATEWAY_URL)


@pytest.fixture
def relay_config():
    return RelayConfig(relay_url=RELAY_URL)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def http_client_for() -> Callable[[RecordingHandler], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by a RecordingHandler."""

    def _build(handler: RecordingHandler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _build
