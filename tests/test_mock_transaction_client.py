from dataclasses import replace

import pytest

from src.integrations.clients.mocks.transactions import MOCK_PAYMENT_BASE_URL, MockTransactionClient
from src.integrations.contracts.interfaces import TransactionStatus
from src.integrations.errors import (
    STATUS_FAILED_MESSAGE,
    VERIFY_FAILED_MESSAGE,
    InvalidTransactionRequest,
    PollingTimeout,
    TransportError,
)
from src.integrations.policy.polling import PollingPolicy


@pytest.mark.asyncio
async def test_sync_mode_returns_fake_payment_link(transaction_request):
    client = MockTransactionClient()

    url = await client.create_transaction(transaction_request)

    transaction_id = client.transaction_id_for("order-1001")
    assert url == f"{MOCK_PAYMENT_BASE_URL}/{transaction_id}/payment_methods"
    assert client.payloads[transaction_id]["transaction"]["amount"] == "9.00"
    assert client.status_calls == []


@pytest.mark.asyncio
async def test_async_mode_polls_scripted_statuses(transaction_request, recording_sleep):
    client = MockTransactionClient(accept_async=True, sleep=recording_sleep)
    client.script_statuses("order-1001", [TransactionStatus.PENDING, TransactionStatus.COMPLETED])

    url = await client.create_transaction(transaction_request)

    assert url == transaction_request.return_url
    assert len(client.status_calls) == 2
    assert recording_sleep.delays == [2.0]


@pytest.mark.asyncio
async def test_async_mode_times_out(transaction_request, recording_sleep):
    client = MockTransactionClient(
        accept_async=True,
        default_status=TransactionStatus.PENDING,
        polling=PollingPolicy(max_attempts=3),
        sleep=recording_sleep,
    )

    with pytest.raises(PollingTimeout):
        await client.create_transaction(transaction_request)
    assert len(client.status_calls) == 3


@pytest.mark.asyncio
async def test_reused_reference_is_logged(transaction_request, caplog):
    client = MockTransactionClient()
    await client.create_transaction(transaction_request)

    with caplog.at_level("WARNING"):
        await client.create_transaction(transaction_request)

    assert "reused" in caplog.text


@pytest.mark.asyncio
async def test_invalid_request_is_rejected(transaction_request):
    client = MockTransactionClient()
    with pytest.raises(InvalidTransactionRequest):
        await client.create_transaction(replace(transaction_request, email=""))


@pytest.mark.asyncio
async def test_status_and_verify_follow_script():
    client = MockTransactionClient()
    client.script_statuses("t1", [TransactionStatus.PENDING, TransactionStatus.FAILED])

    assert await client.get_transaction_status("t1") == TransactionStatus.PENDING
    assert await client.verify_payment("t1") is False
    assert await client.verify_payment("t1") is True  # script exhausted, default is completed


@pytest.mark.asyncio
async def test_scripted_errors_are_raised():
    client = MockTransactionClient()
    client.script_statuses("t1", [TransportError("gateway down")])

    with pytest.raises(TransportError) as info:
        await client.get_transaction_status("t1")
    assert str(info.value) == STATUS_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_scripted_errors_are_logged(caplog):
    client = MockTransactionClient()
    client.script_statuses("t1", [TransportError("gateway down")])

    with caplog.at_level("ERROR"):
        with pytest.raises(TransportError) as info:
            await client.verify_payment("t1")

    assert str(info.value) == VERIFY_FAILED_MESSAGE
    assert "[MOCK] Payment verification failed for t1: gateway down" in caplog.text


@pytest.mark.asyncio
async def test_history_is_bounded(transaction_request):
    client = MockTransactionClient(history_limit=2)

    for n in range(4):
        await client.create_transaction(replace(transaction_request, reference=f"order-{n}"))
    for _ in range(5):
        await client.get_transaction_status("t1")

    assert len(client.payloads) == 2
    assert client.transaction_id_for("order-0") is None
    assert client.transaction_id_for("order-3") in client.payloads
    assert client.status_calls == ["t1", "t1"]
