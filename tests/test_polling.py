"""Tests for the transaction status polling policy."""

import pytest
from pydantic import ValidationError

from src.integrations.contracts.interfaces import TransactionStatus
from src.integrations.errors import PollingTimeout, TransactionFailed, TransportError
from src.integrations.policy.polling import PollingPolicy, poll_transaction_status

P = TransactionStatus.PENDING
C = TransactionStatus.COMPLETED
F = TransactionStatus.FAILED


class ScriptedStatuses:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def __call__(self, transaction_id):
        self.calls.append(transaction_id)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_default_policy():
    policy = PollingPolicy()
    assert policy.max_attempts == 10
    assert policy.delay_seconds == 2.0
    assert [policy.delay_before(n) for n in (1, 2, 3, 10)] == [0.0, 2.0, 2.0, 2.0]


def test_backoff_policy_delays():
    policy = PollingPolicy(delay_seconds=1.0, backoff_factor=2.0)
    assert [policy.delay_before(n) for n in (1, 2, 3, 4)] == [0.0, 1.0, 2.0, 4.0]


def test_policy_rejects_zero_attempts():
    with pytest.raises(ValidationError):
        PollingPolicy(max_attempts=0)


@pytest.mark.asyncio
async def test_completes_after_pending_statuses(recording_sleep):
    fetch = ScriptedStatuses(P, P, C)

    status = await poll_transaction_status("abc123", fetch, PollingPolicy(), sleep=recording_sleep)

    assert status == C
    assert fetch.calls == ["abc123"] * 3
    assert recording_sleep.delays == [2.0, 2.0]


@pytest.mark.asyncio
async def test_first_attempt_is_not_delayed(recording_sleep):
    fetch = ScriptedStatuses(C)
    await poll_transaction_status("abc123", fetch, PollingPolicy(), sleep=recording_sleep)
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_failed_status_stops_polling(recording_sleep):
    fetch = ScriptedStatuses(P, F, C)

    with pytest.raises(TransactionFailed) as info:
        await poll_transaction_status("abc123", fetch, PollingPolicy(), sleep=recording_sleep)

    assert info.value.transaction_id == "abc123"
    assert len(fetch.calls) == 2


@pytest.mark.asyncio
async def test_times_out_after_exactly_max_attempts(recording_sleep):
    fetch = ScriptedStatuses(*([P] * 11))

    with pytest.raises(PollingTimeout) as info:
        await poll_transaction_status("abc123", fetch, PollingPolicy(), sleep=recording_sleep)

    assert info.value.attempts == 10
    assert len(fetch.calls) == 10
    assert recording_sleep.delays == [2.0] * 9


@pytest.mark.asyncio
async def test_transport_errors_are_not_retried(recording_sleep):
    fetch = ScriptedStatuses(P, TransportError("connection reset"), C)

    with pytest.raises(TransportError):
        await poll_transaction_status("abc123", fetch, PollingPolicy(), sleep=recording_sleep)

    assert len(fetch.calls) == 2
