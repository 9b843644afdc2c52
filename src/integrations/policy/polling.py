"""
Transaction status polling.

The policy is a plain value so it can be tested without a network: give
poll_transaction_status a status fetcher and a sleep function and it runs the
attempt loop. Only a pending status is retried; anything the fetcher raises
propagates on the first occurrence.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

from src.integrations.contracts.interfaces import TransactionStatus
from src.integrations.contracts.transactions import is_terminal_status
from src.integrations.errors import PollingTimeout, TransactionFailed

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[str], Awaitable[TransactionStatus]]
SleepFn = Callable[[float], Awaitable[None]]


class PollingPolicy(BaseModel):
    """How long to wait for a 202-accepted transaction to settle."""

    max_attempts: int = Field(default=10, ge=1, le=100)
    delay_seconds: float = Field(default=2.0, ge=0.0)
    backoff_factor: float = Field(default=1.0, ge=1.0)   # 1.0 keeps the delay fixed

    def delay_before(self, attempt: int) -> float:
        """Delay to wait before the given attempt (1-based). No wait before the first."""
        if attempt <= 1:
            return 0.0
        return self.delay_seconds * (self.backoff_factor ** (attempt - 2))


async def poll_transaction_status(
    transaction_id: str,
    fetch_status: StatusFetcher,
    policy: PollingPolicy,
    *,
    sleep: SleepFn = asyncio.sleep,
) -> TransactionStatus:
    """
    Poll until the transaction is completed.

    Returns TransactionStatus.COMPLETED, raises TransactionFailed when the
    gateway reports failure and PollingTimeout once max_attempts pending
    results have been seen.
    """
    for attempt in range(1, policy.max_attempts + 1):
        delay = policy.delay_before(attempt)
        if delay:
            await sleep(delay)

        status = await fetch_status(transaction_id)
        logger.info(
            "[POLL] Transaction %s attempt %d/%d -> %s",
            transaction_id, attempt, policy.max_attempts, status.value,
        )

        if not is_terminal_status(status):
            continue
        if status == TransactionStatus.COMPLETED:
            return status
        raise TransactionFailed(
            f"Gateway reported transaction {transaction_id} as failed (attempt {attempt}).",
            transaction_id=transaction_id,
        )

    logger.warning(
        "[POLL] Transaction %s still pending after %d attempts", transaction_id, policy.max_attempts
    )
    raise PollingTimeout(
        f"Transaction {transaction_id} still pending after {policy.max_attempts} attempts.",
        transaction_id=transaction_id,
        attempts=policy.max_attempts,
    )
