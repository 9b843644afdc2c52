"""
Checkout transactions MOCK client.

⚠️  This is a mock implementation for development and testing.
    It never touches the network. Status sequences can be scripted per
    transaction so the polling behaviour of the real clients can be
    reproduced end-to-end.
"""

import asyncio
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Union

from src.integrations.contracts.interfaces import (
    TransactionClient,
    TransactionRequest,
    TransactionStatus,
)
from src.integrations.contracts.transactions import (
    build_transaction_payload,
    validate_transaction_request,
)
from src.integrations.errors import (
    CREATE_FAILED_MESSAGE,
    STATUS_FAILED_MESSAGE,
    VERIFY_FAILED_MESSAGE,
    GatewayError,
    InvalidTransactionRequest,
)
from src.integrations.policy.polling import PollingPolicy, SleepFn, poll_transaction_status

logger = logging.getLogger(__name__)

MOCK_PAYMENT_BASE_URL = "https://payment.test.maksekeskus.ee/mock"
DEFAULT_HISTORY_LIMIT = 500


class MockTransactionClient(TransactionClient):
    """
    Mock checkout client.

    Parameters
    ----------
    accept_async : bool
        If True, create_transaction behaves like a 202-accepted gateway and
        polls the scripted statuses before returning the caller's return_url.
        Otherwise it returns a fake payment-methods link immediately.
    default_status : TransactionStatus
        Status reported once a transaction's scripted sequence runs out.
    polling : PollingPolicy
        Policy used in accept_async mode.
    sleep : callable
        Awaitable sleep used between polls; tests pass a recorder.
    history_limit : int
        Most recent transactions (payloads, references, status calls) kept
        in memory; older entries are dropped.
    """

    def __init__(
        self,
        accept_async: bool = False,
        default_status: TransactionStatus = TransactionStatus.COMPLETED,
        polling: Optional[PollingPolicy] = None,
        sleep: SleepFn = asyncio.sleep,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._accept_async = accept_async
        self._default_status = default_status
        self._polling = polling or PollingPolicy()
        self._sleep = sleep
        self._history_limit = history_limit

        # In-memory stores (reset on restart, bounded by history_limit)
        self._scripts: Dict[str, List[Union[TransactionStatus, GatewayError]]] = {}
        self._by_reference: Dict[str, str] = {}
        self.payloads: Dict[str, dict] = {}
        self.status_calls: List[str] = []

        logger.info("[MOCK] Transaction client initialised (accept_async=%s)", accept_async)

    # ------------------------------------------------------------------
    # Scripting
    # ------------------------------------------------------------------

    def script_statuses(self, key: str, statuses: Iterable[Union[TransactionStatus, GatewayError]]) -> None:
        """
        Queue the statuses reported for a transaction, in order.

        key is a transaction id, or a merchant reference for a transaction that
        has not been created yet. A GatewayError in the sequence is raised
        instead of returned, to simulate transport or HTTP failures.
        """
        self._scripts[key] = list(statuses)

    def transaction_id_for(self, reference: str) -> Optional[str]:
        return self._by_reference.get(reference)

    def _new_transaction_id(self) -> str:
        return uuid.uuid4().hex[:16]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create_transaction(self, request: TransactionRequest) -> str:
        try:
            problems = validate_transaction_request(request)
            if problems:
                raise InvalidTransactionRequest(problems)

            if request.reference in self._by_reference:
                logger.warning("[MOCK] Reference %s reused for a new payment attempt", request.reference)
                del self._by_reference[request.reference]

            transaction_id = self._new_transaction_id()
            self._by_reference[request.reference] = transaction_id
            if request.reference in self._scripts:
                self._scripts[transaction_id] = self._scripts.pop(request.reference)
            self.payloads[transaction_id] = build_transaction_payload(request)
            self._trim_history()
            logger.info("[MOCK] Created transaction %s for ref=%s", transaction_id, request.reference)

            if not self._accept_async:
                return f"{MOCK_PAYMENT_BASE_URL}/{transaction_id}/payment_methods"

            await poll_transaction_status(transaction_id, self._next_status, self._polling, sleep=self._sleep)
            return request.return_url
        except GatewayError as exc:
            logger.error("[MOCK] Transaction creation failed ref=%s: %s", request.reference, exc.detail)
            exc.user_message = CREATE_FAILED_MESSAGE
            raise

    async def get_transaction_status(self, transaction_id: str) -> TransactionStatus:
        try:
            return await self._next_status(transaction_id)
        except GatewayError as exc:
            logger.error("[MOCK] Status lookup failed for %s: %s", transaction_id, exc.detail)
            exc.user_message = STATUS_FAILED_MESSAGE
            raise

    async def verify_payment(self, transaction_id: str) -> bool:
        try:
            status = await self._next_status(transaction_id)
        except GatewayError as exc:
            logger.error("[MOCK] Payment verification failed for %s: %s", transaction_id, exc.detail)
            exc.user_message = VERIFY_FAILED_MESSAGE
            raise
        return status == TransactionStatus.COMPLETED

    async def _next_status(self, transaction_id: str) -> TransactionStatus:
        self.status_calls.append(transaction_id)
        if len(self.status_calls) > self._history_limit:
            del self.status_calls[: -self._history_limit]

        script = self._scripts.get(transaction_id)
        if script:
            outcome = script.pop(0)
            if not script:
                del self._scripts[transaction_id]
            if isinstance(outcome, GatewayError):
                raise outcome
            return outcome
        return self._default_status

    def _trim_history(self) -> None:
        # dicts keep insertion order, so the first keys are the oldest
        while len(self.payloads) > self._history_limit:
            oldest = next(iter(self.payloads))
            del self.payloads[oldest]
            self._scripts.pop(oldest, None)
        while len(self._by_reference) > self._history_limit:
            del self._by_reference[next(iter(self._by_reference))]
