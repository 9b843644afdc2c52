"""
Shared HTTP plumbing for the direct gateway and relay clients.

Subclasses only decide URLs, headers and how verification is fetched. The
create/status/verify flow, response dispatch and error surfacing live here so
both variants behave the same way.
"""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from typing import Any, Dict, Optional

import httpx

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
    InvalidResponseShape,
    InvalidTransactionRequest,
    TransportError,
)
from src.integrations.policy.polling import SleepFn, poll_transaction_status
from src.integrations.policy.response_wrappers import (
    AcceptedWithLocation,
    CreatedTransactionModel,
    GatewayResponse,
    JsonBody,
    TextBody,
    classify_response,
    is_accepted_text,
    normalize_created_transaction,
    normalize_status_json,
    status_from_text,
)
from src.utils.config_loader import CheckoutDefaults

logger = logging.getLogger(__name__)


class HttpTransactionClient(TransactionClient):
    tag = "HTTP"

    def __init__(
        self,
        settings: CheckoutDefaults,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self._http_client = http_client
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Hooks for subclasses
    # ------------------------------------------------------------------

    @abstractmethod
    def _create_url(self) -> str:
        """URL that transactions are POSTed to."""

    @abstractmethod
    def _status_url(self, transaction_id: str) -> str:
        """URL that reports the status of one transaction."""

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _payment_url_for(self, created: CreatedTransactionModel) -> str:
        return created.payment_methods_url

    async def _verification_status(self, transaction_id: str) -> TransactionStatus:
        response = await self._send("GET", self._status_url(transaction_id))
        return self._status_from_reply(classify_response(response), unknown_status=TransactionStatus.PENDING)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def create_transaction(self, request: TransactionRequest) -> str:
        try:
            problems = validate_transaction_request(request)
            if problems:
                raise InvalidTransactionRequest(problems)

            payload = build_transaction_payload(
                request,
                currency=self.settings.currency,
                country=self.settings.country,
                locale=self.settings.locale,
            )
            logger.info(
                "[%s] Creating transaction ref=%s amount=%s %s",
                self.tag, request.reference, payload["transaction"]["amount"], self.settings.currency,
            )
            logger.debug("[%s] Transaction payload: %s", self.tag, payload)

            response = await self._send("POST", self._create_url(), json=payload)
            url = await self._dispatch_created(classify_response(response), request)
        except GatewayError as exc:
            logger.error("[%s] Transaction creation failed ref=%s: %s", self.tag, request.reference, exc.detail)
            exc.user_message = CREATE_FAILED_MESSAGE
            raise

        logger.info("[%s] Transaction ref=%s ready, redirecting to %s", self.tag, request.reference, url)
        return url

    async def get_transaction_status(self, transaction_id: str) -> TransactionStatus:
        try:
            return await self._fetch_status(transaction_id)
        except GatewayError as exc:
            logger.error("[%s] Status lookup failed for %s: %s", self.tag, transaction_id, exc.detail)
            exc.user_message = STATUS_FAILED_MESSAGE
            raise

    async def verify_payment(self, transaction_id: str) -> bool:
        try:
            status = await self._verification_status(transaction_id)
        except GatewayError as exc:
            logger.error("[%s] Payment verification failed for %s: %s", self.tag, transaction_id, exc.detail)
            exc.user_message = VERIFY_FAILED_MESSAGE
            raise

        logger.info("[%s] Transaction %s verified as %s", self.tag, transaction_id, status.value)
        return status == TransactionStatus.COMPLETED

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _dispatch_created(self, reply: GatewayResponse, request: TransactionRequest) -> str:
        if isinstance(reply, AcceptedWithLocation):
            logger.info(
                "[%s] Gateway accepted ref=%s asynchronously as %s, polling",
                self.tag, request.reference, reply.transaction_id,
            )
            await poll_transaction_status(
                reply.transaction_id,
                self._fetch_status,
                self.settings.polling,
                sleep=self._sleep,
            )
            return request.return_url

        if isinstance(reply, JsonBody):
            created = normalize_created_transaction(reply.data)
            logger.info("[%s] Transaction %s created for ref=%s", self.tag, created.transaction_id, request.reference)
            return await self._payment_url_for(created)

        if isinstance(reply, TextBody):
            if is_accepted_text(reply.text):
                return request.return_url
            raise InvalidResponseShape(f"Gateway did not accept the transaction: {reply.text[:200]!r}")

        raise InvalidResponseShape(f"Unhandled gateway response: {reply!r}")

    async def _fetch_status(self, transaction_id: str) -> TransactionStatus:
        response = await self._send("GET", self._status_url(transaction_id))
        return self._status_from_reply(classify_response(response))

    @staticmethod
    def _status_from_reply(
        reply: GatewayResponse, unknown_status: Optional[TransactionStatus] = None
    ) -> TransactionStatus:
        # unknown_status is only passed by verification, where anything but completed is False
        if isinstance(reply, JsonBody):
            return normalize_status_json(reply.data, unknown_status=unknown_status).status
        if isinstance(reply, TextBody):
            return status_from_text(reply.text)
        return TransactionStatus.PENDING

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = self._headers()
        try:
            if self._http_client is not None:
                return await self._http_client.request(method, url, headers=headers, **kwargs)
            async with httpx.AsyncClient(timeout=self.settings.timeout_seconds) as client:
                return await client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {url} failed: {exc!r}") from exc
