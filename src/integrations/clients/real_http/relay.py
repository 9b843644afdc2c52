"""
Webhook relay HTTP client.

The relay is an automation endpoint that forwards transactions to the gateway
on our behalf, so no credentials are sent. It answers in plain text
("Accepted") or JSON depending on how the scenario is configured.
"""

from __future__ import annotations

import logging

from src.integrations.contracts.interfaces import TransactionStatus
from src.integrations.policy.response_wrappers import classify_response
from src.utils.config_loader import RelayConfig

from .base import HttpTransactionClient

logger = logging.getLogger(__name__)


class RelayTransactionClient(HttpTransactionClient):
    tag = "RELAY"

    settings: RelayConfig

    def _create_url(self) -> str:
        return self.settings.relay_url

    def _status_url(self, transaction_id: str) -> str:
        return f"{self.settings.relay_url}/status/{transaction_id}"

    def _verify_url(self) -> str:
        return f"{self.settings.relay_url}/verify"

    async def _verification_status(self, transaction_id: str) -> TransactionStatus:
        response = await self._send("POST", self._verify_url(), json={"transactionId": transaction_id})
        status = self._status_from_reply(classify_response(response), unknown_status=TransactionStatus.PENDING)
        logger.debug("[%s] Relay verify for %s -> %s", self.tag, transaction_id, status.value)
        return status
