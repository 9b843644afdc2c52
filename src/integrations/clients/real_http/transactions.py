"""
Maksekeskus transactions HTTP client.

Used when gateway store credentials are configured. Every request carries
HTTP Basic credentials built from the store id and secret key.
"""

from __future__ import annotations

import base64
import logging
from typing import Dict

from src.integrations.errors import InvalidResponseShape
from src.integrations.policy.response_wrappers import (
    CreatedTransactionModel,
    JsonBody,
    classify_response,
    extract_payment_page_url,
)
from src.utils.config_loader import GatewayConfig

from .base import HttpTransactionClient

logger = logging.getLogger(__name__)


def basic_auth_header(store_id: str, secret_key: str) -> str:
    # UTF-8 so secrets with non-ASCII characters encode the same way the gateway decodes them
    token = base64.b64encode(f"{store_id}:{secret_key}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class MaksekeskusClient(HttpTransactionClient):
    tag = "MAKSEKESKUS"

    settings: GatewayConfig

    def _create_url(self) -> str:
        return f"{self.settings.base_url}/transactions"

    def _status_url(self, transaction_id: str) -> str:
        return f"{self.settings.base_url}/transactions/{transaction_id}"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = basic_auth_header(self.settings.store_id, self.settings.secret_key)
        return headers

    async def _payment_url_for(self, created: CreatedTransactionModel) -> str:
        if not self.settings.resolve_payment_page:
            return created.payment_methods_url

        logger.info("[%s] Resolving payment page for transaction %s", self.tag, created.transaction_id)
        reply = classify_response(await self._send("GET", created.payment_methods_url))
        if not isinstance(reply, JsonBody):
            raise InvalidResponseShape(
                f"Payment methods for {created.transaction_id} did not return JSON.",
            )
        return extract_payment_page_url(reply.data)
