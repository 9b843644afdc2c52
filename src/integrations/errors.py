"""
Gateway error taxonomy.

Every failure that reaches a caller of a transaction client is a GatewayError.
Two messages travel with each error:
- detail: operator-facing, written to logs, may include raw gateway output
- user_message: safe to show to a customer; this is what str(exc) returns

Clients overwrite user_message at the operation boundary so the caller gets
"Failed to create transaction." rather than whatever the gateway said.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

DEFAULT_USER_MESSAGE = "Payment service is unavailable. Please try again later."
CREATE_FAILED_MESSAGE = "Failed to create transaction."
STATUS_FAILED_MESSAGE = "Failed to fetch transaction status."
VERIFY_FAILED_MESSAGE = "Failed to verify payment."


class GatewayError(Exception):
    def __init__(
        self,
        detail: str,
        *,
        user_message: str = DEFAULT_USER_MESSAGE,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.user_message = user_message
        self.payload = payload or {}

    def __str__(self) -> str:
        return self.user_message


class TransportError(GatewayError):
    """Network, DNS or timeout failure while reaching the gateway."""


class GatewayHttpError(GatewayError):
    def __init__(self, detail: str, *, status_code: int, **kwargs: Any) -> None:
        super().__init__(detail, **kwargs)
        self.status_code = status_code


class InvalidResponseShape(GatewayError):
    """2xx response that lacks a required field."""


class TransactionFailed(GatewayError):
    def __init__(self, detail: str, *, transaction_id: str, **kwargs: Any) -> None:
        super().__init__(detail, **kwargs)
        self.transaction_id = transaction_id


class PollingTimeout(GatewayError):
    def __init__(self, detail: str, *, transaction_id: str, attempts: int, **kwargs: Any) -> None:
        super().__init__(detail, **kwargs)
        self.transaction_id = transaction_id
        self.attempts = attempts


class InvalidTransactionRequest(GatewayError):
    def __init__(self, problems: list, **kwargs: Any) -> None:
        super().__init__("Invalid transaction request: " + "; ".join(problems), **kwargs)
        self.problems = list(problems)


class GatewayConfigError(ValueError):
    """Raised at startup when required gateway settings are missing or invalid."""

    def __init__(self, message: str, *, missing: Optional[list] = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])
