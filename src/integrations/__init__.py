"""
Integrations layer.
This package contains all code used to communicate with the external payment gateway:
- Maksekeskus transactions API (direct, HTTP Basic credentials)
- Webhook relay that forwards transactions to the gateway for us

Key rule:
- Checkout code MUST NOT call the gateway directly.
- It should call a transaction client (under src/integrations/clients).
- We use the MOCK client during development and swap to REAL_HTTP clients when credentials are available.

Switching implementations:
- The selection of mock vs real clients happens in ONE place:
  build_transaction_client() in src/api/endpoints/payments.py, called once at startup by src/api/main.py.
"""

from .contracts.interfaces import (
    TransactionClient,
    TransactionRequest,
    TransactionStatus,
)
from .contracts.transactions import (
    build_transaction_payload,
    format_amount,
    is_terminal_status,
    validate_transaction_request,
)
from .errors import (
    GatewayConfigError,
    GatewayError,
    GatewayHttpError,
    InvalidResponseShape,
    InvalidTransactionRequest,
    PollingTimeout,
    TransactionFailed,
    TransportError,
)

__all__ = [
    # interfaces
    "TransactionClient", "TransactionRequest", "TransactionStatus",
    # transactions
    "build_transaction_payload", "format_amount", "is_terminal_status",
    "validate_transaction_request",
    # errors
    "GatewayConfigError", "GatewayError", "GatewayHttpError", "InvalidResponseShape",
    "InvalidTransactionRequest", "PollingTimeout", "TransactionFailed", "TransportError",
]
