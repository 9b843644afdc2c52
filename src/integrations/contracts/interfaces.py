from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransactionRequest:
    amount: Union[Decimal, float, int, str]   # major units, e.g. 9.99 EUR
    reference: str                            # merchant order id, unique per attempt
    email: str
    return_url: str
    cancel_url: str
    notification_url: str


# ---------------------------------------------------------------------------
# Abstract client interface
# ---------------------------------------------------------------------------

class TransactionClient(ABC):
    """Every checkout transaction client (direct, relay, mock) implements this."""

    @abstractmethod
    async def create_transaction(self, request: TransactionRequest) -> str:
        """Create a transaction and return the URL the customer is redirected to."""

    @abstractmethod
    async def get_transaction_status(self, transaction_id: str) -> TransactionStatus:
        """Fetch the current status of a transaction."""

    @abstractmethod
    async def verify_payment(self, transaction_id: str) -> bool:
        """Single-shot check; True only when the transaction is completed."""
