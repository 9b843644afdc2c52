"""
Transaction contract: payload serialization and validation helpers
for the checkout transaction flow.

Used by both:
- clients/mocks/transactions.py (fake gateway for development/testing)
- clients/real_http/transactions.py and relay.py (real API calls)
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List
from urllib.parse import urlparse

from .interfaces import HttpMethod, TransactionRequest, TransactionStatus

_CENT = Decimal("0.01")


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def format_amount(amount: Any) -> str:
    """
    Render an amount with exactly two decimals.

    Half-cents round away from zero: 9.005 -> "9.01". Floats go through str()
    first so 9.005 is not read as 9.00499999...
    """
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    return str(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def merchant_data_for(reference: str) -> str:
    return f"Order ID: {reference}"


def build_transaction_payload(
    request: TransactionRequest,
    *,
    currency: str = "EUR",
    country: str = "ee",
    locale: str = "ee",
) -> Dict[str, Any]:
    return {
        "transaction": {
            "amount": format_amount(request.amount),
            "currency": currency,
            "reference": request.reference,
            "merchant_data": merchant_data_for(request.reference),
            "recurring_required": False,
            "transaction_url": {
                "return_url": {"url": request.return_url, "method": HttpMethod.GET.value},
                "cancel_url": {"url": request.cancel_url, "method": HttpMethod.GET.value},
                "notification_url": {"url": request.notification_url, "method": HttpMethod.POST.value},
            },
        },
        "customer": {
            "email": request.email,
            "country": country,
            "locale": locale,
        },
    }


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def validate_transaction_request(request: TransactionRequest) -> List[str]:
    """
    Return a list of validation errors.
    Empty list means the request is valid.
    """
    errors: List[str] = []

    try:
        amount = Decimal(str(request.amount))
        # checked at cent precision, the value actually sent
        if not amount.is_finite() or amount.quantize(_CENT, rounding=ROUND_HALF_UP) <= 0:
            errors.append("amount must be greater than zero")
    except (InvalidOperation, ValueError):
        errors.append(f"amount {request.amount!r} is not a number")

    if not (request.reference or "").strip():
        errors.append("reference is required")

    email = (request.email or "").strip()
    if not email or "@" not in email or email.startswith("@") or email.endswith("@"):
        errors.append(f"email '{request.email}' does not look valid")

    for name in ("return_url", "cancel_url", "notification_url"):
        if not _is_absolute_url(getattr(request, name)):
            errors.append(f"{name} must be an absolute http(s) URL")

    return errors


def is_terminal_status(status: TransactionStatus) -> bool:
    """Return True if the transaction can no longer change state."""
    return status in {TransactionStatus.COMPLETED, TransactionStatus.FAILED}


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value or "")
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)
