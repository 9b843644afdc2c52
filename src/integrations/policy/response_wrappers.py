from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.integrations.contracts.interfaces import TransactionStatus
from src.integrations.errors import GatewayHttpError, InvalidResponseShape

logger = logging.getLogger(__name__)

GENERIC_GATEWAY_ERROR = "Payment gateway returned an error."


# ---------------------------------------------------------------------------
# Response classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JsonBody:
    status_code: int
    data: Dict[str, Any]


@dataclass(frozen=True)
class TextBody:
    status_code: int
    text: str


@dataclass(frozen=True)
class AcceptedWithLocation:
    status_code: int
    location: str
    transaction_id: str


GatewayResponse = Union[JsonBody, TextBody, AcceptedWithLocation]


def classify_response(response: httpx.Response) -> GatewayResponse:
    """
    Turn a 2xx gateway response into exactly one tagged variant.

    Non-2xx responses are rejected here with GatewayHttpError so callers only
    dispatch on success shapes.
    """
    if not response.is_success:
        raise GatewayHttpError(
            f"Gateway responded {response.status_code}: {extract_error_message(response)}",
            status_code=response.status_code,
            payload={"body": response.text[:500]},
        )

    location = response.headers.get("location")
    if response.status_code == 202 and location:
        return AcceptedWithLocation(
            status_code=response.status_code,
            location=location,
            transaction_id=transaction_id_from_location(location),
        )

    content_type = response.headers.get("content-type", "").lower()
    if "json" in content_type:
        try:
            data = response.json() if response.content else {}
        except ValueError as exc:
            raise InvalidResponseShape(f"Gateway sent malformed JSON: {response.text[:200]!r}") from exc
        if not isinstance(data, dict):
            raise InvalidResponseShape(f"Expected a JSON object, got {type(data).__name__}.")
        return JsonBody(status_code=response.status_code, data=data)

    return TextBody(status_code=response.status_code, text=response.text)


def transaction_id_from_location(location: str) -> str:
    path = urlparse(location).path or location
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    if not segment:
        raise InvalidResponseShape(f"Location header has no transaction id: {location!r}")
    return segment


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from a gateway error body."""
    try:
        data = json.loads(response.text) if response.text else None
    except ValueError:
        return GENERIC_GATEWAY_ERROR
    if not isinstance(data, dict):
        return GENERIC_GATEWAY_ERROR

    for key in ("message", "error", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, dict) and isinstance(value.get("message"), str):
            return value["message"]

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and isinstance(first.get("message"), str):
            return first["message"]
        if isinstance(first, str):
            return first
    return GENERIC_GATEWAY_ERROR


# ---------------------------------------------------------------------------
# Normalized models
# ---------------------------------------------------------------------------

class CreatedTransactionModel(BaseModel):
    transaction_id: str
    payment_methods_url: str
    raw: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("transaction_id", "payment_methods_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class TransactionStatusModel(BaseModel):
    transaction_id: Optional[str] = None
    status: TransactionStatus
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_created_transaction(raw: Dict[str, Any]) -> CreatedTransactionModel:
    transaction_id = raw.get("id") or raw.get("transaction_id")
    links = raw.get("_links") if isinstance(raw.get("_links"), dict) else {}
    payment_methods = links.get("payment_methods")
    if isinstance(payment_methods, dict):
        payment_methods = payment_methods.get("href")

    missing = [
        name
        for name, value in (("id", transaction_id), ("_links.payment_methods", payment_methods))
        if not value
    ]
    if missing:
        raise InvalidResponseShape(
            f"Transaction response is missing required field(s): {', '.join(missing)}",
            payload=raw,
        )

    return _build_model(
        CreatedTransactionModel,
        {
            "transaction_id": str(transaction_id),
            "payment_methods_url": payment_methods,
            "raw": raw,
        },
        raw,
    )


def normalize_status_json(
    raw: Dict[str, Any], unknown_status: Optional[TransactionStatus] = None
) -> TransactionStatusModel:
    """
    Read the gateway status from a JSON reply.

    A missing status is always a shape error. An unrecognised value is one too,
    unless unknown_status is given, in which case that status is used instead.
    """
    value = raw.get("status")
    if value is None and isinstance(raw.get("transaction"), dict):
        value = raw["transaction"].get("status")
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidResponseShape("Status response has no 'status' field.", payload=raw)

    return _build_model(
        TransactionStatusModel,
        {
            "transaction_id": raw.get("id") or raw.get("transactionId"),
            "status": map_gateway_status(value, unknown_status=unknown_status),
            "raw": raw,
        },
        raw,
    )


def status_from_text(text: str) -> TransactionStatus:
    """Substring match on plain-text replies; anything unrecognised is still pending."""
    lowered = (text or "").lower()
    if "accepted" in lowered:
        return TransactionStatus.PENDING
    if "completed" in lowered:
        return TransactionStatus.COMPLETED
    if "failed" in lowered:
        return TransactionStatus.FAILED
    return TransactionStatus.PENDING


def is_accepted_text(text: str) -> bool:
    return "accepted" in (text or "").lower()


def map_gateway_status(raw_status: Any, unknown_status: Optional[TransactionStatus] = None) -> TransactionStatus:
    value = str(raw_status or "").strip().upper()
    mapping = {
        "CREATED": TransactionStatus.PENDING,
        "PENDING": TransactionStatus.PENDING,
        "ACCEPTED": TransactionStatus.PENDING,
        "APPROVED": TransactionStatus.PENDING,
        "PROCESSING": TransactionStatus.PENDING,
        "COMPLETED": TransactionStatus.COMPLETED,
        "FAILED": TransactionStatus.FAILED,
        "CANCELLED": TransactionStatus.FAILED,
        "EXPIRED": TransactionStatus.FAILED,
        "DECLINED": TransactionStatus.FAILED,
        "REFUNDED": TransactionStatus.FAILED,
        "PART_REFUNDED": TransactionStatus.FAILED,
    }
    if value not in mapping:
        if unknown_status is not None:
            logger.warning("Unrecognised transaction status '%s', treating as %s", value, unknown_status.value)
            return unknown_status
        raise InvalidResponseShape(f"Unsupported transaction status '{value}'.")
    return mapping[value]


def extract_payment_page_url(raw: Dict[str, Any]) -> str:
    """Hosted payment page URL from a payment-methods response."""
    url = raw.get("url")
    if isinstance(url, str) and url.strip():
        return url

    methods = raw.get("payment_methods")
    if isinstance(methods, dict):
        for group in methods.values():
            if not isinstance(group, list):
                continue
            for method in group:
                if isinstance(method, dict) and isinstance(method.get("url"), str) and method["url"].strip():
                    return method["url"]

    raise InvalidResponseShape("Payment methods response has no payment page URL.", payload=raw)


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise InvalidResponseShape(f"Response validation failed: {exc}", payload=raw) from exc
