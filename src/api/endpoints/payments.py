import logging
from decimal import Decimal
from typing import Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from src.error_handler import ErrorHandler
from src.integrations.clients.mocks.transactions import MockTransactionClient
from src.integrations.clients.real_http.relay import RelayTransactionClient
from src.integrations.clients.real_http.transactions import MaksekeskusClient
from src.integrations.contracts.interfaces import TransactionClient, TransactionRequest
from src.integrations.errors import GatewayError
from src.utils.config_loader import load_gateway_config, load_relay_config, resolve_payments_mode

logger = logging.getLogger(__name__)

api = APIRouter()
payments_api = api

error_handler = ErrorHandler()

# Set once at startup by src/api/main.py; tests override get_transaction_client instead.
transaction_client: Optional[TransactionClient] = None


class CreateTransactionBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal = Field(..., gt=0, description="Amount in major units, e.g. 9.99")
    reference: str = Field(..., min_length=1, description="Merchant order id, unique per payment attempt")
    email: str = Field(..., min_length=3)
    return_url: str = Field(..., alias="returnUrl")
    cancel_url: str = Field(..., alias="cancelUrl")
    notification_url: str = Field(..., alias="notificationUrl")


class VerifyPaymentBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str = Field(..., min_length=1, alias="transactionId")


def build_transaction_client(env: Optional[Mapping[str, str]] = None) -> TransactionClient:
    mode = resolve_payments_mode(env)
    if mode == "direct":
        return MaksekeskusClient(load_gateway_config(env))
    if mode == "relay":
        return RelayTransactionClient(load_relay_config(env))

    logger.warning("No gateway credentials or relay URL configured; using the mock transaction client.")
    return MockTransactionClient()


def get_transaction_client() -> TransactionClient:
    global transaction_client
    if transaction_client is None:
        transaction_client = build_transaction_client()
    return transaction_client


def _raise_http_error(exc: GatewayError, context: dict) -> None:
    payload = error_handler.handle_gateway_error(exc, context)
    raise HTTPException(status_code=ErrorHandler.http_status_for(exc), detail=payload["message"]) from exc


@api.post("/transactions", tags=["Payments"])
async def create_transaction(body: CreateTransactionBody, client: TransactionClient = Depends(get_transaction_client)):
    request = TransactionRequest(
        amount=body.amount,
        reference=body.reference,
        email=body.email,
        return_url=body.return_url,
        cancel_url=body.cancel_url,
        notification_url=body.notification_url,
    )
    try:
        payment_url = await client.create_transaction(request)
    except GatewayError as e:
        _raise_http_error(e, {"operation": "create_transaction", "reference": body.reference})

    return {"reference": body.reference, "payment_url": payment_url}


@api.get("/transactions/{transaction_id}/status", tags=["Payments"])
async def get_transaction_status(transaction_id: str, client: TransactionClient = Depends(get_transaction_client)):
    try:
        status = await client.get_transaction_status(transaction_id)
    except GatewayError as e:
        _raise_http_error(e, {"operation": "get_transaction_status", "transaction_id": transaction_id})

    return {"transaction_id": transaction_id, "status": status.value}


@api.post("/verify", tags=["Payments"])
async def verify_payment(body: VerifyPaymentBody, client: TransactionClient = Depends(get_transaction_client)):
    try:
        verified = await client.verify_payment(body.transaction_id)
    except GatewayError as e:
        _raise_http_error(e, {"operation": "verify_payment", "transaction_id": body.transaction_id})

    return {"transaction_id": body.transaction_id, "verified": verified}
