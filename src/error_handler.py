"""Error handling helpers for the checkout payment flow."""
from typing import Any, Dict
import logging

from src.integrations.errors import GatewayError, InvalidTransactionRequest

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "An internal error occurred while processing your payment. Please try again later."


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, GatewayError):
            return self.handle_gateway_error(exc, context)

        logger.error("Unhandled exception in checkout: %s", exc, exc_info=True)
        return {
            "message": GENERIC_FAILURE_MESSAGE,
            "fallback": True,
            "metadata": {"error": str(exc), "context": context or {}},
        }

    def handle_gateway_error(self, exc: GatewayError, context: Dict[str, Any] = None) -> Dict[str, Any]:
        # user_message is safe to show; detail stays in logs and metadata for operators
        logger.error("Payment gateway error (%s): %s", type(exc).__name__, exc.detail)
        return {
            "message": exc.user_message,
            "fallback": not isinstance(exc, InvalidTransactionRequest),
            "metadata": {
                "error_type": type(exc).__name__,
                "error": exc.detail,
                "context": context or {},
            },
        }

    @staticmethod
    def http_status_for(exc: GatewayError) -> int:
        if isinstance(exc, InvalidTransactionRequest):
            return 422
        return 502
