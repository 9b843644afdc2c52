"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import src.api.endpoints.payments as payments_module
from src.api.endpoints.payments import build_transaction_client, payments_api
from src.utils.config_loader import resolve_payments_mode

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Checkout Payments API",
    description="Creates, polls and verifies payment gateway transactions for the checkout frontend",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

# Raises GatewayConfigError here when the selected mode is missing settings
payments_mode = resolve_payments_mode()
payments_module.transaction_client = build_transaction_client()
logger.info("Payments mode: %s (%s)", payments_mode, type(payments_module.transaction_client).__name__)

# Register payments API router
app.include_router(payments_api, prefix="/api/v1/payments", tags=["Payments"])


@app.get("/", tags=["Health"])
async def root():
    return {"service": "Checkout Payments API", "status": "healthy", "version": "1.0.0", "timestamp": datetime.now().isoformat()}


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "payments_mode": payments_mode, "timestamp": datetime.now().isoformat()}
