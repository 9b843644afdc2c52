"""
Utility modules for the checkout payment clients
"""
from .config_loader import (
    GatewayConfig,
    RelayConfig,
    load_gateway_config,
    load_relay_config,
    resolve_payments_mode,
)

__all__ = [
    'GatewayConfig',
    'RelayConfig',
    'load_gateway_config',
    'load_relay_config',
    'resolve_payments_mode',
]
