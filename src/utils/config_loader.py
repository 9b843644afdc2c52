"""
Configuration loader for the checkout payment clients
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.integrations.errors import GatewayConfigError
from src.integrations.policy.polling import PollingPolicy

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://api.test.maksekeskus.ee/v1"

_TRUTHY = {"1", "true", "yes", "on"}


class CheckoutDefaults(BaseModel):
    """Values copied into every transaction payload"""

    currency: str = Field(default="EUR", min_length=3, max_length=3)
    country: str = "ee"
    locale: str = "ee"
    timeout_seconds: float = Field(default=20.0, gt=0.0)
    polling: PollingPolicy = Field(default_factory=PollingPolicy)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()


class GatewayConfig(CheckoutDefaults):
    """Direct gateway API configuration"""

    base_url: str = DEFAULT_GATEWAY_URL
    store_id: str = Field(min_length=1)
    secret_key: str = Field(min_length=1, repr=False)
    resolve_payment_page: bool = False

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class RelayConfig(CheckoutDefaults):
    """Webhook relay configuration (no credentials)"""

    relay_url: str = Field(min_length=1)

    @field_validator("relay_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


def _env(env: Mapping[str, str], key: str) -> str:
    return (env.get(key) or "").strip()


def _shared_settings(env: Mapping[str, str]) -> dict:
    settings: dict = {}
    if _env(env, "MAKSEKESKUS_CURRENCY"):
        settings["currency"] = _env(env, "MAKSEKESKUS_CURRENCY")
    if _env(env, "MAKSEKESKUS_COUNTRY"):
        settings["country"] = _env(env, "MAKSEKESKUS_COUNTRY")
    if _env(env, "MAKSEKESKUS_LOCALE"):
        settings["locale"] = _env(env, "MAKSEKESKUS_LOCALE")
    if _env(env, "GATEWAY_TIMEOUT_SECONDS"):
        settings["timeout_seconds"] = _env(env, "GATEWAY_TIMEOUT_SECONDS")

    polling: dict = {}
    if _env(env, "PAYMENT_POLL_MAX_ATTEMPTS"):
        polling["max_attempts"] = _env(env, "PAYMENT_POLL_MAX_ATTEMPTS")
    if _env(env, "PAYMENT_POLL_DELAY_SECONDS"):
        polling["delay_seconds"] = _env(env, "PAYMENT_POLL_DELAY_SECONDS")
    if polling:
        settings["polling"] = polling
    return settings


def load_gateway_config(env: Optional[Mapping[str, str]] = None) -> GatewayConfig:
    """
    Build and validate the direct gateway config from environment variables

    Args:
        env: Mapping to read from. Defaults to os.environ

    Returns:
        Validated GatewayConfig object

    Raises:
        GatewayConfigError: If credentials are missing or a value is invalid
    """
    env = os.environ if env is None else env

    missing = [key for key in ("MAKSEKESKUS_STORE_ID", "MAKSEKESKUS_SECRET_KEY") if not _env(env, key)]
    if missing:
        raise GatewayConfigError(
            f"Missing required gateway settings: {', '.join(missing)}", missing=missing
        )

    data = _shared_settings(env)
    data.update(
        store_id=_env(env, "MAKSEKESKUS_STORE_ID"),
        secret_key=_env(env, "MAKSEKESKUS_SECRET_KEY"),
        resolve_payment_page=_env(env, "MAKSEKESKUS_RESOLVE_PAYMENT_PAGE").lower() in _TRUTHY,
    )
    if _env(env, "MAKSEKESKUS_API_URL"):
        data["base_url"] = _env(env, "MAKSEKESKUS_API_URL")

    try:
        config = GatewayConfig(**data)
    except ValidationError as e:
        logger.error("Gateway config validation failed: %s", e)
        raise GatewayConfigError(f"Invalid gateway settings: {e}") from e

    logger.info("Loaded gateway config for store %s at %s", config.store_id, config.base_url)
    return config


def load_relay_config(env: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """Build and validate the relay config; PAYMENT_RELAY_URL is required"""
    env = os.environ if env is None else env

    if not _env(env, "PAYMENT_RELAY_URL"):
        raise GatewayConfigError("Missing required relay setting: PAYMENT_RELAY_URL", missing=["PAYMENT_RELAY_URL"])

    data = _shared_settings(env)
    data["relay_url"] = _env(env, "PAYMENT_RELAY_URL")

    try:
        config = RelayConfig(**data)
    except ValidationError as e:
        logger.error("Relay config validation failed: %s", e)
        raise GatewayConfigError(f"Invalid relay settings: {e}") from e

    logger.info("Loaded relay config for %s", config.relay_url)
    return config


def resolve_payments_mode(env: Optional[Mapping[str, str]] = None) -> str:
    """
    Pick "direct", "relay" or "mock".

    PAYMENTS_MODE wins when set; otherwise direct when gateway credentials
    exist, relay when only a relay URL exists, else mock.
    """
    env = os.environ if env is None else env

    mode = _env(env, "PAYMENTS_MODE").lower()
    if mode in {"direct", "live", "real"}:
        return "direct"
    if mode in {"relay", "webhook"}:
        return "relay"
    if mode in {"mock", "test"}:
        return "mock"
    if mode:
        raise GatewayConfigError(f"Unsupported PAYMENTS_MODE '{mode}'. Expected direct, relay or mock.")

    if _env(env, "MAKSEKESKUS_STORE_ID") or _env(env, "MAKSEKESKUS_SECRET_KEY"):
        return "direct"
    if _env(env, "PAYMENT_RELAY_URL"):
        return "relay"
    return "mock"
