"""
Configuration helpers for the EVM MCP server.

This module centralizes environment loading, RPC timeouts, logging options and
the token-decimals fallback. No secrets are stored in the repository; the
wallet key is read from the environment (or a local .env file) at bootstrap and
is never logged.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Required wallet settings, read at bootstrap.
WALLET_PRIVATE_KEY_ENV_VAR = "WALLET_PRIVATE_KEY"
RPC_PROVIDER_URL_ENV_VAR = "RPC_PROVIDER_URL"

DEFAULT_RPC_TIMEOUT = 30.0
DEFAULT_TOKEN_DECIMALS = 6
MAX_TOKEN_DECIMALS = 255


def _load_timeout() -> float:
    raw_timeout = os.getenv("EVM_MCP_RPC_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return DEFAULT_RPC_TIMEOUT
    return DEFAULT_RPC_TIMEOUT


def _load_token_decimals() -> int:
    raw = os.getenv("EVM_MCP_DEFAULT_TOKEN_DECIMALS")
    if raw:
        try:
            parsed = int(raw)
        except ValueError:
            return DEFAULT_TOKEN_DECIMALS
        if 0 <= parsed <= MAX_TOKEN_DECIMALS:
            return parsed
    return DEFAULT_TOKEN_DECIMALS


def _parse_bool(raw: Optional[str], *, default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_port() -> int:
    raw = os.getenv("EVM_MCP_HTTP_PORT")
    if raw:
        try:
            return int(raw)
        except ValueError:
            return 8000
    return 8000


RPC_TIMEOUT = _load_timeout()
TOKEN_DECIMALS = _load_token_decimals()
ENFORCE_OUTPUT_SCHEMA = _parse_bool(os.getenv("EVM_MCP_ENFORCE_OUTPUT_SCHEMA"))
LOG_LEVEL = os.getenv("EVM_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("EVM_MCP_LOG_FORMAT", "json")  # json or plain
HTTP_HOST = os.getenv("EVM_MCP_HTTP_HOST", "127.0.0.1")
HTTP_PORT = _load_port()


@dataclass(slots=True)
class EvmConfig:
    """Runtime configuration for the gateway (wallet secrets excluded)."""

    rpc_timeout: float = RPC_TIMEOUT
    default_token_decimals: int = TOKEN_DECIMALS
    enforce_output_schema: bool = ENFORCE_OUTPUT_SCHEMA
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    http_host: str = HTTP_HOST
    http_port: int = HTTP_PORT


@dataclass(frozen=True, slots=True)
class WalletSettings:
    """The two required values needed to open the wallet."""

    private_key: str
    rpc_url: str

    def __repr__(self) -> str:
        return f"WalletSettings(private_key='***', rpc_url={self.rpc_url!r})"


def read_wallet_env() -> tuple[Optional[str], Optional[str]]:
    """Return (private key, RPC URL) from the environment, stripped, or None."""
    key = (os.getenv(WALLET_PRIVATE_KEY_ENV_VAR) or "").strip() or None
    url = (os.getenv(RPC_PROVIDER_URL_ENV_VAR) or "").strip() or None
    return key, url


default_config = EvmConfig()
