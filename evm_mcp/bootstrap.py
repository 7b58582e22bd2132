"""
Process bootstrap: required settings, signing account, chain detection.

Every failure here is fatal. The CLI turns ``BootstrapError`` into exit status 1
before any transport is started.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from aiohttp import ClientTimeout
from eth_account import Account
from web3 import AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from evm_mcp.chain.chains import ChainDescriptor, find_chain
from evm_mcp.chain.client import WalletCapabilities, WalletClient
from evm_mcp.config import (
    RPC_PROVIDER_URL_ENV_VAR,
    WALLET_PRIVATE_KEY_ENV_VAR,
    EvmConfig,
    WalletSettings,
    default_config,
    read_wallet_env,
)

logger = logging.getLogger(__name__)

MAINNET_CHAIN_ID = 1

Web3Factory = Callable[[str, float], AsyncWeb3]


class BootstrapError(Exception):
    """Base class for unrecoverable startup failures."""


class ConfigurationMissingError(BootstrapError):
    def __init__(self, variable: str) -> None:
        super().__init__(f"{variable} environment variable is required")
        self.variable = variable


class InvalidConfigurationError(BootstrapError):
    """A required value is present but unusable (e.g. a malformed key)."""


class UnsupportedChainError(BootstrapError):
    def __init__(self, chain_id: int, rpc_url: str) -> None:
        super().__init__(
            f"Chain with ID {chain_id} provided by {RPC_PROVIDER_URL_ENV_VAR} ({rpc_url}) "
            "is not in the supported chain catalog."
        )
        self.chain_id = chain_id


def load_wallet_settings() -> WalletSettings:
    """Read both required values or raise ConfigurationMissingError."""
    private_key, rpc_url = read_wallet_env()
    if private_key is None:
        raise ConfigurationMissingError(WALLET_PRIVATE_KEY_ENV_VAR)
    if rpc_url is None:
        raise ConfigurationMissingError(RPC_PROVIDER_URL_ENV_VAR)
    return WalletSettings(private_key=private_key, rpc_url=rpc_url)


def make_web3(rpc_url: str, timeout: float) -> AsyncWeb3:
    provider = AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": ClientTimeout(total=timeout)})
    return AsyncWeb3(provider)


async def detect_chain(w3: AsyncWeb3, rpc_url: str) -> ChainDescriptor:
    """Ask the endpoint for its chain id and match it against the catalog."""
    chain_id = int(await w3.eth.chain_id)
    chain = find_chain(chain_id)
    if chain is None:
        raise UnsupportedChainError(chain_id, rpc_url)
    return chain


async def bootstrap(
    settings: Optional[WalletSettings] = None,
    *,
    config: EvmConfig = default_config,
    web3_factory: Web3Factory = make_web3,
) -> WalletCapabilities:
    """Build the capability bundle that every tool call receives."""
    settings = settings or load_wallet_settings()
    try:
        account = Account.from_key(settings.private_key)
    except (ValueError, TypeError) as exc:
        raise InvalidConfigurationError(f"{WALLET_PRIVATE_KEY_ENV_VAR} is not a valid private key") from exc

    w3 = web3_factory(settings.rpc_url, config.rpc_timeout)
    try:
        chain = await detect_chain(w3, settings.rpc_url)
    except Exception:
        await _disconnect(w3)
        raise
    if chain.id != MAINNET_CHAIN_ID:
        # Sidechains and L2s pad extraData beyond the mainnet block limit.
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    logger.info(
        "wallet ready address=%s chain=%s chain_id=%s",
        account.address,
        chain.name,
        chain.id,
        extra={"chain_id": chain.id},
    )
    return WalletCapabilities(
        account=account,
        read_client=w3,
        write_client=WalletClient(w3, account, chain),
        chain=chain,
    )


async def _disconnect(w3: AsyncWeb3) -> None:
    try:
        await w3.provider.disconnect()
    except NotImplementedError:
        logger.debug("provider has no disconnect hook")


async def close_capabilities(capabilities: WalletCapabilities) -> None:
    """Release the provider's HTTP session."""
    await _disconnect(capabilities.read_client)
