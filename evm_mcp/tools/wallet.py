"""Wallet-level tools: identity, chain, native balance, signing and native transfers."""

from __future__ import annotations

import logging
from typing import Any, Dict

from evm_mcp.chain.client import ChainOperationError, WalletCapabilities, to_checksum
from evm_mcp.tools.schemas import EmptyInput, GetBalanceInput, SendNativeTokenInput, SignMessageInput
from evm_mcp.tools.units import from_base_unit, to_base_unit

logger = logging.getLogger(__name__)


async def get_address(capabilities: WalletCapabilities, params: EmptyInput) -> Dict[str, Any]:
    """Return the configured wallet address."""
    return {"address": capabilities.address}


async def get_chain(capabilities: WalletCapabilities, params: EmptyInput) -> Dict[str, Any]:
    """Return the chain detected at bootstrap; no RPC round-trip."""
    chain = capabilities.chain
    return {"chainId": chain.id, "chainName": chain.name}


async def get_balance(capabilities: WalletCapabilities, params: GetBalanceInput) -> Dict[str, Any]:
    """
    Native currency balance for ``params.address``, or the wallet itself when omitted.

    The balance is formatted with the chain's native-currency decimals.
    """
    target = params.address or capabilities.address
    try:
        raw_balance = await capabilities.read_client.eth.get_balance(to_checksum(target))
    except Exception as exc:
        raise ChainOperationError(f"Failed to get balance: {exc}") from exc
    decimals = capabilities.chain.native_currency.decimals
    return {"balance": from_base_unit(int(raw_balance), decimals)}


async def sign_message(capabilities: WalletCapabilities, params: SignMessageInput) -> Dict[str, Any]:
    """EIP-191 personal-sign ``params.message`` with the wallet key."""
    try:
        signature = await capabilities.write_client.sign_message(params.message)
    except Exception as exc:
        raise ChainOperationError(f"Failed to sign message: {exc}") from exc
    return {"signature": signature}


async def send_native_token(capabilities: WalletCapabilities, params: SendNativeTokenInput) -> Dict[str, Any]:
    decimals = capabilities.chain.native_currency.decimals
    try:
        value = int(to_base_unit(params.value, decimals))
        tx_hash = await capabilities.write_client.send_transaction(to=params.to, value=value)
    except Exception as exc:
        symbol = capabilities.chain.native_currency.symbol
        raise ChainOperationError(f"Failed to send {symbol}: {exc}") from exc
    logger.info("native transfer submitted to=%s value=%s hash=%s", params.to, params.value, tx_hash)
    return {"transactionHash": tx_hash}
