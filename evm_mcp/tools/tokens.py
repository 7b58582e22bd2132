"""ERC-20 token tools: balances, supply, allowances, transfers and approvals."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from evm_mcp.chain.client import ERC20_ABI, ChainOperationError, WalletCapabilities, to_checksum
from evm_mcp.config import EvmConfig, default_config
from evm_mcp.tools.schemas import (
    ApproveTokenInput,
    GetTokenAllowanceInput,
    GetTokenBalanceInput,
    GetTokenTotalSupplyInput,
    RevokeApprovalInput,
    TransferTokenFromInput,
    TransferTokenInput,
)
from evm_mcp.tools.units import MAX_UINT256, from_base_unit, to_base_unit

logger = logging.getLogger(__name__)

MAX_AMOUNT_SENTINEL = "max"


def _token_contract(capabilities: WalletCapabilities, token_address: str) -> Any:
    return capabilities.read_client.eth.contract(address=to_checksum(token_address), abi=ERC20_ABI)


async def resolve_decimals(
    contract: Any,
    token_address: str,
    decimals: Optional[int],
    config: EvmConfig = default_config,
) -> int:
    """
    Explicit ``decimals`` wins; otherwise read decimals() from the token.

    The configured default is only a fallback for tokens that do not implement
    decimals(), and is logged because it may mis-scale the result.
    """
    if decimals is not None:
        return decimals
    try:
        return int(await contract.functions.decimals().call())
    except Exception as exc:
        logger.warning(
            "decimals() lookup failed for token=%s; falling back to %s",
            token_address,
            config.default_token_decimals,
            extra={"error": str(exc)},
        )
        return config.default_token_decimals


async def get_token_balance(
    capabilities: WalletCapabilities,
    params: GetTokenBalanceInput,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    owner = params.owner_address or capabilities.address
    try:
        contract = _token_contract(capabilities, params.token_address)
        raw_balance = await contract.functions.balanceOf(to_checksum(owner)).call()
        decimals = await resolve_decimals(contract, params.token_address, params.decimals, config)
    except Exception as exc:
        raise ChainOperationError(f"Failed to get ERC20 balance: {exc}") from exc
    return {"balance": from_base_unit(int(raw_balance), decimals)}


async def get_token_total_supply(
    capabilities: WalletCapabilities,
    params: GetTokenTotalSupplyInput,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    try:
        contract = _token_contract(capabilities, params.token_address)
        raw_supply = await contract.functions.totalSupply().call()
        decimals = await resolve_decimals(contract, params.token_address, params.decimals, config)
    except Exception as exc:
        raise ChainOperationError(f"Failed to get token total supply: {exc}") from exc
    return {"totalSupply": from_base_unit(int(raw_supply), decimals)}


async def get_token_allowance(
    capabilities: WalletCapabilities,
    params: GetTokenAllowanceInput,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    owner = params.owner or capabilities.address
    try:
        contract = _token_contract(capabilities, params.token_address)
        raw_allowance = await contract.functions.allowance(
            to_checksum(owner), to_checksum(params.spender)
        ).call()
        decimals = await resolve_decimals(contract, params.token_address, params.decimals, config)
    except Exception as exc:
        raise ChainOperationError(f"Failed to get token allowance: {exc}") from exc
    return {"allowance": from_base_unit(int(raw_allowance), decimals)}


async def transfer_token(
    capabilities: WalletCapabilities,
    params: TransferTokenInput,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    try:
        contract = _token_contract(capabilities, params.token_address)
        decimals = await resolve_decimals(contract, params.token_address, params.decimals, config)
        amount = int(to_base_unit(params.amount, decimals))
        tx_hash = await capabilities.write_client.write_contract(
            address=params.token_address,
            abi=ERC20_ABI,
            function_name="transfer",
            args=[to_checksum(params.to), amount],
        )
    except Exception as exc:
        raise ChainOperationError(f"Failed to transfer ERC20 token: {exc}") from exc
    return {"transactionHash": tx_hash}


async def approve_token(
    capabilities: WalletCapabilities,
    params: ApproveTokenInput,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    """Approve ``spender``; ``amount="max"`` approves the maximum uint256 regardless of decimals."""
    try:
        if params.amount.strip().lower() == MAX_AMOUNT_SENTINEL:
            amount = MAX_UINT256
        else:
            contract = _token_contract(capabilities, params.token_address)
            decimals = await resolve_decimals(contract, params.token_address, params.decimals, config)
            amount = int(to_base_unit(params.amount, decimals))
        tx_hash = await capabilities.write_client.write_contract(
            address=params.token_address,
            abi=ERC20_ABI,
            function_name="approve",
            args=[to_checksum(params.spender), amount],
        )
    except Exception as exc:
        raise ChainOperationError(f"Failed to approve token: {exc}") from exc
    return {"transactionHash": tx_hash}


async def revoke_approval(capabilities: WalletCapabilities, params: RevokeApprovalInput) -> Dict[str, Any]:
    """Revoke by approving zero; there is no separate on-chain revoke."""
    try:
        tx_hash = await capabilities.write_client.write_contract(
            address=params.token_address,
            abi=ERC20_ABI,
            function_name="approve",
            args=[to_checksum(params.spender), 0],
        )
    except Exception as exc:
        raise ChainOperationError(f"Failed to revoke token approval: {exc}") from exc
    return {"transactionHash": tx_hash}


async def transfer_token_from(
    capabilities: WalletCapabilities,
    params: TransferTokenFromInput,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    """Spend an allowance previously granted to the wallet by ``from``."""
    try:
        contract = _token_contract(capabilities, params.token_address)
        decimals = await resolve_decimals(contract, params.token_address, params.decimals, config)
        amount = int(to_base_unit(params.amount, decimals))
        tx_hash = await capabilities.write_client.write_contract(
            address=params.token_address,
            abi=ERC20_ABI,
            function_name="transferFrom",
            args=[to_checksum(params.from_address), to_checksum(params.to), amount],
        )
    except Exception as exc:
        raise ChainOperationError(f"Failed to transferFrom token: {exc}") from exc
    return {"transactionHash": tx_hash}
