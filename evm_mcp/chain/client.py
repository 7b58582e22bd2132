"""
Thin wrappers over web3 for the single server-held wallet.

The read side is a plain ``AsyncWeb3`` instance. The write side is
``WalletClient``, which signs locally with the configured account and submits
raw transactions; it holds no mutable state, so concurrent tool calls can share
one instance. Nonce sequencing is left to the node's pending count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Sequence

from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3

from evm_mcp.chain.chains import ChainDescriptor

logger = logging.getLogger(__name__)

ERC20_ABI: list[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "name",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "symbol",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "decimals",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "type": "function",
        "name": "totalSupply",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "allowance",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "recipient", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "approve",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "transferFrom",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "sender", "type": "address"},
            {"name": "recipient", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

# Priority tip used when the node exposes an EIP-1559 base fee.
DEFAULT_PRIORITY_FEE_GWEI = 1.5


class ChainOperationError(Exception):
    """Raised by tool handlers when a chain read, write or signature fails."""


def to_checksum(address: str) -> str:
    """Checksum an address; web3 raises ValueError for malformed input."""
    return Web3.to_checksum_address(address)


class WalletClient:
    """Signs and submits transactions for one account on one chain."""

    def __init__(self, w3: AsyncWeb3, account: LocalAccount, chain: ChainDescriptor) -> None:
        self._w3 = w3
        self._account = account
        self.chain = chain

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_message(self, message: str) -> str:
        signed = self._account.sign_message(encode_defunct(text=message))
        return Web3.to_hex(signed.signature)

    async def send_transaction(self, *, to: str, value: int) -> str:
        """Send ``value`` base units of the native currency to ``to``."""
        tx: Dict[str, Any] = {
            "from": self._account.address,
            "to": to_checksum(to),
            "value": value,
            "chainId": self.chain.id,
            "nonce": await self._next_nonce(),
        }
        await self._fill_fees(tx)
        tx["gas"] = await self._w3.eth.estimate_gas(tx)
        return await self._sign_and_send(tx)

    async def write_contract(
        self,
        *,
        address: str,
        abi: Sequence[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any],
    ) -> str:
        """Call a state-changing contract function and return the tx hash."""
        contract = self._w3.eth.contract(address=to_checksum(address), abi=abi)
        function = getattr(contract.functions, function_name)
        tx = await function(*args).build_transaction(
            {
                "from": self._account.address,
                "chainId": self.chain.id,
                "nonce": await self._next_nonce(),
            }
        )
        return await self._sign_and_send(tx)

    async def _next_nonce(self) -> int:
        return await self._w3.eth.get_transaction_count(self._account.address, "pending")

    async def _fill_fees(self, tx: Dict[str, Any]) -> None:
        """Use EIP-1559 fees when the latest block has a base fee, else legacy gas price."""
        latest = await self._w3.eth.get_block("latest")
        base_fee = latest.get("baseFeePerGas")
        if base_fee is not None:
            priority = Web3.to_wei(DEFAULT_PRIORITY_FEE_GWEI, "gwei")
            tx["maxFeePerGas"] = base_fee * 2 + priority
            tx["maxPriorityFeePerGas"] = priority
        else:
            tx["gasPrice"] = await self._w3.eth.gas_price

    async def _sign_and_send(self, tx: Dict[str, Any]) -> str:
        signed = self._account.sign_transaction(tx)
        tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        hex_hash = Web3.to_hex(tx_hash)
        logger.info("submitted transaction hash=%s chain_id=%s", hex_hash, self.chain.id, extra={"chain_id": self.chain.id})
        return hex_hash


@dataclass(frozen=True, slots=True)
class WalletCapabilities:
    """
    Everything a tool handler may touch: the signing account, a read client,
    a write client, and the detected chain. Built once at bootstrap and passed
    explicitly into every dispatch.
    """

    account: LocalAccount
    read_client: AsyncWeb3
    write_client: WalletClient
    chain: ChainDescriptor

    @property
    def address(self) -> str:
        return self.account.address
