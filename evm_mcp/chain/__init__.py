"""Chain catalog and web3-backed wallet clients."""

from .chains import CHAINS, ChainDescriptor, NativeCurrency, find_chain, list_chain_ids
from .client import ERC20_ABI, ChainOperationError, WalletCapabilities, WalletClient, to_checksum

__all__ = [
    "CHAINS",
    "ChainDescriptor",
    "NativeCurrency",
    "find_chain",
    "list_chain_ids",
    "ERC20_ABI",
    "ChainOperationError",
    "WalletCapabilities",
    "WalletClient",
    "to_checksum",
]
