"""Static catalog of known EVM networks, matched by numeric chain id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True, slots=True)
class ChainDescriptor:
    """An EVM-compatible network the server is willing to operate against."""

    id: int
    name: str
    native_currency: NativeCurrency
    testnet: bool = False


ETHER = NativeCurrency(name="Ether", symbol="ETH")
SEPOLIA_ETHER = NativeCurrency(name="Sepolia Ether", symbol="ETH")


CHAINS: Tuple[ChainDescriptor, ...] = (
    ChainDescriptor(1, "Ethereum", ETHER),
    ChainDescriptor(11155111, "Sepolia", SEPOLIA_ETHER, testnet=True),
    ChainDescriptor(17000, "Holesky", NativeCurrency("Holesky Ether", "ETH"), testnet=True),
    ChainDescriptor(560048, "Hoodi", NativeCurrency("Hoodi Ether", "ETH"), testnet=True),
    ChainDescriptor(10, "OP Mainnet", ETHER),
    ChainDescriptor(11155420, "OP Sepolia", SEPOLIA_ETHER, testnet=True),
    ChainDescriptor(8453, "Base", ETHER),
    ChainDescriptor(84532, "Base Sepolia", SEPOLIA_ETHER, testnet=True),
    ChainDescriptor(42161, "Arbitrum One", ETHER),
    ChainDescriptor(42170, "Arbitrum Nova", ETHER),
    ChainDescriptor(421614, "Arbitrum Sepolia", SEPOLIA_ETHER, testnet=True),
    ChainDescriptor(137, "Polygon", NativeCurrency("POL", "POL")),
    ChainDescriptor(80002, "Polygon Amoy", NativeCurrency("POL", "POL"), testnet=True),
    ChainDescriptor(1101, "Polygon zkEVM", ETHER),
    ChainDescriptor(56, "BNB Smart Chain", NativeCurrency("BNB", "BNB")),
    ChainDescriptor(97, "BNB Smart Chain Testnet", NativeCurrency("BNB", "tBNB"), testnet=True),
    ChainDescriptor(43114, "Avalanche", NativeCurrency("Avalanche", "AVAX")),
    ChainDescriptor(43113, "Avalanche Fuji", NativeCurrency("Avalanche Fuji", "AVAX"), testnet=True),
    ChainDescriptor(100, "Gnosis", NativeCurrency("xDAI", "XDAI")),
    ChainDescriptor(250, "Fantom", NativeCurrency("Fantom", "FTM")),
    ChainDescriptor(42220, "Celo", NativeCurrency("CELO", "CELO")),
    ChainDescriptor(324, "ZKsync Era", ETHER),
    ChainDescriptor(59144, "Linea Mainnet", NativeCurrency("Linea Ether", "ETH")),
    ChainDescriptor(534352, "Scroll", ETHER),
    ChainDescriptor(5000, "Mantle", NativeCurrency("MNT", "MNT")),
    ChainDescriptor(81457, "Blast", ETHER),
    ChainDescriptor(7777777, "Zora", ETHER),
    ChainDescriptor(1284, "Moonbeam", NativeCurrency("GLMR", "GLMR")),
    ChainDescriptor(25, "Cronos Mainnet", NativeCurrency("Cronos", "CRO")),
    ChainDescriptor(1337, "Localhost", ETHER, testnet=True),
    ChainDescriptor(31337, "Hardhat", ETHER, testnet=True),
)


def find_chain(chain_id: int) -> Optional[ChainDescriptor]:
    """Return the first catalog entry whose id matches, or None."""
    for chain in CHAINS:
        if chain.id == chain_id:
            return chain
    return None


def list_chain_ids() -> list[int]:
    """Return the ids of all supported chains, in catalog order."""
    return [chain.id for chain in CHAINS]
