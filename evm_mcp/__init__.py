"""
EVM wallet MCP server package.

This package exposes a fixed catalog of wallet tools (balances, transfers,
ERC-20 approvals, message signing, unit conversion) for a single server-held
account. See DESIGN.md for full details.
"""

__version__ = "0.1.0"

__all__ = ["config", "__version__"]
