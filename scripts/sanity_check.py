"""Read-only sanity checks against the node named by RPC_PROVIDER_URL. Sends no transactions."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from evm_mcp.bootstrap import bootstrap, close_capabilities  # noqa: E402
from evm_mcp.registry import ToolError, dispatch  # noqa: E402

# Optional ERC-20 contract to probe; skipped when unset.
SAMPLE_TOKEN = os.getenv("EVM_SAMPLE_TOKEN")
# Optional spender for the allowance probe; defaults to the wallet itself.
SAMPLE_SPENDER = os.getenv("EVM_SAMPLE_SPENDER")


async def main() -> None:
    capabilities = await bootstrap()
    try:
        print("Address:", await dispatch(capabilities, "getAddress"))
        print("Chain:", await dispatch(capabilities, "getChain"))
        print("Balance:", await dispatch(capabilities, "getBalance"))
        print("1.5 @ 6 decimals:", await dispatch(capabilities, "convertToBaseUnit", {"amount": 1.5, "decimals": 6}))

        if SAMPLE_TOKEN:
            token_args = {"tokenAddress": SAMPLE_TOKEN}
            try:
                print("Token balance:", await dispatch(capabilities, "getTokenBalance", token_args))
                print("Token supply:", await dispatch(capabilities, "getTokenTotalSupply", token_args))
                spender = SAMPLE_SPENDER or capabilities.address
                print(
                    "Token allowance:",
                    await dispatch(capabilities, "getTokenAllowance", {**token_args, "spender": spender}),
                )
            except ToolError as exc:
                print("Token probe failed:", exc.message)
    finally:
        await close_capabilities(capabilities)


if __name__ == "__main__":
    asyncio.run(main())
