import os
import sys

import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from evm_mcp.metrics import default_metrics  # noqa: E402
from fakes import OTHER, TEST_ADDRESS, TOKEN_A, TOKEN_B, make_capabilities  # noqa: E402


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture
def capabilities():
    return make_capabilities(
        balances={TEST_ADDRESS: 1_500_000_000_000_000_000, OTHER: 42},
        tokens={
            TOKEN_A: {
                "balanceOf": lambda owner: {TEST_ADDRESS: 123_450_000, OTHER: 1}.get(owner, 0),
                "decimals": 6,
                "totalSupply": 1_000_000_000_000,
                "allowance": lambda owner, spender: 5_000_000 if owner == TEST_ADDRESS else 0,
            },
            TOKEN_B: {
                "balanceOf": lambda owner: 2 * 10**18,
                "decimals": 18,
                "totalSupply": 10**27,
            },
        },
    )
