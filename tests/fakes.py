"""In-memory stand-ins for the web3 clients used by tool handlers."""

from typing import Any, Callable, Dict, List, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from evm_mcp.chain.chains import find_chain
from evm_mcp.chain.client import WalletCapabilities

# Well-known local development key (Hardhat/Anvil account #0); never funded on real networks.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = Account.from_key(TEST_PRIVATE_KEY).address

TOKEN_A = Web3.to_checksum_address("0x" + "a1" * 20)
TOKEN_B = Web3.to_checksum_address("0x" + "b2" * 20)
OTHER = Web3.to_checksum_address("0x" + "c3" * 20)
SPENDER = Web3.to_checksum_address("0x" + "d4" * 20)

TX_HASH = "0x" + "ab" * 32


class FakeCall:
    def __init__(self, result: Any, log: List[tuple], key: tuple) -> None:
        self._result = result
        self._log = log
        self._key = key

    async def call(self) -> Any:
        self._log.append(self._key)
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeFunctions:
    """Resolves ``contract.functions.<name>(*args)`` against a dict of canned results."""

    def __init__(self, address: str, results: Dict[str, Any], log: List[tuple]) -> None:
        self._address = address
        self._results = results
        self._log = log

    def __getattr__(self, name: str) -> Callable[..., FakeCall]:
        def build(*args: Any) -> FakeCall:
            value = self._results.get(name, AttributeError(f"no {name} on {self._address}"))
            if callable(value) and not isinstance(value, Exception):
                value = value(*args)
            return FakeCall(value, self._log, (self._address, name, args))

        return build


class FakeContract:
    def __init__(self, address: str, results: Dict[str, Any], log: List[tuple]) -> None:
        self.address = address
        self.functions = FakeFunctions(address, results, log)


class FakeEth:
    def __init__(self, balances: Dict[str, int], tokens: Dict[str, Dict[str, Any]], chain_id: int) -> None:
        self.balances = balances
        self.tokens = tokens
        self.calls: List[tuple] = []
        self._chain_id = chain_id

    async def get_balance(self, address: str) -> int:
        self.calls.append(("get_balance", address))
        if address not in self.balances:
            raise ValueError(f"unknown account {address}")
        return self.balances[address]

    def contract(self, address: str, abi: Any) -> FakeContract:
        self.calls.append(("contract", address))
        return FakeContract(address, self.tokens.get(address, {}), self.calls)

    @property
    def chain_id(self):
        async def _chain_id() -> int:
            return self._chain_id

        return _chain_id()


class FakeMiddlewareOnion:
    def __init__(self) -> None:
        self.injected: List[tuple] = []

    def inject(self, middleware: Any, layer: Optional[int] = None) -> None:
        self.injected.append((middleware, layer))


class FakeProvider:
    def __init__(self) -> None:
        self.disconnected = False

    async def disconnect(self) -> None:
        self.disconnected = True


class FakeReadClient:
    def __init__(
        self,
        balances: Optional[Dict[str, int]] = None,
        tokens: Optional[Dict[str, Dict[str, Any]]] = None,
        chain_id: int = 1,
    ) -> None:
        self.eth = FakeEth(balances or {}, tokens or {}, chain_id)
        self.middleware_onion = FakeMiddlewareOnion()
        self.provider = FakeProvider()


class FakeWriteClient:
    def __init__(self, chain, account) -> None:
        self.chain = chain
        self._account = account
        self.transactions: List[Dict[str, Any]] = []
        self.contract_writes: List[Dict[str, Any]] = []

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_message(self, message: str) -> str:
        signed = self._account.sign_message(encode_defunct(text=message))
        return Web3.to_hex(signed.signature)

    async def send_transaction(self, *, to: str, value: int) -> str:
        self.transactions.append({"to": to, "value": value})
        return TX_HASH

    async def write_contract(self, *, address: str, abi: Any, function_name: str, args: List[Any]) -> str:
        self.contract_writes.append(
            {"address": address, "function_name": function_name, "args": list(args)}
        )
        return TX_HASH


def make_capabilities(
    *,
    balances: Optional[Dict[str, int]] = None,
    tokens: Optional[Dict[str, Dict[str, Any]]] = None,
    chain_id: int = 1,
) -> WalletCapabilities:
    account = Account.from_key(TEST_PRIVATE_KEY)
    chain = find_chain(chain_id)
    return WalletCapabilities(
        account=account,
        read_client=FakeReadClient(balances, tokens, chain_id),
        write_client=FakeWriteClient(chain, account),
        chain=chain,
    )
