import pytest
from eth_account import Account

from evm_mcp.chain.chains import find_chain
from evm_mcp.chain.client import ERC20_ABI, WalletClient, to_checksum

from fakes import OTHER, SPENDER, TEST_ADDRESS, TEST_PRIVATE_KEY, TOKEN_A


class _BuiltCall:
    def __init__(self, address, name, args):
        self.address = address
        self.name = name
        self.args = args

    async def build_transaction(self, transaction):
        tx = dict(transaction)
        tx.update({"to": self.address, "data": "0x095ea7b3", "value": 0, "gas": 60_000, "gasPrice": 2})
        return tx


class _Functions:
    def __init__(self, address, log):
        self._address = address
        self._log = log

    def __getattr__(self, name):
        def build(*args):
            self._log.append((name, args))
            return _BuiltCall(self._address, name, args)

        return build


class _Contract:
    def __init__(self, address, log):
        self.functions = _Functions(address, log)


class _Eth:
    def __init__(self, base_fee=None):
        self._base_fee = base_fee
        self.raw = []
        self.estimated = []
        self.built = []

    async def get_transaction_count(self, address, block_identifier):
        assert block_identifier == "pending"
        return 7

    async def get_block(self, block_identifier):
        return {} if self._base_fee is None else {"baseFeePerGas": self._base_fee}

    @property
    def gas_price(self):
        async def _gas_price():
            return 3_000_000_000

        return _gas_price()

    async def estimate_gas(self, tx):
        self.estimated.append(dict(tx))
        return 21_000

    async def send_raw_transaction(self, raw):
        self.raw.append(bytes(raw))
        return b"\x11" * 32

    def contract(self, address, abi):
        return _Contract(address, self.built)


class _W3:
    def __init__(self, eth):
        self.eth = eth


def _client(chain_id=1, base_fee=None):
    eth = _Eth(base_fee)
    account = Account.from_key(TEST_PRIVATE_KEY)
    return WalletClient(_W3(eth), account, find_chain(chain_id)), eth


@pytest.mark.asyncio
async def test_send_transaction_uses_eip1559_when_base_fee_present():
    client, eth = _client(base_fee=10_000_000_000)
    tx_hash = await client.send_transaction(to=OTHER.lower(), value=10**17)
    assert tx_hash == "0x" + "11" * 32
    sent = eth.estimated[0]
    assert sent["to"] == OTHER
    assert sent["nonce"] == 7
    assert sent["chainId"] == 1
    assert sent["maxPriorityFeePerGas"] == 1_500_000_000
    assert sent["maxFeePerGas"] == 2 * 10_000_000_000 + 1_500_000_000
    assert "gasPrice" not in sent
    assert Account.recover_transaction(eth.raw[0]) == TEST_ADDRESS


@pytest.mark.asyncio
async def test_send_transaction_falls_back_to_legacy_gas_price():
    client, eth = _client(chain_id=56)
    await client.send_transaction(to=OTHER, value=1)
    sent = eth.estimated[0]
    assert sent["gasPrice"] == 3_000_000_000
    assert sent["chainId"] == 56
    assert Account.recover_transaction(eth.raw[0]) == TEST_ADDRESS


@pytest.mark.asyncio
async def test_write_contract_signs_built_transaction():
    client, eth = _client(chain_id=8453)
    await client.write_contract(address=TOKEN_A, abi=ERC20_ABI, function_name="approve", args=[SPENDER, 5])
    assert eth.built == [("approve", (SPENDER, 5))]
    assert Account.recover_transaction(eth.raw[0]) == TEST_ADDRESS


@pytest.mark.asyncio
async def test_sign_message_is_hex():
    client, _ = _client()
    signature = await client.sign_message("gm")
    assert signature.startswith("0x")
    assert len(signature) == 2 + 65 * 2


def test_to_checksum_rejects_garbage():
    assert to_checksum(TOKEN_A.lower()) == TOKEN_A
    with pytest.raises(ValueError):
        to_checksum("0x1234")


def test_fixture_key_is_hardhat_account_zero():
    assert TEST_ADDRESS == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
    assert Account.from_key(TEST_PRIVATE_KEY).address == TEST_ADDRESS
