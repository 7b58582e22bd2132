import pytest
from web3.middleware import ExtraDataToPOAMiddleware

from evm_mcp import __main__ as cli
from evm_mcp.bootstrap import (
    ConfigurationMissingError,
    InvalidConfigurationError,
    UnsupportedChainError,
    bootstrap,
    close_capabilities,
    load_wallet_settings,
)
from evm_mcp.config import EvmConfig, WalletSettings

from fakes import TEST_ADDRESS, TEST_PRIVATE_KEY, FakeReadClient

RPC_URL = "http://127.0.0.1:8545"


def _factory(chain_id, seen=None):
    def build(rpc_url, timeout):
        if seen is not None:
            seen.append((rpc_url, timeout))
        return FakeReadClient(chain_id=chain_id)

    return build


def test_missing_private_key(monkeypatch):
    monkeypatch.delenv("WALLET_PRIVATE_KEY", raising=False)
    monkeypatch.setenv("RPC_PROVIDER_URL", RPC_URL)
    with pytest.raises(ConfigurationMissingError) as exc_info:
        load_wallet_settings()
    assert exc_info.value.variable == "WALLET_PRIVATE_KEY"


def test_missing_rpc_url(monkeypatch):
    monkeypatch.setenv("WALLET_PRIVATE_KEY", TEST_PRIVATE_KEY)
    monkeypatch.delenv("RPC_PROVIDER_URL", raising=False)
    with pytest.raises(ConfigurationMissingError) as exc_info:
        load_wallet_settings()
    assert "RPC_PROVIDER_URL" in str(exc_info.value)


@pytest.mark.asyncio
async def test_bootstrap_builds_capabilities():
    seen = []
    caps = await bootstrap(
        WalletSettings(TEST_PRIVATE_KEY, RPC_URL),
        config=EvmConfig(rpc_timeout=7.0),
        web3_factory=_factory(1, seen),
    )
    assert caps.address == TEST_ADDRESS
    assert caps.write_client.address == TEST_ADDRESS
    assert caps.chain.id == 1
    assert seen == [(RPC_URL, 7.0)]
    # Mainnet blocks need no extraData shim.
    assert caps.read_client.middleware_onion.injected == []


@pytest.mark.asyncio
async def test_bootstrap_injects_poa_middleware_off_mainnet():
    caps = await bootstrap(WalletSettings(TEST_PRIVATE_KEY, RPC_URL), web3_factory=_factory(137))
    assert caps.chain.name == "Polygon"
    assert caps.read_client.middleware_onion.injected == [(ExtraDataToPOAMiddleware, 0)]


@pytest.mark.asyncio
async def test_bootstrap_rejects_unknown_chain():
    with pytest.raises(UnsupportedChainError) as exc_info:
        await bootstrap(WalletSettings(TEST_PRIVATE_KEY, RPC_URL), web3_factory=_factory(424242))
    assert exc_info.value.chain_id == 424242
    assert "424242" in str(exc_info.value)
    assert RPC_URL in str(exc_info.value)


@pytest.mark.asyncio
async def test_bootstrap_disconnects_provider_when_chain_detection_fails():
    built = []

    def build(rpc_url, timeout):
        client = FakeReadClient(chain_id=424242)
        built.append(client)
        return client

    with pytest.raises(UnsupportedChainError):
        await bootstrap(WalletSettings(TEST_PRIVATE_KEY, RPC_URL), web3_factory=build)
    assert built[0].provider.disconnected is True


@pytest.mark.asyncio
async def test_bootstrap_rejects_bad_key():
    with pytest.raises(InvalidConfigurationError) as exc_info:
        await bootstrap(WalletSettings("0x1234", RPC_URL), web3_factory=_factory(1))
    assert "0x1234" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_close_capabilities_disconnects_provider():
    caps = await bootstrap(WalletSettings(TEST_PRIVATE_KEY, RPC_URL), web3_factory=_factory(1))
    await close_capabilities(caps)
    assert caps.read_client.provider.disconnected is True


def test_main_exits_1_before_serving_on_bootstrap_failure(monkeypatch):
    served = []

    async def failing_bootstrap(settings, *, config):
        raise UnsupportedChainError(424242, RPC_URL)

    async def fake_serve(capabilities, *, config):
        served.append(capabilities)

    monkeypatch.setenv("WALLET_PRIVATE_KEY", TEST_PRIVATE_KEY)
    monkeypatch.setenv("RPC_PROVIDER_URL", RPC_URL)
    monkeypatch.setattr(cli, "bootstrap", failing_bootstrap)
    monkeypatch.setattr(cli, "serve_stdio", fake_serve)

    assert cli.main([], config=EvmConfig(log_format="plain")) == 1
    assert served == []


def test_main_exits_1_when_env_missing(monkeypatch):
    monkeypatch.delenv("WALLET_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("RPC_PROVIDER_URL", raising=False)
    assert cli.main([], config=EvmConfig(log_format="plain")) == 1


def test_main_serves_stdio_after_bootstrap(monkeypatch):
    served = []
    closed = []
    caps = object()

    async def ok_bootstrap(settings, *, config):
        return caps

    async def fake_serve(capabilities, *, config):
        served.append(capabilities)

    async def fake_close(capabilities):
        closed.append(capabilities)

    monkeypatch.setenv("WALLET_PRIVATE_KEY", TEST_PRIVATE_KEY)
    monkeypatch.setenv("RPC_PROVIDER_URL", RPC_URL)
    monkeypatch.setattr(cli, "bootstrap", ok_bootstrap)
    monkeypatch.setattr(cli, "serve_stdio", fake_serve)
    monkeypatch.setattr(cli, "close_capabilities", fake_close)

    assert cli.main([], config=EvmConfig(log_format="plain")) == 0
    assert served == [caps]
    assert closed == [caps]
