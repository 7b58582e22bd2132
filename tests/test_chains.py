from evm_mcp.chain.chains import CHAINS, find_chain, list_chain_ids


def test_find_known_chain():
    chain = find_chain(8453)
    assert chain is not None
    assert chain.name == "Base"
    assert chain.native_currency.symbol == "ETH"
    assert chain.native_currency.decimals == 18


def test_find_unknown_chain_returns_none():
    assert find_chain(999_999_999) is None


def test_catalog_ids_are_unique():
    ids = list_chain_ids()
    assert len(ids) == len(set(ids)) == len(CHAINS)


def test_descriptors_are_immutable():
    chain = find_chain(1)
    try:
        chain.name = "Other"  # type: ignore[misc]
    except AttributeError:
        pass
    else:  # pragma: no cover
        raise AssertionError("ChainDescriptor should be frozen")
