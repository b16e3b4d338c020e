"""Market operations, collateral tokens and chain client wiring."""

import pytest

from pnpmarkets.chain.client import GuardedChainClient, init_client
from pnpmarkets.chain.tokens import parse_units, resolve_collateral, tx_url
from pnpmarkets.config.settings import Settings
from pnpmarkets.errors import (
    AlreadySettledOnChain,
    ConfigurationError,
    ExternalCallFailure,
    MarketClosed,
    NotYetSettleable,
    ValidationError,
)
from pnpmarkets.loader import load_callable
from pnpmarkets.markets import (
    CreateMarketParams,
    buy_tokens,
    create_market,
    get_market_info,
    get_settlement_status,
    redeem_winnings,
    sell_tokens,
    settle_market,
)


def test_resolve_known_symbols_case_insensitive():
    assert resolve_collateral("usdc").decimals == 6
    assert resolve_collateral("CBETH").symbol == "cbETH"
    assert resolve_collateral("WETH").address == "0x4200000000000000000000000000000000000006"
    assert resolve_collateral("USDC", decimals=8).decimals == 8


def test_resolve_address_defaults_to_18_decimals():
    addr = "0x1111111111111111111111111111111111111111"
    token = resolve_collateral(addr)
    assert token.address == addr and token.decimals == 18
    assert resolve_collateral(addr, decimals=6).decimals == 6


@pytest.mark.parametrize("value", ["DOGE", "0x123", "", "1111111111111111111111111111111111111111"])
def test_resolve_unknown_collateral_fails(value):
    with pytest.raises(ValidationError):
        resolve_collateral(value)


def test_parse_units():
    assert parse_units("1.5", 6) == 1_500_000
    assert parse_units("100", 18) == 100 * 10**18
    assert parse_units("0", 6) == 0
    with pytest.raises(ValidationError):
        parse_units("0.0000001", 6)
    with pytest.raises(ValidationError):
        parse_units("ten", 6)


def test_tx_url():
    assert tx_url("https://basescan.org/", "0xabc") == "https://basescan.org/tx/0xabc"


def test_create_market_computes_end_time_and_units(chain):
    result = create_market(
        chain,
        CreateMarketParams(question="Q?", duration_hours=1.5, liquidity="2.5", collateral="WETH"),
        now=1000,
    )
    assert result.end_time == 1000 + 5400
    assert chain.calls_to("create_market") == [
        ("Q?", 6400, 25 * 10**17, "0x4200000000000000000000000000000000000006")
    ]
    assert result.to_json_dict() == {"conditionId": "0x0001", "hash": "0xcreate0001", "endTime": 6400}


def test_get_market_info(chain):
    chain.add_market("0xabc", 5000, "Will it rain?")
    info = get_market_info(chain, "0xabc")
    assert info.question == "Will it rain?"
    assert info.yes_price == "55.00%" and info.no_price == "45.00%"
    assert info.is_settled is False


def test_buy_converts_units(chain):
    chain.add_market("0xabc", 5000)
    result = buy_tokens(chain, "0xabc", "YES", "10", min_out="1", now=1000)
    assert chain.calls_to("buy") == [("0xabc", 10_000_000, "YES", 10**18)]
    assert result.action == "buy" and result.hash == "0xbuy"
    assert result.updated_prices.yes == "55.00%"


def test_sell_converts_units(chain):
    chain.add_market("0xabc", 5000)
    sell_tokens(chain, "0xabc", "NO", "2", min_out="1", now=1000)
    assert chain.calls_to("sell") == [("0xabc", 2 * 10**18, "NO", 1_000_000)]


def test_trade_after_end_time_fails(chain):
    chain.add_market("0xabc", 1000)
    with pytest.raises(MarketClosed):
        buy_tokens(chain, "0xabc", "YES", "10", now=1000)
    assert chain.calls_to("buy") == []


def test_trade_on_settled_market_fails(chain):
    chain.add_market("0xabc", 5000)
    chain.resolve("0xabc", "YES")
    with pytest.raises(MarketClosed):
        sell_tokens(chain, "0xabc", "YES", "1", now=1000)


@pytest.mark.parametrize("outcome,amount", [("MAYBE", "1"), ("YES", "0"), ("NO", "-3")])
def test_trade_rejects_bad_input(chain, outcome, amount):
    chain.add_market("0xabc", 5000)
    with pytest.raises(ValidationError):
        buy_tokens(chain, "0xabc", outcome, amount, now=1000)
    assert chain.calls == []


def test_settlement_status_before_end(chain):
    chain.add_market("0xabc", 1000 + 5400 + 59)
    status = get_settlement_status(chain, "0xabc", now=1000)
    assert status.can_settle is False and status.is_settled is False
    assert (status.time_left_hours, status.time_left_minutes) == (1, 30)


def test_settlement_status_after_end_and_settled(chain):
    chain.add_market("0xabc", 1000)
    status = get_settlement_status(chain, "0xabc", now=1000)
    assert status.can_settle is True and status.time_left_hours is None
    chain.resolve("0xabc", "NO")
    status = get_settlement_status(chain, "0xabc", now=1000)
    assert status.is_settled is True and status.can_settle is False
    assert status.winner == "NO"


def test_settle_market_preflight(chain):
    chain.add_market("0xabc", 2000)
    with pytest.raises(NotYetSettleable):
        settle_market(chain, "0xabc", "YES", now=1000)
    result = settle_market(chain, "0xabc", "YES", now=2000)
    assert result.hash == "0xsettleabc" and result.winner == "YES"
    with pytest.raises(AlreadySettledOnChain):
        settle_market(chain, "0xabc", "NO", now=2000)
    assert len(chain.calls_to("settle_market")) == 1


def test_redeem_requires_settlement(chain):
    chain.add_market("0xabc", 1000)
    with pytest.raises(NotYetSettleable):
        redeem_winnings(chain, "0xabc")
    chain.resolve("0xabc", "NO")
    result = redeem_winnings(chain, "0xabc")
    assert result.winner == "NO" and result.hash == "0xredeemabc"


def test_guarded_client_wraps_sdk_errors(chain):
    chain.add_market("0xabc", 1000)
    chain.fail_on.add("get_market_prices")
    guarded = GuardedChainClient(chain)
    with pytest.raises(ExternalCallFailure) as exc:
        get_market_info(guarded, "0xabc")
    assert exc.value.operation == "get_market_prices"
    assert isinstance(exc.value.cause, RuntimeError)


def test_guarded_client_passes_local_errors(chain):
    chain.add_market("0xabc", 1000)
    with pytest.raises(MarketClosed):
        buy_tokens(GuardedChainClient(chain), "0xabc", "YES", "1", now=2000)


def test_init_client_requires_private_key():
    settings = Settings.from_dict({"chain": {"client_factory": "json:loads"}})
    with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
        init_client(settings, env={})


def test_init_client_requires_factory():
    with pytest.raises(ConfigurationError, match="client_factory"):
        init_client(Settings(), env={"PRIVATE_KEY": "0x1"})


def test_init_client_passes_rpc_and_key(chain, monkeypatch):
    seen = {}

    def factory(rpc_url, private_key):
        seen.update(rpc_url=rpc_url, private_key=private_key)
        return chain

    monkeypatch.setattr("pnpmarkets.chain.client.load_callable", lambda ref: factory)
    settings = Settings.from_dict({"chain": {"client_factory": "sdk:make", "rpc_url": "https://rpc.example"}})

    client = init_client(settings, env={"PRIVATE_KEY": "0xkey"})
    assert isinstance(client, GuardedChainClient)
    assert seen == {"rpc_url": "https://rpc.example", "private_key": "0xkey"}
    assert client.signer_address == chain.signer_address

    init_client(settings, env={"PRIVATE_KEY": "0xkey", "RPC_URL": "https://override.example"})
    assert seen["rpc_url"] == "https://override.example"


def test_load_callable():
    import json

    assert load_callable("json:dumps") is json.dumps
    for ref in ("json", "json:", ":dumps", "json:nope", "no_such_module_xyz:f"):
        with pytest.raises(ConfigurationError):
            load_callable(ref)
