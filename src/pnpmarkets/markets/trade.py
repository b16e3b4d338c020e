"""Trade on a prediction market: buy / sell YES or NO tokens."""

from __future__ import annotations

import time
from typing import Literal

import structlog

from pnpmarkets.chain.base import ChainClient
from pnpmarkets.chain.tokens import OUTCOME_TOKEN_DECIMALS, parse_units, require_positive, tx_url
from pnpmarkets.errors import MarketClosed, ValidationError
from pnpmarkets.markets.create import DEFAULT_EXPLORER_URL
from pnpmarkets.models import MarketInfo, Outcome, TradeResult
from pnpmarkets.models.results import UpdatedPrices
from pnpmarkets.storage.records import check_condition_id

log = structlog.get_logger(__name__)

# Buying spends collateral (USDC by default); selling spends outcome tokens.
BUY_AMOUNT_DECIMALS = 6
SELL_AMOUNT_DECIMALS = OUTCOME_TOKEN_DECIMALS
SELL_MIN_OUT_DECIMALS = 6


def check_outcome(outcome: str) -> Outcome:
    if outcome not in ("YES", "NO"):
        raise ValidationError("outcome must be YES or NO")
    return outcome  # type: ignore[return-value]


def get_market_info(client: ChainClient, condition_id: str) -> MarketInfo:
    """Fetch current market information and prices."""
    check_condition_id(condition_id)
    info = client.get_market_info(condition_id)
    prices = client.get_market_prices(condition_id)
    return MarketInfo(
        question=info.question,
        end_time=info.end_time,
        is_settled=info.is_settled,
        yes_price=prices.yes_price_percent,
        no_price=prices.no_price_percent,
        reserve=info.reserve,
        collateral=info.collateral,
    )


def _trade(
    client: ChainClient,
    action: Literal["buy", "sell"],
    condition_id: str,
    outcome: str,
    amount: str,
    decimals: int,
    min_out: str,
    min_out_decimals: int,
    now: int | None,
    explorer_url: str,
) -> TradeResult:
    check_condition_id(condition_id)
    outcome = check_outcome(outcome)
    require_positive(amount, "amount")
    amount_units = parse_units(amount, decimals, "amount")
    min_out_units = parse_units(min_out, min_out_decimals, "minOut")

    # Pre-flight: market must still be tradeable
    info = client.get_market_info(condition_id)
    now = int(time.time()) if now is None else now
    if now >= info.end_time:
        raise MarketClosed("Market trading period has ended")
    if info.is_settled:
        raise MarketClosed("Market is already settled")

    log.info(
        "submitting_trade",
        market=info.question,
        action=action.upper(),
        outcome=outcome,
        amount=amount,
        wallet=client.signer_address,
    )
    submit = client.buy if action == "buy" else client.sell
    receipt = submit(condition_id, amount_units, outcome, min_out_units)
    prices = client.get_market_prices(condition_id)
    log.info(
        "trade_executed",
        tx_hash=receipt.tx_hash,
        explorer=tx_url(explorer_url, receipt.tx_hash),
        yes_price=prices.yes_price_percent,
        no_price=prices.no_price_percent,
    )
    return TradeResult(
        hash=receipt.tx_hash,
        action=action,
        outcome=outcome,
        amount=amount,
        updated_prices=UpdatedPrices(yes=prices.yes_price_percent, no=prices.no_price_percent),
    )


def buy_tokens(
    client: ChainClient,
    condition_id: str,
    outcome: str,
    amount: str,
    *,
    decimals: int = BUY_AMOUNT_DECIMALS,
    min_out: str = "0",
    now: int | None = None,
    explorer_url: str = DEFAULT_EXPLORER_URL,
) -> TradeResult:
    """Buy outcome tokens with collateral. min_out is in outcome-token units."""
    return _trade(
        client, "buy", condition_id, outcome, amount, decimals,
        min_out, OUTCOME_TOKEN_DECIMALS, now, explorer_url,
    )


def sell_tokens(
    client: ChainClient,
    condition_id: str,
    outcome: str,
    amount: str,
    *,
    decimals: int = SELL_AMOUNT_DECIMALS,
    min_out: str = "0",
    now: int | None = None,
    explorer_url: str = DEFAULT_EXPLORER_URL,
) -> TradeResult:
    """Sell outcome tokens for collateral. min_out is in collateral units."""
    return _trade(
        client, "sell", condition_id, outcome, amount, decimals,
        min_out, SELL_MIN_OUT_DECIMALS, now, explorer_url,
    )
