"""Market operations: thin validated wrappers over the chain client."""

from pnpmarkets.markets.create import CreateMarketParams, create_market
from pnpmarkets.markets.redeem import redeem_winnings
from pnpmarkets.markets.settle import get_settlement_status, settle_market
from pnpmarkets.markets.trade import buy_tokens, get_market_info, sell_tokens

__all__ = [
    "CreateMarketParams",
    "create_market",
    "get_market_info",
    "buy_tokens",
    "sell_tokens",
    "get_settlement_status",
    "settle_market",
    "redeem_winnings",
]
