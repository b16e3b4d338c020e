"""Boundary to the external market SDK (create, trade, settle, redeem)."""

from pnpmarkets.chain.base import ChainClient, CreatedMarket, MarketPrices, OnChainMarket, TxReceipt
from pnpmarkets.chain.client import GuardedChainClient, init_client
from pnpmarkets.chain.tokens import TOKENS, resolve_collateral

__all__ = [
    "ChainClient",
    "CreatedMarket",
    "MarketPrices",
    "OnChainMarket",
    "TxReceipt",
    "GuardedChainClient",
    "init_client",
    "TOKENS",
    "resolve_collateral",
]
