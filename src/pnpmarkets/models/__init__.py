"""Canonical schema (Pydantic) - market records, registry, operation results."""

from pnpmarkets.models.market import (
    Collateral,
    MarketRecord,
    Outcome,
    Registry,
    RegistryEntry,
    Settlement,
    TradingRules,
)
from pnpmarkets.models.results import (
    CreateMarketResult,
    MarketInfo,
    RedeemResult,
    SettlementStatus,
    SettleResult,
    TradeResult,
)

__all__ = [
    "Outcome",
    "Collateral",
    "TradingRules",
    "Settlement",
    "MarketRecord",
    "RegistryEntry",
    "Registry",
    "CreateMarketResult",
    "MarketInfo",
    "TradeResult",
    "SettlementStatus",
    "SettleResult",
    "RedeemResult",
]
