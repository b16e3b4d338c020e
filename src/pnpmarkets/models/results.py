"""Return values of market operations; printed as JSON by the CLI."""

from __future__ import annotations

from typing import Literal

from pnpmarkets.models.base import CamelModel
from pnpmarkets.models.market import Outcome


class CreateMarketResult(CamelModel):
    condition_id: str
    hash: str
    end_time: int  # unix seconds


class MarketInfo(CamelModel):
    """Current on-chain market state and prices."""

    question: str
    end_time: int
    is_settled: bool
    yes_price: str
    no_price: str
    reserve: str
    collateral: str


class UpdatedPrices(CamelModel):
    yes: str
    no: str


class TradeResult(CamelModel):
    hash: str
    action: Literal["buy", "sell"]
    outcome: Outcome
    amount: str
    updated_prices: UpdatedPrices


class SettlementStatus(CamelModel):
    """Whether a market is settled, and if not whether it can be settled now."""

    question: str
    end_time: int
    is_settled: bool
    can_settle: bool
    winner: Outcome | None = None
    time_left_hours: int | None = None
    time_left_minutes: int | None = None


class SettleResult(CamelModel):
    hash: str | None
    winner: Outcome
    condition_id: str


class RedeemResult(CamelModel):
    hash: str
    condition_id: str
    winner: Outcome
    question: str
