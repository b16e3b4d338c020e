"""Chain client protocol: the market SDK surface this package consumes."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from pnpmarkets.models import Outcome


class CreatedMarket(BaseModel):
    condition_id: str
    tx_hash: str


class OnChainMarket(BaseModel):
    """Market state as reported by the contracts."""

    question: str
    end_time: int  # unix seconds
    is_settled: bool
    collateral: str
    reserve: str


class MarketPrices(BaseModel):
    yes_price_percent: str
    no_price_percent: str


class TxReceipt(BaseModel):
    tx_hash: str


@runtime_checkable
class ChainClient(Protocol):
    """Protocol for the market SDK. Amounts are integer base units.

    Implementations submit and sign transactions; nothing in this package does.
    """

    @property
    def signer_address(self) -> str | None: ...

    def create_market(
        self,
        question: str,
        end_time: int,
        initial_liquidity: int,
        collateral_token: str,
    ) -> CreatedMarket: ...

    def get_market_info(self, condition_id: str) -> OnChainMarket: ...
    def get_market_prices(self, condition_id: str) -> MarketPrices: ...
    def buy(self, condition_id: str, amount: int, outcome: Outcome, min_out: int) -> TxReceipt: ...
    def sell(self, condition_id: str, amount: int, outcome: Outcome, min_out: int) -> TxReceipt: ...
    def is_resolved(self, condition_id: str) -> bool: ...
    def get_winning_token(self, condition_id: str) -> str: ...
    def get_token_id(self, condition_id: str, outcome: Outcome) -> str: ...
    def settle_market(self, condition_id: str, winning_token_id: str) -> TxReceipt: ...
    def redeem(self, condition_id: str) -> TxReceipt: ...
