"""MarketRecord, RegistryEntry, Registry - the persisted registry entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field, model_validator

from pnpmarkets.errors import AlreadySettled
from pnpmarkets.models.base import CamelModel

Outcome = Literal["YES", "NO"]


def _check_winner(is_settled: bool, winner: str | None) -> None:
    if is_settled and winner is None:
        raise ValueError("settled market must have a winner")
    if not is_settled and winner is not None:
        raise ValueError("unsettled market cannot have a winner")


class Collateral(CamelModel):
    """ERC20 token backing the market's liquidity."""

    symbol: str
    address: str
    decimals: int = Field(..., ge=0, le=36)


class TradingRules(CamelModel):
    """Free-text resolution contract: source, criteria, notes."""

    resolution_source: str = ""
    resolution_criteria: str = ""
    notes: str = ""


class Settlement(CamelModel):
    """Settlement state of a market. Set once, never reverted."""

    is_settled: bool = False
    settle_tx_hash: str | None = None
    winner: Outcome | None = None
    settled_at: datetime | None = None

    @model_validator(mode="after")
    def _winner_iff_settled(self) -> Settlement:
        _check_winner(self.is_settled, self.winner)
        return self


class MarketRecord(CamelModel):
    """Full per-market record, stored as markets/<conditionId>.json."""

    condition_id: str = Field(..., min_length=1)
    question: str
    created_at: datetime
    end_time: datetime
    collateral: Collateral
    initial_liquidity: str
    create_tx_hash: str
    trading_rules: TradingRules = Field(default_factory=TradingRules)
    settlement: Settlement = Field(default_factory=Settlement)

    @property
    def end_time_unix(self) -> int:
        return int(self.end_time.timestamp())

    def settled(
        self,
        winner: Outcome,
        settle_tx_hash: str | None,
        settled_at: datetime | None = None,
    ) -> MarketRecord:
        """Return a copy with settlement fields filled in. Raises AlreadySettled if already set."""
        if self.settlement.is_settled:
            raise AlreadySettled(self.condition_id, self.settlement.winner)
        settlement = Settlement(
            is_settled=True,
            settle_tx_hash=settle_tx_hash,
            winner=winner,
            settled_at=settled_at or datetime.now(timezone.utc),
        )
        return self.model_copy(update={"settlement": settlement})


class RegistryEntry(CamelModel):
    """Projection of a MarketRecord kept in markets/registry.json."""

    condition_id: str = Field(..., min_length=1)
    question: str
    end_time_unix: int
    is_settled: bool = False
    winner: Outcome | None = None

    @model_validator(mode="after")
    def _winner_iff_settled(self) -> RegistryEntry:
        _check_winner(self.is_settled, self.winner)
        return self

    @classmethod
    def from_record(cls, record: MarketRecord) -> RegistryEntry:
        return cls(
            condition_id=record.condition_id,
            question=record.question,
            end_time_unix=record.end_time_unix,
            is_settled=record.settlement.is_settled,
            winner=record.settlement.winner,
        )


class Registry(CamelModel):
    """The master index: {"markets": [...]} in insertion order."""

    markets: list[RegistryEntry] = Field(default_factory=list)

    def get(self, condition_id: str) -> RegistryEntry | None:
        for entry in self.markets:
            if entry.condition_id == condition_id:
                return entry
        return None

    def __contains__(self, condition_id: object) -> bool:
        return any(e.condition_id == condition_id for e in self.markets)
