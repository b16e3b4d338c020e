"""Shared fixtures: temp registry directory and an in-memory chain client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
import structlog

from pnpmarkets.chain.base import CreatedMarket, MarketPrices, OnChainMarket, TxReceipt
from pnpmarkets.models import Collateral, MarketRecord, RegistryEntry
from pnpmarkets.settlement import SettlementScanner
from pnpmarkets.storage import MarketRecordStore, RegistryIndex

USDC = Collateral(symbol="USDC", address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", decimals=6)


class FakeChainClient:
    """In-memory stand-in for the market SDK. Records every call."""

    signer_address = "0x000000000000000000000000000000000000dEaD"

    def __init__(self) -> None:
        self.markets: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_on: set[str] = set()
        self._next = 1

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise RuntimeError(f"{name}: rpc unavailable")

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    def add_market(self, condition_id: str, end_time: int, question: str = "Q?") -> None:
        self.markets[condition_id] = {
            "question": question,
            "end_time": end_time,
            "winning_token": None,
            "collateral": USDC.address,
            "reserve": "100000000",
        }

    def create_market(self, question: str, end_time: int, initial_liquidity: int, collateral_token: str) -> CreatedMarket:
        self._record("create_market", question, end_time, initial_liquidity, collateral_token)
        condition_id = f"0x{self._next:04x}"
        self._next += 1
        self.add_market(condition_id, end_time, question)
        self.markets[condition_id]["collateral"] = collateral_token
        return CreatedMarket(condition_id=condition_id, tx_hash=f"0xcreate{condition_id[2:]}")

    def get_market_info(self, condition_id: str) -> OnChainMarket:
        self._record("get_market_info", condition_id)
        m = self.markets[condition_id]
        return OnChainMarket(
            question=m["question"],
            end_time=m["end_time"],
            is_settled=m["winning_token"] is not None,
            collateral=m["collateral"],
            reserve=m["reserve"],
        )

    def get_market_prices(self, condition_id: str) -> MarketPrices:
        self._record("get_market_prices", condition_id)
        return MarketPrices(yes_price_percent="55.00%", no_price_percent="45.00%")

    def buy(self, condition_id: str, amount: int, outcome: str, min_out: int) -> TxReceipt:
        self._record("buy", condition_id, amount, outcome, min_out)
        return TxReceipt(tx_hash="0xbuy")

    def sell(self, condition_id: str, amount: int, outcome: str, min_out: int) -> TxReceipt:
        self._record("sell", condition_id, amount, outcome, min_out)
        return TxReceipt(tx_hash="0xsell")

    def is_resolved(self, condition_id: str) -> bool:
        self._record("is_resolved", condition_id)
        return self.markets[condition_id]["winning_token"] is not None

    def get_winning_token(self, condition_id: str) -> str:
        self._record("get_winning_token", condition_id)
        return self.markets[condition_id]["winning_token"] or "0"

    def get_token_id(self, condition_id: str, outcome: str) -> str:
        self._record("get_token_id", condition_id, outcome)
        return f"{condition_id}-{outcome}"

    def settle_market(self, condition_id: str, winning_token_id: str) -> TxReceipt:
        self._record("settle_market", condition_id, winning_token_id)
        m = self.markets[condition_id]
        if m["winning_token"] is not None:
            raise RuntimeError("execution reverted: already resolved")
        m["winning_token"] = winning_token_id
        return TxReceipt(tx_hash=f"0xsettle{condition_id[2:]}")

    def redeem(self, condition_id: str) -> TxReceipt:
        self._record("redeem", condition_id)
        return TxReceipt(tx_hash=f"0xredeem{condition_id[2:]}")

    def resolve(self, condition_id: str, outcome: str) -> None:
        """Settle directly, as if a previous run crashed right after the transaction."""
        self.markets[condition_id]["winning_token"] = f"{condition_id}-{outcome}"


def make_record(condition_id: str, end_time_unix: int, question: str = "Will it rain?", created_unix: int = 0) -> MarketRecord:
    return MarketRecord(
        condition_id=condition_id,
        question=question,
        created_at=datetime.fromtimestamp(created_unix, tz=timezone.utc),
        end_time=datetime.fromtimestamp(end_time_unix, tz=timezone.utc),
        collateral=USDC,
        initial_liquidity="100",
        create_tx_hash="0xcreate",
    )


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def market_dir(tmp_path):
    return tmp_path / "markets"


@pytest.fixture
def records(market_dir):
    return MarketRecordStore(market_dir)


@pytest.fixture
def registry(market_dir):
    return RegistryIndex(market_dir, lock_timeout=5)


@pytest.fixture
def chain():
    return FakeChainClient()


@pytest.fixture
def scanner(chain, records, registry):
    return SettlementScanner(chain, records, registry, clock=lambda: 2000)


@pytest.fixture
def register(chain, records, registry):
    """Write a record, its index entry and the matching on-chain market."""

    def _register(condition_id: str, end_time_unix: int, question: str = "Will it rain?") -> MarketRecord:
        record = make_record(condition_id, end_time_unix, question)
        records.write(record)
        registry.append(RegistryEntry.from_record(record))
        chain.add_market(condition_id, end_time_unix, question)
        return record

    return _register
