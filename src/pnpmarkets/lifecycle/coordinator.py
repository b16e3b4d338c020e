"""Market lifecycle: settle due markets, create, settle, redeem - with registry bookkeeping."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

import structlog

from pnpmarkets.chain.base import ChainClient
from pnpmarkets.config.settings import Settings
from pnpmarkets.errors import NotFound, PnpError, SettlementPending
from pnpmarkets.markets.create import DEFAULT_EXPLORER_URL, CreateMarketParams, create_market, validate_params
from pnpmarkets.markets.redeem import redeem_winnings
from pnpmarkets.markets.trade import check_outcome
from pnpmarkets.models import MarketRecord, RedeemResult, RegistryEntry, SettleResult
from pnpmarkets.settlement.scanner import Resolver, ScanReport, SettlementScanner
from pnpmarkets.storage.records import MarketRecordStore
from pnpmarkets.storage.registry import RegistryIndex

log = structlog.get_logger(__name__)


class MarketLifecycleCoordinator:
    """Sequences chain calls with record and index writes for markets this agent owns."""

    def __init__(
        self,
        client: ChainClient,
        records: MarketRecordStore,
        registry: RegistryIndex,
        *,
        resolver: Resolver | None = None,
        require_settled_before_create: bool = True,
        clock: Callable[[], float] = time.time,
        explorer_url: str = DEFAULT_EXPLORER_URL,
    ):
        self.client = client
        self.records = records
        self.registry = registry
        self.resolver = resolver
        self.require_settled_before_create = require_settled_before_create
        self.clock = clock
        self.explorer_url = explorer_url
        self.scanner = SettlementScanner(
            client, records, registry, clock=clock, explorer_url=explorer_url
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: ChainClient,
        resolver: Resolver | None = None,
    ) -> MarketLifecycleCoordinator:
        base_dir = settings.registry_dir
        return cls(
            client,
            MarketRecordStore(base_dir),
            RegistryIndex(base_dir, lock_timeout=settings.lock_timeout_sec),
            resolver=resolver,
            require_settled_before_create=settings.require_settled_before_create,
            explorer_url=settings.explorer_url,
        )

    def _now(self, now: int | None) -> int:
        return int(self.clock()) if now is None else now

    def startup(self, now: int | None = None) -> ScanReport:
        """Settle everything that is due. Run before any new creation."""
        return self.scanner.scan(self.resolver, now=self._now(now))

    def create_market(self, params: CreateMarketParams, now: int | None = None) -> MarketRecord:
        """Create a market on chain, then write its record, then append its index entry."""
        now = self._now(now)
        collateral = validate_params(params)
        report = self.startup(now)
        if report.deferred and self.require_settled_before_create:
            raise SettlementPending(report.deferred)

        result = create_market(self.client, params, now=now, explorer_url=self.explorer_url)
        record = MarketRecord(
            condition_id=result.condition_id,
            question=params.question,
            created_at=datetime.fromtimestamp(now, tz=timezone.utc),
            end_time=datetime.fromtimestamp(result.end_time, tz=timezone.utc),
            collateral=collateral,
            initial_liquidity=params.liquidity,
            create_tx_hash=result.hash,
            trading_rules=params.trading_rules,
        )
        self.records.write(record)
        try:
            self.registry.append(RegistryEntry.from_record(record))
        except Exception:
            log.error(
                "registry_append_failed",
                condition_id=record.condition_id,
                msg="Record is on disk; the next settlement scan restores the index entry.",
            )
            raise
        return record

    def settle(self, condition_id: str, outcome: str, now: int | None = None) -> SettleResult:
        """Settle a registered market with an operator-chosen outcome.

        If the chain already resolved the market, its winner is recorded
        instead and no transaction is sent.
        """
        winner = check_outcome(outcome)
        entry = self.registry.get(condition_id)
        if entry is None:
            if not self.records.exists(condition_id):
                raise NotFound(condition_id, what="registry entry")
            entry = RegistryEntry.from_record(self.records.read(condition_id))
        result = self.scanner.resolve_one(entry, lambda record: winner, now=self._now(now))
        if result is None:
            raise PnpError(f"Settlement of {condition_id} was deferred")
        if result.winner != winner:
            log.warning(
                "settled_winner_differs",
                condition_id=condition_id,
                requested=winner,
                on_chain=result.winner,
            )
        return result

    def redeem(self, condition_id: str) -> RedeemResult:
        return redeem_winnings(self.client, condition_id, explorer_url=self.explorer_url)

    def list_markets(self) -> list[RegistryEntry]:
        return list(self.registry.load().markets)

    def due_markets(self, now: int | None = None) -> list[RegistryEntry]:
        return list(self.scanner.find_due(now=self._now(now)))
