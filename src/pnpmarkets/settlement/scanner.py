"""Settlement scanner: find due markets, resolve each once, keep record and index in step.

Write order for a settlement is chain call, then record, then index entry.
A crash between any two steps is healed by the next scan:

- chain settled, record not: ``is_resolved`` is true, the winner is read
  back from chain and persisted without a second settlement transaction.
- record settled, index not: ``resolve_one`` raises AlreadySettled and the
  scan marks the index entry from the record.
- record written at creation, index append lost: ``repair`` re-appends it.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Iterator

import structlog
from pydantic import BaseModel, Field

from pnpmarkets.chain.base import ChainClient
from pnpmarkets.chain.client import winner_from_chain
from pnpmarkets.errors import AlreadySettled, NotDue
from pnpmarkets.markets.create import DEFAULT_EXPLORER_URL
from pnpmarkets.markets.settle import submit_settlement
from pnpmarkets.markets.trade import check_outcome
from pnpmarkets.models import MarketRecord, Outcome, Registry, RegistryEntry, SettleResult
from pnpmarkets.storage.records import MarketRecordStore
from pnpmarkets.storage.registry import RegistryIndex

log = structlog.get_logger(__name__)

# Caller-supplied judgment: decide YES/NO from the record's trading rules,
# or return None to leave the market for a later scan.
Resolver = Callable[[MarketRecord], Outcome | None]


class DueMarkets:
    """Unsettled entries with endTimeUnix <= now, in index order.

    Lazy and restartable: each iteration walks the index snapshot again.
    """

    def __init__(self, index: Registry, now: int):
        self.index = index
        self.now = now

    def __iter__(self) -> Iterator[RegistryEntry]:
        for entry in self.index.markets:
            if not entry.is_settled and entry.end_time_unix <= self.now:
                yield entry


class RepairReport(BaseModel):
    appended: list[str] = Field(default_factory=list)
    marked_settled: list[str] = Field(default_factory=list)
    missing_records: list[str] = Field(default_factory=list)


class ScanReport(BaseModel):
    repair: RepairReport = Field(default_factory=RepairReport)
    settled: list[SettleResult] = Field(default_factory=list)
    deferred: list[str] = Field(default_factory=list)
    index_repaired: list[str] = Field(default_factory=list)


def repair_index_entry(records: MarketRecordStore, registry: RegistryIndex, condition_id: str) -> bool:
    """Copy a record's state into its index entry. True if the index changed."""
    with registry.lock:
        record = records.read(condition_id)
        entry = registry.get(condition_id)
        if entry is None:
            registry.append(RegistryEntry.from_record(record))
            return True
        if record.settlement.is_settled and not entry.is_settled:
            registry.mark_settled(condition_id, record.settlement.winner)
            log.info("registry_entry_repaired", condition_id=condition_id)
            return True
    return False


def repair_registry(records: MarketRecordStore, registry: RegistryIndex) -> RepairReport:
    """Bring the index back in line with the records on disk.

    Records with no index entry are appended (oldest first); entries whose
    record is settled are marked settled. Entries without a record cannot be
    rebuilt locally and are only reported.
    """
    report = RepairReport()
    with registry.lock:
        index = registry.load()
        orphans = [records.read(cid) for cid in records.list_ids() if cid not in index]
        for record in sorted(orphans, key=lambda r: r.created_at):
            registry.append(RegistryEntry.from_record(record))
            report.appended.append(record.condition_id)
            log.warning("registry_entry_restored", condition_id=record.condition_id)

        for entry in index.markets:
            if not records.exists(entry.condition_id):
                report.missing_records.append(entry.condition_id)
                log.error("market_record_missing", condition_id=entry.condition_id)
                continue
            if not entry.is_settled and repair_index_entry(records, registry, entry.condition_id):
                report.marked_settled.append(entry.condition_id)
    return report


class SettlementScanner:
    """Drives due markets through resolution exactly once."""

    def __init__(
        self,
        client: ChainClient,
        records: MarketRecordStore,
        registry: RegistryIndex,
        *,
        clock: Callable[[], float] = time.time,
        explorer_url: str = DEFAULT_EXPLORER_URL,
    ):
        self.client = client
        self.records = records
        self.registry = registry
        self.clock = clock
        self.explorer_url = explorer_url

    def _now(self, now: int | None) -> int:
        return int(self.clock()) if now is None else now

    def find_due(self, index: Registry | None = None, now: int | None = None) -> DueMarkets:
        if index is None:
            index = self.registry.load()
        return DueMarkets(index, self._now(now))

    def resolve_one(
        self,
        entry: RegistryEntry,
        resolver: Resolver | None,
        now: int | None = None,
    ) -> SettleResult | None:
        """Settle one due market. Returns None if the resolver defers.

        Raises NotDue if the trading window is still open, AlreadySettled if
        the record (or the index) already shows the market resolved.
        """
        now = self._now(now)
        condition_id = entry.condition_id
        if entry.end_time_unix > now:
            raise NotDue(condition_id, entry.end_time_unix, now)

        # Held across the chain call so no other agent settles this market concurrently.
        with self.registry.lock:
            record = self.records.read(condition_id)
            if record.settlement.is_settled:
                raise AlreadySettled(condition_id, record.settlement.winner)
            current = self.registry.get(condition_id)
            if current is not None and current.is_settled:
                raise AlreadySettled(condition_id, current.winner)

            tx_hash: str | None
            if self.client.is_resolved(condition_id):
                winner = winner_from_chain(self.client, condition_id)
                tx_hash = None
                log.warning("settlement_found_on_chain", condition_id=condition_id, winner=winner)
            else:
                decision = resolver(record) if resolver is not None else None
                if decision is None:
                    log.info("settlement_deferred", condition_id=condition_id, question=record.question)
                    return None
                winner = check_outcome(decision)
                tx_hash = submit_settlement(
                    self.client, condition_id, winner, explorer_url=self.explorer_url
                )

            settled_at = datetime.fromtimestamp(now, tz=timezone.utc)
            self.records.write(record.settled(winner, tx_hash, settled_at))
            if current is None:
                self.registry.append(RegistryEntry.from_record(self.records.read(condition_id)))
            else:
                self.registry.mark_settled(condition_id, winner)

        return SettleResult(hash=tx_hash, winner=winner, condition_id=condition_id)

    def repair_entry(self, condition_id: str) -> bool:
        return repair_index_entry(self.records, self.registry, condition_id)

    def repair(self) -> RepairReport:
        return repair_registry(self.records, self.registry)

    def scan(self, resolver: Resolver | None, now: int | None = None) -> ScanReport:
        """Repair the index, then resolve every due market in index order."""
        now = self._now(now)
        report = ScanReport(repair=self.repair())
        for entry in self.find_due(now=now):
            if entry.condition_id in report.repair.missing_records:
                continue
            try:
                result = self.resolve_one(entry, resolver, now)
            except AlreadySettled:
                if self.repair_entry(entry.condition_id):
                    report.index_repaired.append(entry.condition_id)
                continue
            if result is None:
                report.deferred.append(entry.condition_id)
            else:
                report.settled.append(result)
        log.info(
            "settlement_scan_complete",
            settled=len(report.settled),
            deferred=len(report.deferred),
            restored=len(report.repair.appended),
            repaired=len(report.repair.marked_settled) + len(report.index_repaired),
        )
        return report
