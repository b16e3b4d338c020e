"""Due-market scan and settlement of markets in the local registry."""

from pnpmarkets.settlement.scanner import (
    DueMarkets,
    RepairReport,
    Resolver,
    ScanReport,
    SettlementScanner,
    repair_index_entry,
    repair_registry,
)

__all__ = [
    "DueMarkets",
    "RepairReport",
    "Resolver",
    "ScanReport",
    "SettlementScanner",
    "repair_index_entry",
    "repair_registry",
]
