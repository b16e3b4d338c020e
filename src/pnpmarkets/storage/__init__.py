"""File-based market registry: per-market records and the master index."""

from pnpmarkets.storage.records import MarketRecordStore
from pnpmarkets.storage.registry import RegistryIndex

__all__ = ["MarketRecordStore", "RegistryIndex"]
