from pnpmarkets.lifecycle.coordinator import MarketLifecycleCoordinator

__all__ = ["MarketLifecycleCoordinator"]
