"""pnpmarkets - local registry and settlement tracking for PNP prediction markets."""

__version__ = "0.1.0"
