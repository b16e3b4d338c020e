"""Chain client construction and error translation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Callable, TypeVar

import structlog

from pnpmarkets.chain.base import ChainClient, CreatedMarket, MarketPrices, OnChainMarket, TxReceipt
from pnpmarkets.config.settings import Settings
from pnpmarkets.errors import ConfigurationError, ExternalCallFailure, PnpError
from pnpmarkets.loader import load_callable
from pnpmarkets.models import Outcome

log = structlog.get_logger(__name__)

T = TypeVar("T")


class GuardedChainClient:
    """Wraps a ChainClient so SDK failures surface as ExternalCallFailure.

    Errors that are already PnpError pass through unchanged.
    """

    def __init__(self, inner: ChainClient):
        self.inner = inner

    def _call(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return fn(*args)
        except PnpError:
            raise
        except Exception as e:
            log.warning("chain_call_failed", operation=operation, error=str(e))
            raise ExternalCallFailure(operation, e) from e

    @property
    def signer_address(self) -> str | None:
        return getattr(self.inner, "signer_address", None)

    def create_market(
        self, question: str, end_time: int, initial_liquidity: int, collateral_token: str
    ) -> CreatedMarket:
        return self._call(
            "create_market", self.inner.create_market, question, end_time, initial_liquidity, collateral_token
        )

    def get_market_info(self, condition_id: str) -> OnChainMarket:
        return self._call("get_market_info", self.inner.get_market_info, condition_id)

    def get_market_prices(self, condition_id: str) -> MarketPrices:
        return self._call("get_market_prices", self.inner.get_market_prices, condition_id)

    def buy(self, condition_id: str, amount: int, outcome: Outcome, min_out: int) -> TxReceipt:
        return self._call("buy", self.inner.buy, condition_id, amount, outcome, min_out)

    def sell(self, condition_id: str, amount: int, outcome: Outcome, min_out: int) -> TxReceipt:
        return self._call("sell", self.inner.sell, condition_id, amount, outcome, min_out)

    def is_resolved(self, condition_id: str) -> bool:
        return self._call("is_resolved", self.inner.is_resolved, condition_id)

    def get_winning_token(self, condition_id: str) -> str:
        return self._call("get_winning_token", self.inner.get_winning_token, condition_id)

    def get_token_id(self, condition_id: str, outcome: Outcome) -> str:
        return self._call("get_token_id", self.inner.get_token_id, condition_id, outcome)

    def settle_market(self, condition_id: str, winning_token_id: str) -> TxReceipt:
        return self._call("settle_market", self.inner.settle_market, condition_id, winning_token_id)

    def redeem(self, condition_id: str) -> TxReceipt:
        return self._call("redeem", self.inner.redeem, condition_id)


def init_client(settings: Settings, env: Mapping[str, str] | None = None) -> GuardedChainClient:
    """Build the chain client from environment and config.

    Requires PRIVATE_KEY in env. RPC_URL in env overrides chain.rpc_url.
    The SDK binding is the callable named by chain.client_factory.
    """
    env = os.environ if env is None else env
    private_key = env.get("PRIVATE_KEY")
    if not private_key:
        raise ConfigurationError("PRIVATE_KEY environment variable is required")
    if not settings.client_factory:
        raise ConfigurationError("chain.client_factory is not configured")
    rpc_url = env.get("RPC_URL") or settings.rpc_url
    factory = load_callable(settings.client_factory)
    try:
        inner = factory(rpc_url=rpc_url, private_key=private_key)
    except Exception as e:
        raise ExternalCallFailure("init_client", e) from e
    log.debug("chain_client_ready", rpc_url=rpc_url, factory=settings.client_factory)
    return GuardedChainClient(inner)


def winner_from_chain(client: ChainClient, condition_id: str) -> Outcome:
    """Winning outcome of a resolved market: compare winning token with the YES token id."""
    winning_token = client.get_winning_token(condition_id)
    yes_token_id = client.get_token_id(condition_id, "YES")
    return "YES" if str(winning_token) == str(yes_token_id) else "NO"
