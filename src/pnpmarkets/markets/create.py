"""Create a prediction market."""

from __future__ import annotations

import math
import time
from datetime import datetime, timezone

import structlog
from pydantic import BaseModel, Field

from pnpmarkets.chain.base import ChainClient
from pnpmarkets.chain.tokens import parse_units, require_positive, resolve_collateral, tx_url
from pnpmarkets.errors import ValidationError
from pnpmarkets.models import Collateral, CreateMarketResult, TradingRules

log = structlog.get_logger(__name__)

DEFAULT_EXPLORER_URL = "https://basescan.org"


class CreateMarketParams(BaseModel):
    """Inputs for a new market. Validated by ``validate_params``, not by pydantic constraints."""

    question: str
    duration_hours: float
    liquidity: str
    collateral: str = "USDC"
    decimals: int | None = None
    trading_rules: TradingRules = Field(default_factory=TradingRules)


def validate_params(params: CreateMarketParams) -> Collateral:
    """Check params and resolve the collateral token. Raises ValidationError."""
    if not params.question or not params.question.strip():
        raise ValidationError("question is required")
    if not math.isfinite(params.duration_hours) or params.duration_hours <= 0:
        raise ValidationError("durationHours must be positive")
    require_positive(params.liquidity, "liquidity")
    return resolve_collateral(params.collateral, params.decimals)


def create_market(
    client: ChainClient,
    params: CreateMarketParams,
    *,
    now: int | None = None,
    explorer_url: str = DEFAULT_EXPLORER_URL,
) -> CreateMarketResult:
    """Validate params and create the market on chain.

    end_time is now + duration_hours; liquidity is converted to the
    collateral's base units.
    """
    collateral = validate_params(params)
    now = int(time.time()) if now is None else now
    end_time = now + int(params.duration_hours * 3600)
    liquidity_units = parse_units(params.liquidity, collateral.decimals, "liquidity")

    log.info(
        "creating_market",
        question=params.question,
        duration_hours=params.duration_hours,
        end_time=datetime.fromtimestamp(end_time, tz=timezone.utc).isoformat(),
        liquidity=params.liquidity,
        collateral=collateral.address,
        wallet=client.signer_address,
    )
    created = client.create_market(
        params.question,
        end_time,
        liquidity_units,
        collateral.address,
    )
    log.info(
        "market_created",
        condition_id=created.condition_id,
        tx_hash=created.tx_hash,
        explorer=tx_url(explorer_url, created.tx_hash),
    )
    return CreateMarketResult(condition_id=created.condition_id, hash=created.tx_hash, end_time=end_time)
