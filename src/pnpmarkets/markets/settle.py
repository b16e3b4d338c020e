"""Settlement status and direct settlement against the chain."""

from __future__ import annotations

import time

import structlog

from pnpmarkets.chain.base import ChainClient
from pnpmarkets.chain.client import winner_from_chain
from pnpmarkets.chain.tokens import tx_url
from pnpmarkets.errors import AlreadySettledOnChain, NotYetSettleable
from pnpmarkets.markets.create import DEFAULT_EXPLORER_URL
from pnpmarkets.markets.trade import check_outcome
from pnpmarkets.models import SettlementStatus, SettleResult
from pnpmarkets.storage.records import check_condition_id

log = structlog.get_logger(__name__)


def get_settlement_status(
    client: ChainClient, condition_id: str, *, now: int | None = None
) -> SettlementStatus:
    """Check whether a market is settled, and if not, whether it can be settled now."""
    check_condition_id(condition_id)
    info = client.get_market_info(condition_id)
    is_settled = client.is_resolved(condition_id)
    now = int(time.time()) if now is None else now

    status = SettlementStatus(
        question=info.question,
        end_time=info.end_time,
        is_settled=is_settled,
        can_settle=now >= info.end_time and not is_settled,
    )
    if is_settled:
        status.winner = winner_from_chain(client, condition_id)
    elif now < info.end_time:
        remaining = info.end_time - now
        status.time_left_hours = remaining // 3600
        status.time_left_minutes = (remaining % 3600) // 60
    return status


def submit_settlement(
    client: ChainClient,
    condition_id: str,
    outcome: str,
    *,
    explorer_url: str = DEFAULT_EXPLORER_URL,
) -> str:
    """Send the settlement transaction for outcome. Returns the tx hash. No preflight."""
    outcome = check_outcome(outcome)
    winning_token_id = client.get_token_id(condition_id, outcome)
    receipt = client.settle_market(condition_id, winning_token_id)
    log.info(
        "market_settled",
        condition_id=condition_id,
        winner=outcome,
        tx_hash=receipt.tx_hash,
        explorer=tx_url(explorer_url, receipt.tx_hash),
    )
    return receipt.tx_hash


def settle_market(
    client: ChainClient,
    condition_id: str,
    outcome: str,
    *,
    now: int | None = None,
    explorer_url: str = DEFAULT_EXPLORER_URL,
) -> SettleResult:
    """Settle a market with the winning outcome.

    Only the market creator can settle, and only after the trading period
    has ended. This bypasses the local registry; use the lifecycle
    coordinator for markets this agent created.
    """
    check_condition_id(condition_id)
    outcome = check_outcome(outcome)
    status = get_settlement_status(client, condition_id, now=now)
    if status.is_settled:
        raise AlreadySettledOnChain(condition_id, status.winner)
    if not status.can_settle:
        raise NotYetSettleable(
            f"Cannot settle yet. Trading ends in {status.time_left_hours}h {status.time_left_minutes}m"
        )
    log.info("settling_market", question=status.question, outcome=outcome, wallet=client.signer_address)
    tx_hash = submit_settlement(client, condition_id, outcome, explorer_url=explorer_url)
    return SettleResult(hash=tx_hash, winner=outcome, condition_id=condition_id)
