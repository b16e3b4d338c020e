"""Redeem winning tokens for collateral after settlement."""

from __future__ import annotations

import structlog

from pnpmarkets.chain.base import ChainClient
from pnpmarkets.chain.client import winner_from_chain
from pnpmarkets.chain.tokens import tx_url
from pnpmarkets.errors import NotYetSettleable
from pnpmarkets.markets.create import DEFAULT_EXPLORER_URL
from pnpmarkets.models import RedeemResult
from pnpmarkets.storage.records import check_condition_id

log = structlog.get_logger(__name__)


def redeem_winnings(
    client: ChainClient, condition_id: str, *, explorer_url: str = DEFAULT_EXPLORER_URL
) -> RedeemResult:
    """Redeem winning outcome tokens. The market must be settled on chain."""
    check_condition_id(condition_id)
    info = client.get_market_info(condition_id)
    if not client.is_resolved(condition_id):
        raise NotYetSettleable(
            f'Market is not yet settled. Question: "{info.question}". Cannot redeem.'
        )
    winner = winner_from_chain(client, condition_id)
    log.info(
        "redeeming_winnings",
        question=info.question,
        winner=winner,
        collateral=info.collateral,
        wallet=client.signer_address,
    )
    receipt = client.redeem(condition_id)
    log.info("redeemed", tx_hash=receipt.tx_hash, explorer=tx_url(explorer_url, receipt.tx_hash))
    return RedeemResult(hash=receipt.tx_hash, condition_id=condition_id, winner=winner, question=info.question)
