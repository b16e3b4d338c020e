"""Redeem command."""

from __future__ import annotations

import typer

from pnpmarkets.chain.client import init_client
from pnpmarkets.cli.common import echo_json, exit_on_error
from pnpmarkets.markets import redeem_winnings


def redeem(
    ctx: typer.Context,
    condition_id: str = typer.Argument(..., help="Market condition ID"),
) -> None:
    """Redeem winning tokens of a settled market; prints the result as JSON."""
    settings = ctx.obj["settings"]
    with exit_on_error():
        client = init_client(settings)
        echo_json(redeem_winnings(client, condition_id, explorer_url=settings.explorer_url))
