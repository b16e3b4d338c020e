"""Markets subcommand: create, list, info, buy, sell."""

from __future__ import annotations

import typer

from pnpmarkets.chain.client import init_client
from pnpmarkets.cli.common import echo_json, exit_on_error, get_coordinator
from pnpmarkets.markets import CreateMarketParams, buy_tokens, get_market_info, sell_tokens
from pnpmarkets.markets.trade import BUY_AMOUNT_DECIMALS, SELL_AMOUNT_DECIMALS
from pnpmarkets.models import TradingRules
from pnpmarkets.storage import RegistryIndex

app = typer.Typer(help="Create, inspect and trade markets")


@app.command("create")
def create(
    ctx: typer.Context,
    question: str = typer.Option(..., "--question", "-q", help="Resolution question"),
    liquidity: str = typer.Option(..., "--liquidity", "-l", help="Initial liquidity (human-readable, e.g. 100)"),
    duration_hours: float | None = typer.Option(None, "--hours", help="Trading duration in hours"),
    collateral: str | None = typer.Option(None, "--collateral", "-c", help="USDC, WETH, cbETH or 0x address"),
    decimals: int | None = typer.Option(None, "--decimals", help="Collateral decimals (auto for known tokens)"),
    source: str = typer.Option("", "--source", help="Resolution source"),
    criteria: str = typer.Option("", "--criteria", help="Resolution criteria"),
    notes: str = typer.Option("", "--notes", help="Free-text notes"),
    resolver: str | None = typer.Option(
        None, "--resolver", help="Resolver for due markets, 'package.module:callable'"
    ),
) -> None:
    """Settle due markets, then create a market and register it locally."""
    settings = ctx.obj["settings"]
    params = CreateMarketParams(
        question=question,
        duration_hours=duration_hours if duration_hours is not None else settings.default_duration_hours,
        liquidity=liquidity,
        collateral=collateral or settings.default_collateral,
        decimals=decimals,
        trading_rules=TradingRules(resolution_source=source, resolution_criteria=criteria, notes=notes),
    )
    with exit_on_error():
        coordinator = get_coordinator(settings, resolver)
        record = coordinator.create_market(params)
    echo_json(record)


@app.command("list")
def list_markets(
    ctx: typer.Context,
    unsettled: bool = typer.Option(False, "--unsettled", help="Show only unsettled markets"),
) -> None:
    """List markets in the local registry."""
    settings = ctx.obj["settings"]
    with exit_on_error():
        index = RegistryIndex(settings.registry_dir, lock_timeout=settings.lock_timeout_sec).load()
    rows = [e for e in index.markets if not (unsettled and e.is_settled)]
    for e in rows:
        state = e.winner if e.is_settled else "open"
        typer.echo(f"  {e.condition_id[:20]}...  {e.end_time_unix}  {state:<4}  {e.question[:60]}")
    typer.echo(f"Total: {len(rows)} markets")


@app.command("info")
def info(
    ctx: typer.Context,
    condition_id: str = typer.Argument(..., help="Market condition ID"),
) -> None:
    """Print on-chain market info and prices as JSON."""
    with exit_on_error():
        client = init_client(ctx.obj["settings"])
        echo_json(get_market_info(client, condition_id))


@app.command("buy")
def buy(
    ctx: typer.Context,
    condition_id: str = typer.Argument(..., help="Market condition ID"),
    outcome: str = typer.Option(..., "--outcome", "-o", help="YES or NO"),
    amount: str = typer.Option(..., "--amount", "-a", help="Collateral amount (human-readable)"),
    decimals: int = typer.Option(BUY_AMOUNT_DECIMALS, "--decimals", help="Collateral decimals"),
    min_out: str = typer.Option("0", "--min-out", help="Minimum outcome tokens received"),
) -> None:
    """Buy outcome tokens with collateral."""
    settings = ctx.obj["settings"]
    with exit_on_error():
        client = init_client(settings)
        result = buy_tokens(
            client, condition_id, outcome.upper(), amount,
            decimals=decimals, min_out=min_out, explorer_url=settings.explorer_url,
        )
    echo_json(result)


@app.command("sell")
def sell(
    ctx: typer.Context,
    condition_id: str = typer.Argument(..., help="Market condition ID"),
    outcome: str = typer.Option(..., "--outcome", "-o", help="YES or NO"),
    amount: str = typer.Option(..., "--amount", "-a", help="Outcome token amount (human-readable)"),
    decimals: int = typer.Option(SELL_AMOUNT_DECIMALS, "--decimals", help="Outcome token decimals"),
    min_out: str = typer.Option("0", "--min-out", help="Minimum collateral received"),
) -> None:
    """Sell outcome tokens for collateral."""
    settings = ctx.obj["settings"]
    with exit_on_error():
        client = init_client(settings)
        result = sell_tokens(
            client, condition_id, outcome.upper(), amount,
            decimals=decimals, min_out=min_out, explorer_url=settings.explorer_url,
        )
    echo_json(result)
