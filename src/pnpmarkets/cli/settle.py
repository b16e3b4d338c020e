"""Settle subcommand: status, run, scan, repair."""

from __future__ import annotations

import typer

from pnpmarkets.chain.client import init_client
from pnpmarkets.cli.common import echo_json, exit_on_error, get_coordinator
from pnpmarkets.markets import get_settlement_status
from pnpmarkets.settlement import repair_registry
from pnpmarkets.storage import MarketRecordStore, RegistryIndex

app = typer.Typer(help="Settlement status, settlement and registry repair")


@app.command("status")
def status(
    ctx: typer.Context,
    condition_id: str = typer.Argument(..., help="Market condition ID"),
) -> None:
    """Print on-chain settlement status as JSON."""
    with exit_on_error():
        client = init_client(ctx.obj["settings"])
        echo_json(get_settlement_status(client, condition_id))


@app.command("run")
def run_settle(
    ctx: typer.Context,
    condition_id: str = typer.Argument(..., help="Market condition ID"),
    outcome: str = typer.Option(..., "--outcome", "-o", help="Winning outcome: YES or NO"),
) -> None:
    """Settle a registered market with the given winner and update the registry."""
    with exit_on_error():
        coordinator = get_coordinator(ctx.obj["settings"])
        echo_json(coordinator.settle(condition_id, outcome.upper()))


@app.command("scan")
def scan(
    ctx: typer.Context,
    resolver: str | None = typer.Option(
        None, "--resolver", help="Resolver 'package.module:callable'; without one, due markets are only listed"
    ),
) -> None:
    """Repair the registry and settle every due market."""
    with exit_on_error():
        coordinator = get_coordinator(ctx.obj["settings"], resolver)
        report = coordinator.startup()
    echo_json(report)


@app.command("repair")
def repair(ctx: typer.Context) -> None:
    """Rebuild registry entries from market records (no chain calls)."""
    settings = ctx.obj["settings"]
    with exit_on_error():
        report = repair_registry(
            MarketRecordStore(settings.registry_dir),
            RegistryIndex(settings.registry_dir, lock_timeout=settings.lock_timeout_sec),
        )
    echo_json(report)
