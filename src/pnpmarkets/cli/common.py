"""Helpers shared by CLI commands: error exit, JSON output, client wiring."""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator

import typer
from pydantic import BaseModel

from pnpmarkets.chain.client import init_client
from pnpmarkets.config.settings import Settings
from pnpmarkets.errors import PnpError
from pnpmarkets.lifecycle import MarketLifecycleCoordinator
from pnpmarkets.loader import load_callable
from pnpmarkets.settlement import Resolver


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print 'Failed: <message>' to stderr and exit 1 on any pnpmarkets error."""
    try:
        yield
    except PnpError as e:
        typer.echo(f"Failed: {e}", err=True)
        raise typer.Exit(1) from e


def echo_json(obj: BaseModel | list[Any] | dict[str, Any]) -> None:
    if isinstance(obj, BaseModel):
        data = obj.model_dump(mode="json", by_alias=True)
    elif isinstance(obj, list):
        data = [o.model_dump(mode="json", by_alias=True) if isinstance(o, BaseModel) else o for o in obj]
    else:
        data = obj
    typer.echo(json.dumps(data, indent=2))


def get_coordinator(settings: Settings, resolver_ref: str | None = None) -> MarketLifecycleCoordinator:
    resolver: Resolver | None = load_callable(resolver_ref) if resolver_ref else None
    client = init_client(settings)
    return MarketLifecycleCoordinator.from_settings(settings, client, resolver=resolver)
