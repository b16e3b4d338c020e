"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from pnpmarkets.config import get_settings
from pnpmarkets.config.settings import configure_logging

app = typer.Typer(
    name="pnp",
    help="pnpmarkets - create, trade, settle and redeem PNP prediction markets with a local registry.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from pnpmarkets.cli import markets, redeem, settle  # noqa: E402

app.add_typer(markets.app, name="markets")
app.add_typer(settle.app, name="settle")
app.command("redeem")(redeem.redeem)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
