"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from poolprice.cli.common import config_errors
from poolprice.config import get_settings
from poolprice.config.settings import configure_logging

app = typer.Typer(
    name="poolprice",
    help="poolprice - Token prices derived from DEX pool reserves.",
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
    with config_errors():
        settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from poolprice.cli import api_cmd, cache_cmd, history, pairs, prices, tui_cmd  # noqa: E402

app.add_typer(prices.app, name="prices")
app.add_typer(pairs.app, name="pairs")
app.add_typer(cache_cmd.app, name="cache")
app.add_typer(history.app, name="history")
app.add_typer(api_cmd.app, name="api")
app.add_typer(tui_cmd.app, name="tui")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
