"""TUI dashboard command."""

import typer

from poolprice.cli.common import config_errors
from poolprice.tui.app import run_tui

app = typer.Typer(help="Launch TUI price table")


@app.callback(invoke_without_command=True)
def tui(
    ctx: typer.Context,
    interval: float = typer.Option(30.0, "--interval", help="Refresh interval in seconds"),
) -> None:
    """Launch the Textual TUI (live price table)."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    with config_errors():
        run_tui(settings, interval=interval)
