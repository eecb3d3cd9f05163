"""Cache subcommand: clear."""

from __future__ import annotations

import typer

from poolprice.cache import create_cache
from poolprice.cli.common import config_errors

app = typer.Typer(help="Price cache maintenance")


@app.command("clear")
def clear(ctx: typer.Context) -> None:
    """Delete the cached price table so the next request recomputes."""
    settings = ctx.obj["settings"]
    with config_errors():
        cache = create_cache(settings)
        cache.delete(settings.cache_key)
        typer.echo(f"Cleared {settings.cache_key} ({settings.cache_backend} cache)")
