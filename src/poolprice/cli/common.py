"""Helpers shared by subcommands: config errors become a clean exit."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from poolprice.errors import ConfigError
from poolprice.service import PriceService


@contextmanager
def config_errors() -> Iterator[None]:
    """Turn ConfigError into 'Config error: ...' on stderr and exit code 2."""
    try:
        yield
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(2) from e


def build_service(ctx: typer.Context) -> PriceService:
    with config_errors():
        return PriceService.from_settings(ctx.obj["settings"])
