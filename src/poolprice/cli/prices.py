"""Prices subcommand: show, get, compute."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from poolprice.cache import NullCache
from poolprice.cli.common import build_service, config_errors
from poolprice.errors import FixtureError
from poolprice.ingestion.fixture import FileSource
from poolprice.models import PriceTable, TokenPrice
from poolprice.service import PriceService, service_options

app = typer.Typer(help="Compute and display token prices")


def _fmt_usd(value: float) -> str:
    return f"${value:,.8f}" if value < 1 else f"${value:,.4f}"


def _fmt_pct(value: float | None) -> str:
    return f"{value:+.2f}%" if value is not None else "-"


def format_row(p: TokenPrice) -> str:
    via = p.derived_from or "oracle"
    return (
        f"  {p.symbol:<10} {_fmt_usd(p.price_usd):>18} {p.price_native:>16.8f}  "
        f"d{p.depth}  {via:<10} 24h {_fmt_pct(p.price_change_24h):>9}  7d {_fmt_pct(p.price_change_7d):>9}"
    )


def echo_table(table: PriceTable) -> None:
    typer.echo(f"Anchor: {table.anchor_symbol}  network: {table.network}  source: {table.source}  at {table.updated_at}")
    for p in sorted(table.prices.values(), key=lambda p: (p.depth, p.symbol)):
        typer.echo(format_row(p))
    typer.echo(f"Total: {len(table.prices)} tokens priced")
    diag = table.diagnostics
    if diag is not None:
        typer.echo(
            f"Pairs: {diag.pairs_found}  passes: native={diag.iterations_native} stable={diag.iterations_stable}"
        )
        for summary in diag.pairs:
            typer.echo(f"  #{summary.pair_id:<4} {summary.pair:<20} {summary.reserve_a:>18.4f} / {summary.reserve_b:.4f}")
        if diag.unpriced_tokens:
            typer.echo(f"Unpriced (no path to an anchor): {', '.join(diag.unpriced_tokens)}")


@app.command("show")
def show(
    ctx: typer.Context,
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and recompute"),
    debug: bool = typer.Option(False, "--debug", help="Include pairs and propagation diagnostics"),
    as_json: bool = typer.Option(False, "--json", help="Print the table as JSON"),
) -> None:
    """Fetch pairs, anchor quote and swaps, then print the price table."""
    service = build_service(ctx)

    async def _run() -> PriceTable:
        try:
            return await service.get_prices(force_refresh=refresh, include_debug=debug)
        finally:
            await service.aclose()

    table = asyncio.run(_run())
    if as_json:
        typer.echo(table.model_dump_json(indent=2))
    else:
        echo_table(table)


@app.command("get")
def get(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Token symbol or asset identifier"),
) -> None:
    """Print the price of one token. Exit code 1 when it cannot be priced."""
    service = build_service(ctx)

    async def _run() -> TokenPrice | None:
        try:
            return await service.get_price(symbol)
        finally:
            await service.aclose()

    entry = asyncio.run(_run())
    if entry is None:
        typer.echo(f"{symbol}: price unavailable")
        raise typer.Exit(1)
    typer.echo(format_row(entry))


@app.command("compute")
def compute(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="JSON fixture with anchor, pairs and trades"),
    as_json: bool = typer.Option(False, "--json", help="Print the table as JSON"),
) -> None:
    """Compute prices offline from a fixture file (no network, no cache)."""
    settings = ctx.obj["settings"]
    try:
        source = FileSource.from_path(input_path, settings.anchor_symbol, settings.symbol_separator)
    except FixtureError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    with config_errors():
        options = service_options(settings)
    options["max_pair_slots"] = max(options["max_pair_slots"], source.max_pair_id)
    options["snapshot_db_path"] = None
    service = PriceService(source, source, source, NullCache(), **options)
    table = asyncio.run(service.compute())
    if as_json:
        typer.echo(table.model_dump_json(indent=2))
    else:
        echo_table(table)
