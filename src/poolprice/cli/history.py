"""History subcommand: stats, show, export."""

from __future__ import annotations

from datetime import datetime, timezone

import typer

from poolprice.storage.db import get_connection, init_schema
from poolprice.storage.export import export_snapshots_to_parquet
from poolprice.storage.snapshots import snapshot_stats, symbol_history

app = typer.Typer(help="Recorded price history (storage.record_snapshots = true)")


def _fmt_ms(ms: int | None) -> str:
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat(timespec="seconds")


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show snapshot counts and time range."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        s = snapshot_stats(conn)
        typer.echo(f"Total rows: {s['total_rows']}")
        typer.echo(f"First: {_fmt_ms(s.get('min_captured_at'))}")
        typer.echo(f"Last:  {_fmt_ms(s.get('max_captured_at'))}")
        if s.get("by_symbol"):
            typer.echo("By symbol:")
            for row in s["by_symbol"]:
                typer.echo(f"  {row['symbol']:<10} {row['count']}")
    finally:
        conn.close()


@app.command("show")
def show(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Token symbol"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max rows"),
) -> None:
    """Recent recorded prices for one token, newest first."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        rows = symbol_history(conn, symbol, limit=limit)
    finally:
        conn.close()
    for r in rows:
        typer.echo(f"  {_fmt_ms(r['captured_at'])}  ${r['price_usd']:.8f}  {r['price_native']:.8f}  d{r['depth']}")
    typer.echo(f"Total: {len(rows)} rows")


@app.command("export")
def export(
    ctx: typer.Context,
    symbol: str | None = typer.Option(None, "--symbol", "-s", help="Filter by symbol"),
    output: str = typer.Option("prices.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export recorded prices to Parquet."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        count = export_snapshots_to_parquet(conn, output, symbol=symbol)
        typer.echo(f"Exported {count} rows to {output}")
    finally:
        conn.close()
