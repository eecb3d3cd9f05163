"""Pairs subcommand: list."""

from __future__ import annotations

import asyncio

import typer

from poolprice.cli.common import build_service
from poolprice.models import Pair

app = typer.Typer(help="Inspect the pool graph")


@app.command("list")
def list_pairs(ctx: typer.Context) -> None:
    """Read every pair slot and list the usable edges (active, positive reserves)."""
    service = build_service(ctx)

    async def _run() -> list[Pair]:
        try:
            return await service.get_pairs()
        finally:
            await service.aclose()

    edges = asyncio.run(_run())
    for p in edges:
        typer.echo(f"  #{p.pair_id:<4} {p.label:<20} {p.reserve_a:>18.4f} / {p.reserve_b:.4f}")
    typer.echo(f"Total: {len(edges)} usable pairs of {service.max_pair_slots} slots")
