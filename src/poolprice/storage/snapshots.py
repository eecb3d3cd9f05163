"""Persist computed price tables as history rows and query them back."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from poolprice.models import PriceTable

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def _captured_at_ms(table: PriceTable) -> int:
    return int(datetime.fromisoformat(table.updated_at).timestamp() * 1000)


def append_price_table(conn: DuckDBPyConnection, table: PriceTable) -> int:
    """Append one price_snapshots row per token. Returns rows written."""
    captured_at = _captured_at_ms(table)
    rows = [
        [
            captured_at,
            table.network,
            p.symbol,
            p.price_usd,
            p.price_native,
            p.depth,
            p.derived_from,
            p.pair_id,
        ]
        for p in table.prices.values()
    ]
    if rows:
        conn.executemany(
            """
            INSERT INTO price_snapshots (captured_at, network, symbol, price_usd, price_native, depth, derived_from, pair_id)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
    return len(rows)


def symbol_history(conn: DuckDBPyConnection, symbol: str, limit: int = 100) -> list[dict[str, Any]]:
    """Most recent snapshots for one symbol, newest first."""
    rows = conn.execute(
        """
        SELECT captured_at, price_usd, price_native, depth, derived_from
        FROM price_snapshots WHERE symbol = ?
        ORDER BY captured_at DESC LIMIT ?
        """,
        [symbol, limit],
    ).fetchall()
    return [
        {
            "captured_at": r[0],
            "price_usd": r[1],
            "price_native": r[2],
            "depth": r[3],
            "derived_from": r[4],
        }
        for r in rows
    ]


def snapshot_stats(conn: DuckDBPyConnection) -> dict[str, Any]:
    """Row count, time range and per-symbol counts."""
    total, min_ts, max_ts = conn.execute(
        "SELECT COUNT(*), MIN(captured_at), MAX(captured_at) FROM price_snapshots"
    ).fetchone()
    by_symbol = conn.execute(
        """
        SELECT symbol, COUNT(*) AS count FROM price_snapshots
        GROUP BY symbol ORDER BY count DESC, symbol LIMIT 50
        """
    ).fetchall()
    return {
        "total_rows": total,
        "min_captured_at": min_ts,
        "max_captured_at": max_ts,
        "by_symbol": [{"symbol": s, "count": c} for s, c in by_symbol],
    }
