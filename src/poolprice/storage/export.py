"""Export price history to Parquet."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def export_snapshots_to_parquet(
    conn: DuckDBPyConnection,
    output_path: str | Path,
    symbol: str | None = None,
) -> int:
    """Export price_snapshots to a Parquet file. Optional filter by symbol. Returns row count."""
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    where = f" WHERE symbol = {_quote(symbol)}" if symbol else ""
    conn.execute(
        f"COPY (SELECT * FROM price_snapshots{where} ORDER BY id) TO {_quote(str(path))} (FORMAT PARQUET)"
    )
    return conn.execute(f"SELECT COUNT(*) FROM price_snapshots{where}").fetchone()[0]
