"""Price history storage tests: snapshots, stats, Parquet export."""

import tempfile
from pathlib import Path

from poolprice.models import PriceTable, TokenPrice
from poolprice.storage.db import get_connection, init_schema
from poolprice.storage.export import export_snapshots_to_parquet
from poolprice.storage.snapshots import append_price_table, snapshot_stats, symbol_history


def _table(updated_at: str, klv: float, dgko: float) -> PriceTable:
    return PriceTable(
        anchor_symbol="KLV",
        updated_at=updated_at,
        prices={
            "KLV": TokenPrice(symbol="KLV", price_usd=klv, price_native=1.0, depth=0),
            "DGKO": TokenPrice(
                symbol="DGKO", price_usd=dgko, price_native=dgko / klv, depth=1, derived_from="KLV", pair_id=1
            ),
        },
    )


def test_snapshots_history_and_stats():
    with tempfile.TemporaryDirectory() as d:
        conn = get_connection(Path(d) / "test.duckdb")
        init_schema(conn)
        init_schema(conn)  # idempotent
        assert append_price_table(conn, _table("2024-01-01T00:00:00+00:00", 0.5, 5.0)) == 2
        assert append_price_table(conn, _table("2024-01-01T00:05:00+00:00", 0.5, 6.0)) == 2

        rows = symbol_history(conn, "DGKO")
        assert [r["price_usd"] for r in rows] == [6.0, 5.0]
        assert rows[0]["captured_at"] == 1704067500000
        assert rows[0]["derived_from"] == "KLV"
        assert symbol_history(conn, "DGKO", limit=1)[0]["price_usd"] == 6.0
        assert symbol_history(conn, "NOPE") == []

        stats = snapshot_stats(conn)
        assert stats["total_rows"] == 4
        assert stats["min_captured_at"] == 1704067200000
        assert stats["max_captured_at"] == 1704067500000
        assert {"symbol": "KLV", "count": 2} in stats["by_symbol"]
        conn.close()


def test_empty_table_writes_nothing():
    with tempfile.TemporaryDirectory() as d:
        conn = get_connection(Path(d) / "test.duckdb")
        init_schema(conn)
        table = PriceTable(anchor_symbol="KLV", updated_at="2024-01-01T00:00:00+00:00")
        assert append_price_table(conn, table) == 0
        assert snapshot_stats(conn)["total_rows"] == 0
        conn.close()


def test_export_parquet():
    with tempfile.TemporaryDirectory() as d:
        conn = get_connection(Path(d) / "test.duckdb")
        init_schema(conn)
        append_price_table(conn, _table("2024-01-01T00:00:00+00:00", 0.5, 5.0))
        out = Path(d) / "out" / "prices.parquet"
        assert export_snapshots_to_parquet(conn, out, symbol="DGKO") == 1
        assert out.exists()
        count = conn.execute(f"SELECT COUNT(*) FROM read_parquet('{out}')").fetchone()[0]
        assert count == 1
        conn.close()
