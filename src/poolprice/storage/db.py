"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS snapshot_seq START 1;

-- Serialized price tables keyed by cache key, with absolute expiry (ms epoch)
CREATE TABLE IF NOT EXISTS price_cache (
    key             VARCHAR PRIMARY KEY,
    value           VARCHAR NOT NULL,
    expires_at      BIGINT NOT NULL
);

-- Price history: one row per token per fresh computation (append-only)
CREATE TABLE IF NOT EXISTS price_snapshots (
    id              BIGINT PRIMARY KEY DEFAULT nextval('snapshot_seq'),
    captured_at     BIGINT NOT NULL,
    network         VARCHAR NOT NULL,
    symbol          VARCHAR NOT NULL,
    price_usd       DOUBLE NOT NULL,
    price_native    DOUBLE NOT NULL,
    depth           INTEGER NOT NULL,
    derived_from    VARCHAR,
    pair_id         BIGINT
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
