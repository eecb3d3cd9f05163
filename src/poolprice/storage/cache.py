"""DuckDB-backed price cache (survives process restarts, shared by CLI and API)."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from poolprice.storage.db import get_connection, init_schema


def _now_ms() -> int:
    return int(time.time() * 1000)


class DuckDBCache:
    """PriceCache over the price_cache table. Expired rows are ignored and purged on read."""

    def __init__(self, db_path: str | Path, clock_ms: Callable[[], int] = _now_ms) -> None:
        self.db_path = Path(db_path)
        self._clock_ms = clock_ms
        conn = get_connection(self.db_path)
        try:
            init_schema(conn)
        finally:
            conn.close()

    def get(self, key: str) -> str | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT value, expires_at FROM price_cache WHERE key = ?", [key]
            ).fetchone()
            if row is None:
                return None
            if row[1] <= self._clock_ms():
                conn.execute("DELETE FROM price_cache WHERE key = ?", [key])
                return None
            return row[0]
        finally:
            conn.close()

    def set(self, key: str, value: str, ttl_sec: int) -> None:
        if ttl_sec <= 0:
            return
        expires_at = self._clock_ms() + ttl_sec * 1000
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                """INSERT INTO price_cache (key, value, expires_at) VALUES (?, ?, ?)
                   ON CONFLICT (key) DO UPDATE SET value = excluded.value, expires_at = excluded.expires_at""",
                [key, value, expires_at],
            )
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute("DELETE FROM price_cache WHERE key = ?", [key])
        finally:
            conn.close()
