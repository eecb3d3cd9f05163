"""Price cache backend tests."""

import tempfile
from pathlib import Path

from poolprice.cache import MemoryCache, NullCache, create_cache
from poolprice.config import Settings
from poolprice.storage.cache import DuckDBCache


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def test_memory_cache_ttl():
    clock = FakeClock(100.0)
    cache = MemoryCache(clock=clock)
    cache.set("k", "v", 10)
    assert cache.get("k") == "v"
    clock.now = 109.9
    assert cache.get("k") == "v"
    clock.now = 110.0
    assert cache.get("k") is None
    assert len(cache) == 0


def test_memory_cache_zero_ttl_and_delete():
    cache = MemoryCache()
    cache.set("k", "v", 0)
    assert cache.get("k") is None
    cache.set("k", "v", 60)
    cache.delete("k")
    cache.delete("missing")
    assert cache.get("k") is None


def test_null_cache_stores_nothing():
    cache = NullCache()
    cache.set("k", "v", 60)
    assert cache.get("k") is None


def test_duckdb_cache_ttl_and_upsert():
    with tempfile.TemporaryDirectory() as d:
        clock = FakeClock(1_000_000)
        cache = DuckDBCache(Path(d) / "cache.duckdb", clock_ms=lambda: int(clock()))
        cache.set("k", "v1", 5)
        cache.set("k", "v2", 5)
        assert cache.get("k") == "v2"
        clock.now = 1_004_999
        assert cache.get("k") == "v2"
        clock.now = 1_005_000
        assert cache.get("k") is None
        cache.set("k", "v3", 5)
        cache.delete("k")
        assert cache.get("k") is None


def test_duckdb_cache_survives_reopen():
    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "cache.duckdb"
        DuckDBCache(path).set("k", "v", 300)
        assert DuckDBCache(path).get("k") == "v"


def test_create_cache_by_backend():
    with tempfile.TemporaryDirectory() as d:
        db_path = str(Path(d) / "p.duckdb")
        assert isinstance(create_cache(Settings(cache={"backend": "memory"})), MemoryCache)
        assert isinstance(create_cache(Settings(cache={"backend": "none"})), NullCache)
        duck = create_cache(Settings(cache={"backend": "duckdb"}, storage={"db_path": db_path}))
        assert isinstance(duck, DuckDBCache)
