"""Pick a cache backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from poolprice.cache.base import NullCache, PriceCache
from poolprice.cache.memory import MemoryCache

if TYPE_CHECKING:
    from poolprice.config import Settings


def create_cache(settings: Settings) -> PriceCache:
    """memory -> MemoryCache, duckdb -> DuckDBCache at storage.db_path, none -> NullCache."""
    backend = settings.cache_backend
    if backend == "duckdb":
        from poolprice.storage.cache import DuckDBCache

        return DuckDBCache(settings.db_path)
    if backend == "none":
        return NullCache()
    return MemoryCache()
