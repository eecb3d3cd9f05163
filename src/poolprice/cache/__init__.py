"""Price cache backends."""

from poolprice.cache.base import NullCache, PriceCache
from poolprice.cache.factory import create_cache
from poolprice.cache.memory import MemoryCache

__all__ = ["MemoryCache", "NullCache", "PriceCache", "create_cache"]
