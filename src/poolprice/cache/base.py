"""Cache protocol the price service writes through. Values are serialized strings."""

from __future__ import annotations

from typing import Protocol


class PriceCache(Protocol):
    """Key-value store with per-entry TTL."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str, ttl_sec: int) -> None: ...
    def delete(self, key: str) -> None: ...


class NullCache:
    """Cache that stores nothing (cache.backend = "none")."""

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str, ttl_sec: int) -> None:
        return None

    def delete(self, key: str) -> None:
        return None
