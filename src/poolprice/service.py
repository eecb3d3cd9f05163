"""Price service - fetch collaborators concurrently, compute the price table, cache it."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import duckdb
import httpx
import pydantic
import structlog

from poolprice.cache import PriceCache, create_cache
from poolprice.engine.assembler import compute_price_table
from poolprice.graph.builder import build_pairs, normalize_symbol
from poolprice.ingestion.base import AnchorPriceSource, PairSource, TradeHistorySource, fetch_pairs
from poolprice.ingestion.coingecko import CoinGeckoAnchorSource
from poolprice.ingestion.klever.client import KleverPairSource
from poolprice.ingestion.swap_history import SwapHistorySource
from poolprice.models import AnchorQuote, Pair, PriceTable, RawPairRecord, TokenPrice, TradeRecord
from poolprice.storage.db import get_connection, init_schema
from poolprice.storage.snapshots import append_price_table

if TYPE_CHECKING:
    from poolprice.config import Settings

log = structlog.get_logger(__name__)


class PriceService:
    """One get_prices() call = cache lookup, or fetch + propagate + assemble + cache write."""

    def __init__(
        self,
        pair_source: PairSource,
        anchor_source: AnchorPriceSource,
        trade_source: TradeHistorySource,
        cache: PriceCache,
        *,
        anchor_symbol: str = "KLV",
        stablecoins: dict[str, Any] | None = None,
        max_iterations: int = 10,
        max_pair_slots: int = 50,
        separator: str = "-",
        network: str = "mainnet",
        cache_key: str = "poolprice:prices",
        cache_ttl_sec: int = 300,
        snapshot_db_path: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.pair_source = pair_source
        self.anchor_source = anchor_source
        self.trade_source = trade_source
        self.cache = cache
        self.anchor_symbol = anchor_symbol
        self.stablecoins = stablecoins or {}
        self.max_iterations = max_iterations
        self.max_pair_slots = max_pair_slots
        self.separator = separator
        self.network = network
        self.cache_key = cache_key
        self.cache_ttl_sec = cache_ttl_sec
        self.snapshot_db_path = snapshot_db_path
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        cache: PriceCache | None = None,
    ) -> PriceService:
        """Wire the Klever, CoinGecko and swap-history clients from config. Owns the client if none given.

        Every setting is read before the client is created, so ConfigError leaves nothing to close.
        """
        options = service_options(settings)
        cache = cache if cache is not None else create_cache(settings)
        pair_kwargs = {
            "node_api_base": settings.node_api_base,
            "contract_address": settings.contract_address,
            "precision": settings.precision,
            "default_precision": settings.default_precision,
            "timeout": settings.pair_timeout_sec,
            "separator": settings.symbol_separator,
        }
        anchor_kwargs = {
            "symbol": settings.anchor_symbol,
            "coin_id": settings.oracle_coin_id,
            "url": settings.oracle_url,
            "timeout": settings.oracle_timeout_sec,
        }
        trade_kwargs = {
            "url": settings.trade_history_url,
            "network": settings.network_name,
            "timeout": settings.trade_timeout_sec,
            "separator": settings.symbol_separator,
        }
        owned = client is None
        client = client or httpx.AsyncClient()
        return cls(
            KleverPairSource(client, **pair_kwargs),
            CoinGeckoAnchorSource(client, **anchor_kwargs),
            SwapHistorySource(client, **trade_kwargs),
            cache,
            **options,
            client=client if owned else None,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_inputs(self) -> tuple[list[RawPairRecord], AnchorQuote, list[TradeRecord]]:
        """Pair slots, anchor quote and trade history, all in flight at once."""
        records, quote, trades = await asyncio.gather(
            fetch_pairs(self.pair_source, self.max_pair_slots),
            self.anchor_source.fetch_anchor_price(),
            self.trade_source.fetch_trade_history(),
        )
        return records, quote, trades

    async def compute(self) -> PriceTable:
        """Fresh price table with diagnostics; bypasses and does not touch the cache."""
        records, quote, trades = await self.fetch_inputs()
        return compute_price_table(
            records,
            quote,
            anchor_symbol=self.anchor_symbol,
            stablecoins=self.stablecoins,
            trades=trades,
            max_iterations=self.max_iterations,
            separator=self.separator,
            network=self.network,
        )

    async def get_prices(self, force_refresh: bool = False, include_debug: bool = False) -> PriceTable:
        """Cached table, or a fresh one. Cache and snapshot I/O runs in worker threads."""
        if force_refresh:
            await asyncio.to_thread(self.clear_cache)
        else:
            cached = await asyncio.to_thread(self._read_cache)
            if cached is not None:
                return cached

        table = await self.compute()
        await asyncio.to_thread(self._write_cache, table)
        if self.snapshot_db_path:
            await asyncio.to_thread(self._record_snapshot, table)
        if not include_debug:
            table = table.model_copy(update={"diagnostics": None})
        return table

    async def get_price(self, symbol: str) -> TokenPrice | None:
        """Price for one token (identifier or symbol). None means unknown, never zero."""
        table = await self.get_prices()
        return table.get(normalize_symbol(symbol, self.separator))

    async def get_pairs(self) -> list[Pair]:
        """Current usable edges, in slot order."""
        records = await fetch_pairs(self.pair_source, self.max_pair_slots)
        return build_pairs(records, self.separator)

    def clear_cache(self) -> None:
        try:
            self.cache.delete(self.cache_key)
            log.info("cache_cleared", key=self.cache_key)
        except Exception as e:
            log.warning("cache_clear_failed", key=self.cache_key, error=str(e))

    def _read_cache(self) -> PriceTable | None:
        try:
            raw = self.cache.get(self.cache_key)
        except Exception as e:
            log.warning("cache_read_failed", key=self.cache_key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            table = PriceTable.model_validate_json(raw)
        except pydantic.ValidationError as e:
            log.warning("cache_entry_invalid", key=self.cache_key, error=str(e))
            return None
        log.debug("cache_hit", key=self.cache_key)
        return table.model_copy(update={"source": "cache", "diagnostics": None})

    def _write_cache(self, table: PriceTable) -> None:
        payload = table.model_copy(update={"diagnostics": None}).model_dump_json()
        try:
            self.cache.set(self.cache_key, payload, self.cache_ttl_sec)
        except Exception as e:
            log.warning("cache_write_failed", key=self.cache_key, error=str(e))

    def _record_snapshot(self, table: PriceTable) -> None:
        try:
            conn = get_connection(self.snapshot_db_path)
            try:
                init_schema(conn)
                written = append_price_table(conn, table)
            finally:
                conn.close()
        except duckdb.Error as e:
            log.warning("snapshot_write_failed", db_path=self.snapshot_db_path, error=str(e))
            return
        log.debug("snapshot_written", rows=written)


def service_options(settings: Settings) -> dict[str, Any]:
    """PriceService keyword options from config (everything except sources and cache)."""
    return {
        "anchor_symbol": settings.anchor_symbol,
        "stablecoins": settings.stablecoins,
        "max_iterations": settings.max_iterations,
        "max_pair_slots": settings.max_pair_slots,
        "separator": settings.symbol_separator,
        "network": settings.network_name,
        "cache_key": settings.cache_key,
        "cache_ttl_sec": settings.cache_ttl_sec,
        "snapshot_db_path": settings.db_path if settings.record_snapshots else None,
    }
