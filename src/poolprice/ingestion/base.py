"""Collaborator protocols (pair reserves, anchor oracle, trade history) and pair fan-out."""

from __future__ import annotations

import asyncio
from typing import Protocol

import structlog

from poolprice.models import AnchorQuote, RawPairRecord, TradeRecord

log = structlog.get_logger(__name__)


class PairSource(Protocol):
    """Reads one pool by numeric id. Returns None when the slot is empty or the read failed."""

    async def fetch_pair(self, pair_id: int) -> RawPairRecord | None: ...


class AnchorPriceSource(Protocol):
    """Native token USD quote. Returns price_usd=0 on failure instead of raising."""

    async def fetch_anchor_price(self) -> AnchorQuote: ...


class TradeHistorySource(Protocol):
    """Recent swaps. Returns an empty list on failure instead of raising."""

    async def fetch_trade_history(self) -> list[TradeRecord]: ...


async def fetch_pairs(source: PairSource, max_slots: int) -> list[RawPairRecord]:
    """Fetch pair slots 1..max_slots concurrently; failed or empty slots are dropped. Keeps slot order."""
    results = await asyncio.gather(
        *(source.fetch_pair(pair_id) for pair_id in range(1, max_slots + 1)),
        return_exceptions=True,
    )
    records: list[RawPairRecord] = []
    for pair_id, res in enumerate(results, start=1):
        if isinstance(res, BaseException):
            if not isinstance(res, Exception):
                raise res
            log.warning("pair_fetch_failed", pair_id=pair_id, error=str(res))
            continue
        if res is not None:
            records.append(res)
    log.info("pairs_fetched", slots=max_slots, found=len(records))
    return records
