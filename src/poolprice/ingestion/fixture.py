"""Offline source: pair records, anchor quote and swaps from one JSON document.

Layout::

    {
      "anchor": {"symbol": "KLV", "price_usd": 0.0025, "price_change_24h": -1.2},
      "pairs": [{"pair_id": 1, "token_a": "KLV", "token_b": "DGKO-CXVJ",
                 "reserve_a": 1000.0, "reserve_b": 50.0, "is_active": true}],
      "trades": [{"timestamp": 1700000000, "status": "success", "inputToken": "KLV", ...}]
    }

Pair and trade rows accept camelCase or snake_case keys. Unusable rows are skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from poolprice.errors import FixtureError
from poolprice.graph.builder import active_flag
from poolprice.ingestion.swap_history import parse_trades
from poolprice.models import AnchorQuote, RawPairRecord, TradeRecord


def _pair_record(raw: dict[str, Any]) -> RawPairRecord | None:
    try:
        return RawPairRecord(
            pair_id=int(raw.get("pair_id", raw.get("pairId"))),
            token_a=str(raw.get("token_a") or raw.get("tokenA") or ""),
            token_b=str(raw.get("token_b") or raw.get("tokenB") or ""),
            reserve_a=float(raw.get("reserve_a", raw.get("reserveA", 0)) or 0),
            reserve_b=float(raw.get("reserve_b", raw.get("reserveB", 0)) or 0),
            is_active=active_flag(raw.get("is_active", raw.get("isActive"))),
        )
    except (TypeError, ValueError):
        return None


class FileSource:
    """PairSource, AnchorPriceSource and TradeHistorySource over a JSON fixture."""

    def __init__(self, document: dict[str, Any], anchor_symbol: str = "KLV", separator: str = "-") -> None:
        self.anchor_symbol = anchor_symbol
        self._pairs: dict[int, RawPairRecord] = {}
        for row in document.get("pairs") or []:
            record = _pair_record(row) if isinstance(row, dict) else None
            if record is not None:
                self._pairs[record.pair_id] = record
        anchor = document.get("anchor") or {}
        try:
            self._quote = AnchorQuote(
                symbol=str(anchor.get("symbol") or anchor_symbol),
                price_usd=float(anchor.get("price_usd", anchor.get("priceUsd", 0)) or 0),
                price_change_24h=anchor.get("price_change_24h", anchor.get("priceChange24h")),
            )
        except ValueError:
            self._quote = AnchorQuote(symbol=anchor_symbol, price_usd=0.0)
        self._trades = parse_trades(document.get("trades") or [], separator)

    @classmethod
    def from_path(cls, path: str | Path, anchor_symbol: str = "KLV", separator: str = "-") -> FileSource:
        p = Path(path)
        try:
            with open(p, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FixtureError(f"Cannot read fixture {p}: {e}") from e
        if not isinstance(document, dict):
            raise FixtureError(f"Fixture {p} must contain a JSON object")
        return cls(document, anchor_symbol=anchor_symbol, separator=separator)

    @property
    def max_pair_id(self) -> int:
        return max(self._pairs, default=0)

    async def fetch_pair(self, pair_id: int) -> RawPairRecord | None:
        return self._pairs.get(pair_id)

    async def fetch_anchor_price(self) -> AnchorQuote:
        return self._quote

    async def fetch_trade_history(self) -> list[TradeRecord]:
        return list(self._trades)
