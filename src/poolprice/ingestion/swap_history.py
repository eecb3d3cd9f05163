"""Swap history client - recent DEX swaps -> TradeRecord list."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from poolprice.graph.builder import normalize_symbol
from poolprice.models import TradeRecord

log = structlog.get_logger(__name__)


def parse_trade(raw: dict[str, Any], separator: str = "-") -> TradeRecord | None:
    """Convert one swap-history row (camelCase or snake_case keys). None if a field is missing or bad."""
    try:
        return TradeRecord(
            timestamp=int(raw.get("timestamp", raw.get("ts"))),
            status=str(raw.get("status") or ""),
            input_token=normalize_symbol(str(raw.get("inputToken") or raw.get("input_token") or ""), separator),
            output_token=normalize_symbol(str(raw.get("outputToken") or raw.get("output_token") or ""), separator),
            input_amount=float(raw.get("inputAmount", raw.get("input_amount"))),
            output_amount=float(raw.get("outputAmount", raw.get("output_amount"))),
        )
    except (TypeError, ValueError):
        return None


def parse_trades(rows: list[Any], separator: str = "-") -> list[TradeRecord]:
    trades = []
    skipped = 0
    for row in rows:
        trade = parse_trade(row, separator) if isinstance(row, dict) else None
        if trade is None:
            skipped += 1
            continue
        trades.append(trade)
    if skipped:
        log.debug("trades_skipped", count=skipped)
    return trades


class SwapHistorySource:
    """TradeHistorySource backed by the dashboard's swap-history endpoint ({"data": [...]})."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        network: str = "mainnet",
        timeout: float = 10.0,
        separator: str = "-",
    ) -> None:
        self._client = client
        self.url = url
        self.network = network
        self.timeout = timeout
        self.separator = separator

    async def fetch_trade_history(self) -> list[TradeRecord]:
        try:
            resp = await self._client.get(self.url, params={"network": self.network}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("trade_history_failed", url=self.url, error=str(e))
            return []
        rows = data.get("data", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            return []
        trades = parse_trades(rows, self.separator)
        log.info("trade_history_fetched", count=len(trades))
        return trades
