"""CoinGecko simple/price client - native anchor USD quote."""

from __future__ import annotations

import math

import httpx
import structlog

from poolprice.models import AnchorQuote

log = structlog.get_logger(__name__)

COINGECKO_SIMPLE_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"


class CoinGeckoAnchorSource:
    """AnchorPriceSource: USD price and 24h change for one CoinGecko coin id."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        symbol: str,
        coin_id: str = "klever",
        url: str = COINGECKO_SIMPLE_PRICE_URL,
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self.symbol = symbol
        self.coin_id = coin_id
        self.url = url
        self.timeout = timeout

    async def fetch_anchor_price(self) -> AnchorQuote:
        params = {"ids": self.coin_id, "vs_currencies": "usd", "include_24hr_change": "true"}
        try:
            resp = await self._client.get(
                self.url, params=params, headers={"Accept": "application/json"}, timeout=self.timeout
            )
            resp.raise_for_status()
            coin = (resp.json() or {}).get(self.coin_id) or {}
            price = float(coin.get("usd") or 0)
            change = coin.get("usd_24h_change")
            change = float(change) if change is not None else None
            if change is not None and not math.isfinite(change):
                change = None
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            log.error("anchor_quote_failed", symbol=self.symbol, coin_id=self.coin_id, error=str(e))
            return AnchorQuote(symbol=self.symbol, price_usd=0.0)
        if not math.isfinite(price) or price < 0:
            log.error("anchor_quote_invalid", symbol=self.symbol, price=price)
            return AnchorQuote(symbol=self.symbol, price_usd=0.0)
        log.info("anchor_quote", symbol=self.symbol, price_usd=price, change_24h=change)
        return AnchorQuote(symbol=self.symbol, price_usd=price, price_change_24h=change)
