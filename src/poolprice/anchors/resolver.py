"""Anchor resolver - native oracle quote plus stablecoin pegs -> AnchorSet."""

from __future__ import annotations

import math
from typing import Any

import structlog

from poolprice.models.anchor import AnchorQuote, AnchorSet, StablecoinPeg

log = structlog.get_logger(__name__)


def resolve_anchors(
    native_symbol: str,
    quote: AnchorQuote | None,
    stablecoins: dict[str, dict[str, Any] | StablecoinPeg | float] | None = None,
) -> AnchorSet:
    """Build the propagation seeds. A missing or invalid quote degrades to price 0, never an error."""
    price = quote.price_usd if quote is not None else 0.0
    change = quote.price_change_24h if quote is not None else None
    if not math.isfinite(price) or price < 0:
        log.warning("anchor_price_invalid", symbol=native_symbol, price=price)
        price, change = 0.0, None
    if price == 0:
        log.warning("anchor_price_unavailable", symbol=native_symbol)
    if change is not None and not math.isfinite(change):
        change = None

    pegs: dict[str, StablecoinPeg] = {}
    for stable_symbol, cfg in (stablecoins or {}).items():
        if stable_symbol == native_symbol:
            log.warning("stablecoin_is_native_anchor", symbol=stable_symbol)
            continue
        if isinstance(cfg, StablecoinPeg):
            pegs[stable_symbol] = cfg
        elif isinstance(cfg, dict):
            pegs[stable_symbol] = StablecoinPeg(**cfg)
        else:
            pegs[stable_symbol] = StablecoinPeg(price_usd=float(cfg))

    return AnchorSet(
        native=AnchorQuote(symbol=native_symbol, price_usd=price, price_change_24h=change),
        stablecoins=pegs,
    )
