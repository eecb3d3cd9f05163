"""Windowed price changes from swap history, with IQR outlier fencing and clamping.

A token's historical price is read only from its direct swaps against the
anchor token; multi-hop historical prices are not composed.
"""

from __future__ import annotations

import math
import time
from typing import Sequence

from poolprice.models.price import PriceChangeWindow
from poolprice.models.trade import TradeRecord

SECONDS_24H = 24 * 60 * 60
SECONDS_7D = 7 * SECONDS_24H
SECONDS_30D = 30 * SECONDS_24H

CHANGE_MIN = -99.99
CHANGE_MAX = 999.99
IQR_MIN_TRADES = 4
IQR_FENCE = 2.0


def clamp_change(change: float) -> float:
    """Clamp a percentage change to [-99.99, 999.99]."""
    return max(CHANGE_MIN, min(CHANGE_MAX, change))


def relevant_trades(trades: Sequence[TradeRecord], symbol: str, anchor_symbol: str) -> list[TradeRecord]:
    """Successful swaps between exactly symbol and anchor, ascending by timestamp (stable)."""
    wanted = {symbol, anchor_symbol}
    out = [t for t in trades if t.status == "success" and {t.input_token, t.output_token} == wanted]
    out.sort(key=lambda t: t.timestamp)
    return out


def implied_price(trade: TradeRecord, symbol: str) -> float | None:
    """Price of symbol in anchor units implied by one swap; None if not finite and positive."""
    if trade.input_token == symbol:
        num, den = trade.output_amount, trade.input_amount  # sold symbol for anchor
    else:
        num, den = trade.input_amount, trade.output_amount  # bought symbol with anchor
    if den == 0:
        return None
    price = num / den
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def iqr_filter(points: list[tuple[int, float]]) -> list[tuple[int, float]]:
    """Keep points whose price lies within [Q1 - 2*IQR, Q3 + 2*IQR]; order is preserved."""
    ordered = sorted(p for _, p in points)
    n = len(ordered)
    q1 = ordered[math.floor(n * 0.25)]
    q3 = ordered[math.floor(n * 0.75)]
    iqr = q3 - q1
    lower = q1 - IQR_FENCE * iqr
    upper = q3 + IQR_FENCE * iqr
    return [(ts, p) for ts, p in points if lower <= p <= upper]


def window_change(points: list[tuple[int, float]]) -> float | None:
    """Clamped % change between first and last (timestamp, price) point, after optional fencing."""
    if len(points) < 2:
        return None
    if len(points) >= IQR_MIN_TRADES:
        points = iqr_filter(points)
        if len(points) < 2:
            return None
    first = points[0][1]
    last = points[-1][1]
    return clamp_change((last - first) / first * 100)


def calculate_price_changes(
    symbol: str,
    trades: Sequence[TradeRecord],
    anchor_symbol: str,
    now: float | None = None,
) -> PriceChangeWindow:
    """24h/7d/30d/all-time changes for symbol. Every window is None with fewer than 2 trades."""
    if symbol == anchor_symbol:
        return PriceChangeWindow()
    history = relevant_trades(trades, symbol, anchor_symbol)
    if len(history) < 2:
        return PriceChangeWindow()

    points: list[tuple[int, float]] = []
    for trade in history:
        price = implied_price(trade, symbol)
        if price is not None:
            points.append((trade.timestamp, price))

    now = time.time() if now is None else now

    def since(seconds: int) -> list[tuple[int, float]]:
        cutoff = now - seconds
        return [pt for pt in points if pt[0] >= cutoff]

    return PriceChangeWindow(
        change_24h=window_change(since(SECONDS_24H)),
        change_7d=window_change(since(SECONDS_7D)),
        change_30d=window_change(since(SECONDS_30D)),
        change_all=window_change(points),
    )
