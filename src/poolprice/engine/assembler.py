"""Result assembler - propagation output + price changes -> PriceTable."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

import structlog

from poolprice.anchors.resolver import resolve_anchors
from poolprice.engine.changes import calculate_price_changes
from poolprice.engine.propagation import DEFAULT_MAX_ITERATIONS, PropagationResult, propagate_prices
from poolprice.graph.builder import build_pairs, graph_symbols
from poolprice.models.anchor import AnchorQuote, AnchorSet, StablecoinPeg
from poolprice.models.pair import Pair, RawPairRecord
from poolprice.models.price import PairSummary, PriceDiagnostics, PriceTable, TokenPrice
from poolprice.models.trade import TradeRecord

log = structlog.get_logger(__name__)


def build_diagnostics(pairs: Sequence[Pair], result: PropagationResult) -> PriceDiagnostics:
    return PriceDiagnostics(
        pairs_found=len(pairs),
        pairs=[
            PairSummary(pair_id=p.pair_id, pair=p.label, reserve_a=p.reserve_a, reserve_b=p.reserve_b)
            for p in pairs
        ],
        priced_tokens=list(result.prices),
        unpriced_tokens=[s for s in graph_symbols(pairs) if s not in result.prices],
        iterations_native=result.iterations_native,
        iterations_stable=result.iterations_stable,
    )


def assemble_price_table(
    result: PropagationResult,
    anchors: AnchorSet,
    pairs: Sequence[Pair],
    trades: Sequence[TradeRecord],
    network: str = "mainnet",
    now: float | None = None,
) -> PriceTable:
    """Merge each priced token with its change windows. The anchor keeps the oracle 24h change."""
    now = time.time() if now is None else now
    anchor_symbol = anchors.native_symbol
    prices: dict[str, TokenPrice] = {}
    for symbol, entry in result.prices.items():
        record = entry.model_dump()
        if symbol == anchor_symbol:
            record["price_change_24h"] = anchors.native.price_change_24h
        elif trades:
            changes = calculate_price_changes(symbol, trades, anchor_symbol, now=now)
            record.update(
                price_change_24h=changes.change_24h,
                price_change_7d=changes.change_7d,
                price_change_30d=changes.change_30d,
                price_change_all=changes.change_all,
            )
        prices[symbol] = TokenPrice(**record)

    diagnostics = build_diagnostics(pairs, result)
    if diagnostics.unpriced_tokens:
        log.info("tokens_unpriced", symbols=diagnostics.unpriced_tokens)
    return PriceTable(
        anchor_symbol=anchor_symbol,
        prices=prices,
        updated_at=datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
        network=network,
        source="fresh",
        diagnostics=diagnostics,
    )


def compute_price_table(
    records: Iterable[RawPairRecord | dict[str, Any] | None],
    quote: AnchorQuote | None,
    *,
    anchor_symbol: str,
    stablecoins: dict[str, dict[str, Any] | StablecoinPeg | float] | None = None,
    trades: Sequence[TradeRecord] = (),
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    separator: str = "-",
    network: str = "mainnet",
    now: float | None = None,
) -> PriceTable:
    """(pair records, anchor quote, pegs, trades) -> PriceTable. Pure and synchronous."""
    anchors = resolve_anchors(anchor_symbol, quote, stablecoins)
    pairs = build_pairs(records, separator)
    result = propagate_prices(pairs, anchors, max_iterations)
    table = assemble_price_table(result, anchors, pairs, trades, network=network, now=now)
    log.info(
        "price_table_computed",
        pairs=len(pairs),
        priced=len(table.prices),
        anchor_price_usd=anchors.native_price_usd,
        trades=len(trades),
    )
    return table
