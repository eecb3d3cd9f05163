"""Price propagation over the pair graph - two bounded fixed-point phases.

Phase 1 seeds the native anchor and relaxes every edge that touches no
stablecoin. Phase 2 seeds the stablecoin pegs and relaxes the full edge list
to reach tokens with no native path; only the pegs and tokens priced in phase 2
act as sources there. Rules shared by both phases:

- A token is priced at most once (first writer wins, across and within phases).
- Only tokens priced before a pass starts can price a neighbor during that
  pass, so each pass extends the priced set by exactly one hop and `depth` is
  the hop count. When several edges could price the same token in one pass,
  the earliest edge in list order wins.
- "Priced" means present in the table, not "positive price". An anchor priced
  at 0 (oracle down) still propagates, giving 0 USD downstream with depth and
  derived_from filled in. Tokens with no path stay absent.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

import structlog
from pydantic import BaseModel, Field

from poolprice.models.anchor import AnchorSet
from poolprice.models.pair import Pair
from poolprice.models.price import PriceEntry

log = structlog.get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 10


class PropagationResult(BaseModel):
    """Price table plus the number of passes each phase ran."""

    prices: dict[str, PriceEntry] = Field(default_factory=dict)
    iterations_native: int = 0
    iterations_stable: int = 0


def _native_price(price_usd: float, anchor_price_usd: float) -> float:
    return price_usd / anchor_price_usd if anchor_price_usd > 0 else 0.0


def _derive(
    unknown: str,
    known: PriceEntry,
    reserve_known: float,
    reserve_unknown: float,
    pair_id: int,
    anchor_price_usd: float,
) -> PriceEntry:
    price_in_known = reserve_known / reserve_unknown
    price_usd = price_in_known * known.price_usd
    return PriceEntry(
        symbol=unknown,
        price_usd=price_usd,
        price_native=_native_price(price_usd, anchor_price_usd),
        depth=known.depth + 1,
        derived_from=known.symbol,
        pair_id=pair_id,
    )


def relax(
    pairs: Sequence[Pair],
    prices: dict[str, PriceEntry],
    anchor_price_usd: float,
    max_iterations: int,
    skip: Callable[[Pair], bool] | None = None,
    sources: Iterable[str] | None = None,
    phase: str = "",
) -> int:
    """Run bounded relaxation passes over pairs, mutating prices in place. Returns passes run.

    Only `sources` (default: every priced token) and tokens priced by this call
    can price a neighbor. Every entry in prices still blocks re-pricing.
    """
    active = set(prices) if sources is None else set(sources)
    passes = 0
    for _ in range(max_iterations):
        passes += 1
        known = frozenset(active)
        changed = False
        for pair in pairs:
            if skip is not None and skip(pair):
                continue
            a, b = pair.token_a, pair.token_b
            if a in known and b not in prices:
                prices[b] = _derive(b, prices[a], pair.reserve_a, pair.reserve_b, pair.pair_id, anchor_price_usd)
                priced = b
            elif b in known and a not in prices:
                prices[a] = _derive(a, prices[b], pair.reserve_b, pair.reserve_a, pair.pair_id, anchor_price_usd)
                priced = a
            else:
                continue
            changed = True
            active.add(priced)
            log.debug(
                "token_priced",
                phase=phase,
                iteration=passes,
                symbol=priced,
                price_usd=prices[priced].price_usd,
                via=prices[priced].derived_from,
                pair_id=pair.pair_id,
            )
        if not changed:
            break
    return passes


def propagate_prices(
    pairs: Sequence[Pair],
    anchors: AnchorSet,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> PropagationResult:
    """Price every token reachable from the native anchor or a stablecoin peg. Pure; never raises."""
    anchor_symbol = anchors.native_symbol
    anchor_price = anchors.native_price_usd
    prices: dict[str, PriceEntry] = {
        anchor_symbol: PriceEntry(
            symbol=anchor_symbol,
            price_usd=anchor_price,
            price_native=1.0,
            depth=0,
        )
    }

    def touches_stablecoin(pair: Pair) -> bool:
        return anchors.is_stablecoin(pair.token_a) or anchors.is_stablecoin(pair.token_b)

    native_passes = relax(pairs, prices, anchor_price, max_iterations, skip=touches_stablecoin, phase="native")
    log.debug("propagation_phase_done", phase="native", iterations=native_passes, priced=len(prices))

    seeded: list[str] = []
    for symbol, peg in anchors.stablecoins.items():
        if symbol in prices:
            continue
        prices[symbol] = PriceEntry(
            symbol=symbol,
            price_usd=peg.price_usd,
            price_native=_native_price(peg.price_usd, anchor_price),
            depth=0,
            derived_from=peg.marker,
        )
        seeded.append(symbol)

    stable_passes = relax(pairs, prices, anchor_price, max_iterations, sources=seeded, phase="stable")
    log.debug("propagation_phase_done", phase="stable", iterations=stable_passes, priced=len(prices))

    return PropagationResult(
        prices=prices,
        iterations_native=native_passes,
        iterations_stable=stable_passes,
    )
