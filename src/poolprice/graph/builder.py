"""Pair graph builder - raw pool records -> ordered list of usable edges.

Edge order is part of the propagation contract: within a pass, the first edge
(in list order) that can price a token wins. build_pairs keeps input order so
callers control that tie-break; it does not sort or deduplicate.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

import structlog

from poolprice.models.pair import Pair, RawPairRecord

log = structlog.get_logger(__name__)


def normalize_symbol(identifier: str, separator: str = "-") -> str:
    """Reduce an asset identifier to its base symbol ('DGKO-CXVJ' -> 'DGKO', 'KLV' -> 'KLV')."""
    ident = (identifier or "").strip()
    base = ident.split(separator, 1)[0] if separator else ident
    return base or ident


def _positive(value: Any) -> float | None:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f) or f <= 0:
        return None
    return f


def active_flag(value: Any) -> bool:
    """True only for a real boolean True or the integer 1; strings and other values are inactive."""
    if isinstance(value, bool):
        return value
    return type(value) is int and value == 1


def _field(record: RawPairRecord | dict[str, Any], name: str, alias: str) -> Any:
    if isinstance(record, dict):
        return record.get(name, record.get(alias))
    return getattr(record, name, None)


def to_pair(record: RawPairRecord | dict[str, Any] | None, separator: str = "-") -> Pair | None:
    """Return a Pair for a usable record, None otherwise. Never raises on bad input."""
    if record is None:
        return None
    if not active_flag(_field(record, "is_active", "isActive")):
        return None
    reserve_a = _positive(_field(record, "reserve_a", "reserveA"))
    reserve_b = _positive(_field(record, "reserve_b", "reserveB"))
    if reserve_a is None or reserve_b is None:
        return None
    token_a = _field(record, "token_a", "tokenA")
    token_b = _field(record, "token_b", "tokenB")
    if not isinstance(token_a, str) or not isinstance(token_b, str) or not token_a or not token_b:
        return None
    try:
        pair_id = int(_field(record, "pair_id", "pairId"))
    except (TypeError, ValueError):
        return None
    return Pair(
        pair_id=pair_id,
        token_a=normalize_symbol(token_a, separator),
        token_b=normalize_symbol(token_b, separator),
        reserve_a=reserve_a,
        reserve_b=reserve_b,
    )


def build_pairs(
    records: Iterable[RawPairRecord | dict[str, Any] | None],
    separator: str = "-",
) -> list[Pair]:
    """Normalize records and keep only active pools with positive reserves, in input order."""
    pairs: list[Pair] = []
    discarded = 0
    for record in records:
        pair = to_pair(record, separator)
        if pair is None:
            discarded += 1
            continue
        pairs.append(pair)
    log.debug("pairs_built", usable=len(pairs), discarded=discarded)
    return pairs


def graph_symbols(pairs: Iterable[Pair]) -> list[str]:
    """Every symbol appearing in the edge list, in first-seen order."""
    seen: dict[str, None] = {}
    for p in pairs:
        seen.setdefault(p.token_a, None)
        seen.setdefault(p.token_b, None)
    return list(seen)
