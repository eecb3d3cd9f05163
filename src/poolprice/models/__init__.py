"""Canonical schema (Pydantic) - pairs, anchors, trades, prices."""

from poolprice.models.anchor import AnchorQuote, AnchorSet, StablecoinPeg
from poolprice.models.pair import Pair, RawPairRecord
from poolprice.models.price import (
    PairSummary,
    PriceChangeWindow,
    PriceDiagnostics,
    PriceEntry,
    PriceTable,
    TokenPrice,
)
from poolprice.models.trade import TradeRecord

__all__ = [
    "AnchorQuote",
    "AnchorSet",
    "StablecoinPeg",
    "Pair",
    "RawPairRecord",
    "PairSummary",
    "PriceChangeWindow",
    "PriceDiagnostics",
    "PriceEntry",
    "PriceTable",
    "TokenPrice",
    "TradeRecord",
]
