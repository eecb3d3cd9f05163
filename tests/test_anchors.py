"""Anchor resolver unit tests."""

from poolprice.anchors.resolver import resolve_anchors
from poolprice.models import AnchorQuote, StablecoinPeg


def test_resolve_with_quote_and_pegs():
    anchors = resolve_anchors(
        "KLV",
        AnchorQuote(symbol="KLV", price_usd=0.0025, price_change_24h=-3.5),
        {"USDT": {"price_usd": 1.0, "peg": "USD"}, "EURC": StablecoinPeg(price_usd=1.08, peg="EUR"), "USDC": 1.0},
    )
    assert anchors.native_symbol == "KLV"
    assert anchors.native_price_usd == 0.0025
    assert anchors.native.price_change_24h == -3.5
    assert anchors.stablecoins["EURC"].marker == "EUR-peg"
    assert anchors.stablecoins["USDC"].price_usd == 1.0
    assert anchors.is_stablecoin("USDT")
    assert not anchors.is_stablecoin("KLV")


def test_missing_quote_degrades_to_zero():
    anchors = resolve_anchors("KLV", None, {})
    assert anchors.native_price_usd == 0.0
    assert anchors.native.price_change_24h is None


def test_non_finite_change_dropped():
    anchors = resolve_anchors("KLV", AnchorQuote(symbol="KLV", price_usd=1.0, price_change_24h=float("inf")))
    assert anchors.native.price_change_24h is None


def test_native_symbol_not_treated_as_stablecoin():
    anchors = resolve_anchors("USDT", AnchorQuote(symbol="USDT", price_usd=1.0), {"USDT": 1.0, "USDC": 1.0})
    assert not anchors.is_stablecoin("USDT")
    assert anchors.is_stablecoin("USDC")
