"""Propagation engine unit tests."""

from poolprice.engine.propagation import propagate_prices
from poolprice.models import AnchorQuote, AnchorSet, Pair, StablecoinPeg


def _anchors(price: float = 2.0, stablecoins: dict | None = None) -> AnchorSet:
    return AnchorSet(
        native=AnchorQuote(symbol="N", price_usd=price),
        stablecoins=stablecoins or {},
    )


def _pair(pair_id: int, a: str, b: str, ra: float, rb: float) -> Pair:
    return Pair(pair_id=pair_id, token_a=a, token_b=b, reserve_a=ra, reserve_b=rb)


def test_end_to_end_two_hops():
    pairs = [_pair(1, "N", "X", 100, 50), _pair(2, "X", "Y", 10, 5)]
    result = propagate_prices(pairs, _anchors(2.0))
    n, x, y = result.prices["N"], result.prices["X"], result.prices["Y"]
    assert (n.price_usd, n.depth, n.derived_from, n.price_native) == (2.0, 0, None, 1.0)
    assert x.price_usd == 4.0 and x.depth == 1 and x.derived_from == "N" and x.pair_id == 1
    assert y.price_usd == 8.0 and y.depth == 2 and y.derived_from == "X" and y.pair_id == 2
    assert x.price_native == 2.0
    assert y.price_native == 4.0


def test_reverse_orientation_uses_other_reserve():
    # anchor on the b side: price of X in N = reserve_N / reserve_X
    result = propagate_prices([_pair(1, "X", "N", 50, 100)], _anchors(2.0))
    assert result.prices["X"].price_usd == 4.0


def test_chain_longer_than_ceiling_stops_at_ceiling():
    ceiling = 10
    tokens = ["N"] + [f"T{i}" for i in range(1, ceiling + 2)]
    # reversed list order: each pass still extends exactly one hop
    pairs = [_pair(i, tokens[i - 1], tokens[i], 1, 1) for i in range(len(tokens) - 1, 0, -1)]
    result = propagate_prices(pairs, _anchors(1.0), max_iterations=ceiling)
    for i in range(1, ceiling + 1):
        assert result.prices[f"T{i}"].depth == i
    assert f"T{ceiling + 1}" not in result.prices
    assert result.iterations_native == ceiling
    # no stablecoins: phase 2 has no sources and stops after one idle pass
    assert result.iterations_stable == 1


def test_chain_within_ceiling_fully_priced_and_stops_early():
    pairs = [_pair(1, "N", "A", 1, 1), _pair(2, "A", "B", 1, 1), _pair(3, "B", "C", 1, 1)]
    result = propagate_prices(pairs, _anchors(1.0), max_iterations=10)
    assert set(result.prices) == {"N", "A", "B", "C"}
    # three productive passes plus one that changes nothing
    assert result.iterations_native == 4


def test_idempotent():
    pairs = [_pair(1, "N", "X", 100, 50), _pair(2, "X", "Y", 10, 5), _pair(3, "USDT", "Z", 10, 20)]
    anchors = _anchors(2.0, {"USDT": StablecoinPeg(price_usd=1.0)})
    first = propagate_prices(pairs, anchors)
    second = propagate_prices(pairs, anchors)
    assert first == second


def test_stablecoin_keeps_peg_despite_skewed_pool():
    pairs = [_pair(1, "N", "USDT", 1000, 1)]
    result = propagate_prices(pairs, _anchors(2.0, {"USDT": StablecoinPeg(price_usd=1.0)}))
    usdt = result.prices["USDT"]
    assert usdt.price_usd == 1.0
    assert usdt.depth == 0
    assert usdt.derived_from == "USD-peg"
    assert usdt.price_native == 0.5


def test_chain_beyond_ceiling_not_extended_by_stablecoin_phase():
    tokens = ["N"] + [f"T{i}" for i in range(1, 12)]
    pairs = [_pair(i, tokens[i - 1], tokens[i], 1, 1) for i in range(1, len(tokens))]
    anchors = _anchors(1.0, {"USDT": StablecoinPeg(price_usd=1.0)})
    result = propagate_prices(pairs + [_pair(99, "USDT", "S", 1, 1)], anchors, max_iterations=10)
    assert result.prices["T10"].depth == 10
    assert "T11" not in result.prices
    assert result.prices["S"].derived_from == "USDT"


def test_stablecoin_peg_not_leaked_downstream_from_skewed_pool():
    pairs = [_pair(1, "N", "USDT", 1000, 1), _pair(2, "USDT", "Z", 2, 1)]
    result = propagate_prices(pairs, _anchors(2.0, {"USDT": StablecoinPeg(price_usd=1.0)}))
    z = result.prices["Z"]
    # from the $1 peg: 2 USDT per Z; a ratio-derived USDT would give 4000
    assert z.price_usd == 2.0
    assert z.derived_from == "USDT"
    assert z.depth == 1
    assert z.price_native == 1.0


def test_native_path_wins_over_stablecoin_path():
    pairs = [_pair(1, "USDT", "X", 1, 100), _pair(2, "N", "X", 10, 10)]
    result = propagate_prices(pairs, _anchors(2.0, {"USDT": StablecoinPeg(price_usd=1.0)}))
    assert result.prices["X"].derived_from == "N"
    assert result.prices["X"].price_usd == 2.0


def test_stablecoin_fallback_prices_unreachable_token():
    pairs = [_pair(1, "N", "X", 10, 10), _pair(2, "W", "USDC", 4, 2), _pair(3, "W", "V", 1, 2)]
    result = propagate_prices(pairs, _anchors(2.0, {"USDC": StablecoinPeg(price_usd=1.0)}))
    w, v = result.prices["W"], result.prices["V"]
    assert w.price_usd == 0.5 and w.depth == 1 and w.derived_from == "USDC"
    assert v.price_usd == 0.25 and v.depth == 2 and v.derived_from == "W"
    assert w.price_native == 0.25
    assert result.iterations_stable >= 2


def test_first_writer_wins_shortest_path():
    # Z is one hop from N and two hops via A; the A->Z edge sits earlier in the list
    # and would give a different price if Z were re-derived after A is priced.
    pairs = [_pair(1, "N", "A", 1, 1), _pair(2, "A", "Z", 1, 10), _pair(3, "N", "Z", 1, 2)]
    result = propagate_prices(pairs, _anchors(1.0))
    z = result.prices["Z"]
    assert z.derived_from == "N"
    assert z.depth == 1
    assert z.price_usd == 0.5
    assert z.pair_id == 3


def test_first_edge_in_list_wins_within_a_pass():
    pairs = [_pair(7, "N", "Z", 1, 4), _pair(3, "N", "Z", 1, 2)]
    result = propagate_prices(pairs, _anchors(1.0))
    assert result.prices["Z"].pair_id == 7
    assert result.prices["Z"].price_usd == 0.25


def test_empty_edge_list_only_anchor():
    result = propagate_prices([], _anchors(2.0))
    assert list(result.prices) == ["N"]
    assert result.prices["N"].price_usd == 2.0


def test_empty_edge_list_seeds_stablecoins():
    result = propagate_prices([], _anchors(2.0, {"USDT": StablecoinPeg(price_usd=1.0)}))
    assert set(result.prices) == {"N", "USDT"}


def test_zero_anchor_price_keeps_metadata():
    pairs = [_pair(1, "N", "X", 100, 50), _pair(2, "X", "Y", 10, 5)]
    result = propagate_prices(pairs, _anchors(0.0))
    assert result.prices["N"].price_usd == 0.0
    assert result.prices["N"].price_native == 1.0
    x, y = result.prices["X"], result.prices["Y"]
    assert x.price_usd == 0.0 and x.price_native == 0.0
    assert x.depth == 1 and x.derived_from == "N"
    assert y.price_usd == 0.0 and y.depth == 2 and y.derived_from == "X"


def test_zero_anchor_stablecoin_native_price_is_zero():
    result = propagate_prices([], _anchors(0.0, {"USDT": StablecoinPeg(price_usd=1.0)}))
    assert result.prices["USDT"].price_usd == 1.0
    assert result.prices["USDT"].price_native == 0.0


def test_disconnected_tokens_absent():
    pairs = [_pair(1, "N", "X", 1, 1), _pair(2, "P", "Q", 1, 1)]
    result = propagate_prices(pairs, _anchors(1.0))
    assert "P" not in result.prices
    assert "Q" not in result.prices
