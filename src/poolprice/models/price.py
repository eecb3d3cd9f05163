"""PriceEntry, PriceChangeWindow, TokenPrice, PriceTable - engine output."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PriceEntry(BaseModel):
    """Price of one token as derived by propagation. Set once, never re-priced."""

    symbol: str
    price_usd: float = Field(..., ge=0)
    price_native: float = Field(..., ge=0)
    depth: int = Field(0, ge=0)  # hops from nearest anchor
    derived_from: str | None = None  # neighbor symbol or "<PEG>-peg"; None for the native anchor
    pair_id: int | None = None


class PriceChangeWindow(BaseModel):
    """Percentage changes per window; None means not enough trades."""

    change_24h: float | None = None
    change_7d: float | None = None
    change_30d: float | None = None
    change_all: float | None = None


class TokenPrice(PriceEntry):
    """PriceEntry merged with its price-change windows."""

    price_change_24h: float | None = None
    price_change_7d: float | None = None
    price_change_30d: float | None = None
    price_change_all: float | None = None


class PairSummary(BaseModel):
    pair_id: int
    pair: str
    reserve_a: float
    reserve_b: float


class PriceDiagnostics(BaseModel):
    """Observability data for one computation; not needed for correctness."""

    pairs_found: int = 0
    pairs: list[PairSummary] = Field(default_factory=list)
    priced_tokens: list[str] = Field(default_factory=list)
    unpriced_tokens: list[str] = Field(default_factory=list)
    iterations_native: int = 0
    iterations_stable: int = 0


class PriceTable(BaseModel):
    """Full engine result. A symbol missing from prices has an unknown price."""

    anchor_symbol: str
    prices: dict[str, TokenPrice] = Field(default_factory=dict)
    updated_at: str
    network: str = "mainnet"
    source: str = Field("fresh", pattern="^(fresh|cache)$")
    diagnostics: PriceDiagnostics | None = None

    def get(self, symbol: str) -> TokenPrice | None:
        return self.prices.get(symbol)
