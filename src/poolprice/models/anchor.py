"""AnchorQuote, StablecoinPeg, AnchorSet - externally sourced prices."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AnchorQuote(BaseModel):
    """Native token price from the market-data oracle. price_usd == 0 means the oracle failed."""

    symbol: str
    price_usd: float = Field(0.0, ge=0)
    price_change_24h: float | None = None


class StablecoinPeg(BaseModel):
    """Fixed USD price for a pegged token."""

    price_usd: float = Field(..., gt=0)
    peg: str = "USD"

    @property
    def marker(self) -> str:
        return f"{self.peg}-peg"


class AnchorSet(BaseModel):
    """All propagation seeds: the native anchor plus the stablecoin pegs."""

    native: AnchorQuote
    stablecoins: dict[str, StablecoinPeg] = Field(default_factory=dict)

    @property
    def native_symbol(self) -> str:
        return self.native.symbol

    @property
    def native_price_usd(self) -> float:
        return self.native.price_usd

    def is_stablecoin(self, symbol: str) -> bool:
        return symbol in self.stablecoins
