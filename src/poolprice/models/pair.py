"""RawPairRecord, Pair - pool records and graph edges."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RawPairRecord(BaseModel):
    """Pool record as read from the DEX contract (reserves already scaled by precision)."""

    pair_id: int
    token_a: str  # full asset identifier, e.g. DGKO-CXVJ
    token_b: str
    reserve_a: float = 0.0
    reserve_b: float = 0.0
    is_active: bool = False


class Pair(BaseModel):
    """Usable graph edge: active pool with positive reserves on both sides."""

    pair_id: int
    token_a: str  # normalized symbol
    token_b: str
    reserve_a: float = Field(..., gt=0)
    reserve_b: float = Field(..., gt=0)

    @property
    def label(self) -> str:
        return f"{self.token_a}/{self.token_b}"
