"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. not_found")


# --- Pairs ---
class PairItem(BaseModel):
    pair_id: int
    token_a: str
    token_b: str
    reserve_a: float
    reserve_b: float
    price_a_in_b: float = Field(..., description="Units of token_b per 1 token_a implied by reserves")


class PairsResponse(BaseModel):
    pairs: list[PairItem]
    total: int
