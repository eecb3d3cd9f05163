"""FastAPI backend for the price table."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from poolprice.api.schemas import ErrorResponse, HealthResponse, PairItem, PairsResponse
from poolprice.config import get_settings
from poolprice.config.settings import configure_logging
from poolprice.models import PriceTable, TokenPrice
from poolprice.service import PriceService

# Set by run_api() before uvicorn imports the app.
_config_profile: str | None = None

DEFAULT_CACHE_CONTROL = "public, s-maxage=60, stale-while-revalidate=300"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings(_config_profile)
    configure_logging(settings)
    service = PriceService.from_settings(settings)
    app.state.service = service
    app.state.cache_control = settings.cache_control
    try:
        yield
    finally:
        await service.aclose()


app = FastAPI(
    title="poolprice API",
    description="Token prices derived from DEX pool reserves, anchored to an oracle price and stablecoin pegs.",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def get_service(request: Request) -> PriceService:
    return request.app.state.service


def _cache_control(request: Request) -> str:
    return getattr(request.app.state, "cache_control", DEFAULT_CACHE_CONTROL)


def _error_json(code: str, detail: str, status_code: int = 404) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, code=code).model_dump(),
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/prices", response_model=PriceTable)
async def prices(
    request: Request,
    response: Response,
    refresh: bool = Query(False, description="Drop the cached table and recompute"),
    debug: bool = Query(False, description="Include propagation diagnostics (fresh tables only)"),
    service: PriceService = Depends(get_service),
) -> PriceTable:
    """Full price table. Tokens absent from `prices` have no known price."""
    table = await service.get_prices(force_refresh=refresh, include_debug=debug)
    response.headers["Cache-Control"] = _cache_control(request)
    return table


@app.get(
    "/prices/{symbol}",
    response_model=TokenPrice,
    responses={404: {"description": "No price for this token", "model": ErrorResponse}},
)
async def price_for_symbol(
    symbol: str,
    request: Request,
    response: Response,
    service: PriceService = Depends(get_service),
):
    """Price for one token (symbol or asset identifier). 404 when the token cannot be priced."""
    entry = await service.get_price(symbol)
    if entry is None:
        return _error_json("not_found", f"Token price not available: {symbol}")
    response.headers["Cache-Control"] = _cache_control(request)
    return entry


@app.get("/pairs", response_model=PairsResponse)
async def pairs(service: PriceService = Depends(get_service)) -> PairsResponse:
    """Usable pool edges (active, both reserves positive), in pair-id order."""
    edges = await service.get_pairs()
    items = [
        PairItem(
            pair_id=p.pair_id,
            token_a=p.token_a,
            token_b=p.token_b,
            reserve_a=p.reserve_a,
            reserve_b=p.reserve_b,
            price_a_in_b=p.reserve_b / p.reserve_a,
        )
        for p in edges
    ]
    return PairsResponse(pairs=items, total=len(items))


def run_api(host: str = "127.0.0.1", port: int = 8000, profile: str | None = None) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn
    uvicorn.run("poolprice.api.main:app", host=host, port=port, reload=False)
