"""Textual TUI dashboard - anchor status and live price table."""

from __future__ import annotations

from typing import Any

import structlog
from textual.app import App, ComposeResult
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Static

from poolprice.models import PriceTable
from poolprice.service import PriceService

log = structlog.get_logger(__name__)

COLUMNS = ("Token", "USD", "Native", "Depth", "Via", "24h", "7d")


def _pct(value: float | None) -> str:
    return f"{value:+.2f}%" if value is not None else "-"


class StatusPanel(Static):
    """Anchor price, table source and last update."""

    status = reactive("Starting...")
    anchor = reactive("-")
    priced = reactive(0)
    updated_at = reactive("-")

    def render(self) -> str:
        return (
            f"[bold]Status[/] {self.status}  |  "
            f"Anchor: {self.anchor}  |  "
            f"Priced: {self.priced}  |  "
            f"Updated: {self.updated_at}"
        )


class PriceTableView(DataTable):
    """One row per priced token, shallowest first."""

    def on_mount(self) -> None:
        self.add_columns(*COLUMNS)

    def refresh_rows(self, table: PriceTable) -> None:
        self.clear()
        for p in sorted(table.prices.values(), key=lambda p: (p.depth, p.symbol)):
            self.add_row(
                p.symbol,
                f"{p.price_usd:.8f}",
                f"{p.price_native:.8f}",
                str(p.depth),
                p.derived_from or "oracle",
                _pct(p.price_change_24h),
                _pct(p.price_change_7d),
            )


class PoolPriceTUI(App[None]):
    """poolprice TUI - periodically recomputed price table."""

    TITLE = "poolprice"
    BINDINGS = [("q", "quit", "Quit"), ("r", "refresh", "Refresh")]

    def __init__(self, service: PriceService, interval: float = 30.0, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service
        self._interval = interval

    def compose(self) -> ComposeResult:
        yield Header()
        yield StatusPanel(id="status")
        yield PriceTableView(id="prices")
        yield Footer()

    async def on_mount(self) -> None:
        await self._reload(force_refresh=False)
        self.set_interval(self._interval, self._reload)

    async def action_refresh(self) -> None:
        await self._reload(force_refresh=True)

    async def _reload(self, force_refresh: bool = False) -> None:
        status = self.query_one(StatusPanel)
        status.status = "Refreshing..."
        try:
            table = await self._service.get_prices(force_refresh=force_refresh)
        except Exception as e:
            log.error("tui_refresh_failed", error=str(e))
            status.status = f"Error: {e}"
            return
        anchor = table.get(table.anchor_symbol)
        status.status = f"OK ({table.source})"
        status.anchor = f"{table.anchor_symbol} ${anchor.price_usd:.6f}" if anchor else table.anchor_symbol
        status.priced = len(table.prices)
        status.updated_at = table.updated_at
        self.query_one(PriceTableView).refresh_rows(table)

    async def on_unmount(self) -> None:
        await self._service.aclose()


def run_tui(settings: Any, interval: float = 30.0) -> None:
    """Entry point: wire the price service from settings and run the TUI."""
    service = PriceService.from_settings(settings)
    app = PoolPriceTUI(service, interval=interval)
    app.run()
