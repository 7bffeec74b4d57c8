"""Registry of Streamlit pages so main.py can route dynamically."""
from typing import Callable, NamedTuple

from . import (
    api_status,
    asset_categories,
    cash_holdings,
    crypto_holdings,
    dashboard,
    equity,
    manual_entries,
    other_assets,
    real_estate,
    stocks,
)


class Page(NamedTuple):
    key: str
    render: Callable[[], None]
    live: bool = False  # auto-refreshed (read-only pages only)


# Sidebar label → page, in navigation order
registry: dict[str, Page] = {
    "Dashboard": Page("dashboard", dashboard.render, live=True),
    "Stocks": Page(stocks.CONFIG.key, stocks.render),
    "Equity": Page(equity.CONFIG.key, equity.render),
    "Real Estate": Page(real_estate.CONFIG.key, real_estate.render),
    "Cash": Page(cash_holdings.CONFIG.key, cash_holdings.render),
    "Crypto": Page(crypto_holdings.CONFIG.key, crypto_holdings.render),
    "Other Assets": Page(other_assets.CONFIG.key, other_assets.render),
    "Asset Categories": Page(asset_categories.CONFIG.key, asset_categories.render),
    "Manual Entries": Page(manual_entries.CONFIG.key, manual_entries.render),
    "API": Page("api_status", api_status.render, live=True),
}

__all__ = ["Page", "registry"]
