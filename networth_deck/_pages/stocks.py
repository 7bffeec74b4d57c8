"""stocks.py

Streamlit page for **stock holdings** across every brokerage account.

Besides the per-account holdings handled by the generic asset page, the
*charts* view shows the backend's consolidation by symbol (shares, value
and unrealised gains summed over accounts).
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import requests
import streamlit as st

from networth_deck.services import api
from networth_deck.services.crud import AssetCRUD, AssetCRUDConfig
from networth_deck.services.model import StockConsolidation, StockHolding
from networth_deck.services.transformers import to_float, to_list, to_str, transform_stock_holdings
from networth_deck.utils.logger import get_logger
from ._charts import chart_guard, finite_frame, plot
from ._colors import chart_palette
from ._helpers import format_currency, format_number, show_metrics_bulk
from .asset_page import AssetPageConfig, render_asset_page

logger = get_logger(__name__)


def consolidate(raw) -> list[StockConsolidation]:
    return [
        StockConsolidation(
            symbol=to_str(row.get("symbol")).upper(),
            company_name=to_str(row.get("company_name")),
            total_shares=to_float(row.get("total_shares")),
            total_value=to_float(row.get("total_value")),
            current_price=to_float(row.get("current_price")),
            unrealized_gains=to_float(row.get("unrealized_gains")),
        )
        for row in to_list(raw)
        if isinstance(row, dict) and row.get("symbol")
    ]


def _refresh_prices(crud: AssetCRUD) -> None:
    try:
        summary = api.refresh_prices(force=True)
    except requests.RequestException as exc:
        logger.error("❌ Failed to refresh stock prices: %s", exc, exc_info=True)
        st.toast("Price refresh failed – showing last known prices.", icon="⚠️")
    else:
        logger.info("🔄 Price refresh summary: %s", summary)
    crud.refresh_items()


def _toolbar(crud: AssetCRUD) -> None:
    st.button("💱 Prices", key="stocks-refresh-prices", on_click=_refresh_prices,
              args=(crud,), help="Force a price refresh for every symbol", use_container_width=True)


def _card(s: StockHolding) -> None:
    st.markdown(f"### {s.symbol}")
    st.caption(" · ".join(p for p in (s.company_name, s.institution_name or s.data_source) if p))
    st.metric("Market Value", format_currency(s.value, decimals=2))
    st.write(f"{format_number(s.shares_owned, 0, 4)} shares @ {format_currency(s.current_price, decimals=2)}")
    if s.cost_basis:
        gain = s.value - s.cost_basis * s.shares_owned
        st.caption(f"Unrealised: {format_currency(gain, decimals=2)}")


def _row(s: StockHolding) -> dict:
    return {
        "Symbol": s.symbol,
        "Company": s.company_name,
        "Shares": format_number(s.shares_owned, 0, 4),
        "Price": format_currency(s.current_price, decimals=2),
        "Value": format_currency(s.value, decimals=2),
        "Source": s.data_source,
    }


def market_label() -> str:
    try:
        status = api.get_market_status()
    except requests.RequestException as exc:
        logger.warning("Market status unavailable: %s", exc)
        return "--"
    return "🟢 Open" if isinstance(status, dict) and status.get("is_open") else "🔴 Closed"


def _summary(stocks: list[StockHolding], _raw) -> None:
    show_metrics_bulk([
        {"label": "Portfolio Value", "value": format_currency(sum(s.value for s in stocks))},
        {"label": "Positions", "value": len(stocks)},
        {"label": "Symbols", "value": len({s.symbol for s in stocks})},
        {"label": "Market", "value": market_label()},
    ])


def _charts(stocks: list[StockHolding]) -> None:
    with chart_guard("stocks-consolidated") as box:
        try:
            rows = consolidate(api.get_consolidated_stocks())
        except requests.RequestException as exc:
            logger.error("❌ Failed to load consolidated stocks: %s", exc, exc_info=True)
            box.warning("Consolidated view unavailable.")
            rows = []
        if rows:
            df = finite_frame(pd.DataFrame([r.model_dump() for r in rows]),
                              ["total_shares", "total_value", "current_price", "unrealized_gains"])
            box.subheader("Consolidated by symbol")
            box.dataframe(df, hide_index=True, use_container_width=True)

    df = finite_frame(pd.DataFrame([{"symbol": s.symbol, "value": s.value} for s in stocks]), ["value"])
    alloc = df.groupby("symbol", as_index=False)["value"].sum().sort_values("value", ascending=False)
    st.subheader("Allocation")
    plot("stocks-allocation", lambda: px.bar(
        alloc, x="symbol", y="value", color="symbol",
        color_discrete_sequence=chart_palette(len(alloc)),
    ))


CONFIG: AssetPageConfig[StockHolding] = AssetPageConfig(
    key="stocks",
    title="Stock Holdings",
    description="View and manage your stock portfolio across all platforms",
    icon="📈",
    crud=AssetCRUDConfig(
        entity_name="Stock Holding",
        fetch_all=api.stocks.get_all,
        create=api.stocks.create,
        update=api.stocks.update,
        delete=api.stocks.delete,
        fetch_schema=lambda: api.get_schema("stock_holding"),
        transform_data=transform_stock_holdings,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_charts=_charts,
    render_toolbar=_toolbar,
    item_label=lambda s: f"{s.symbol} ({s.shares_owned:g} sh)",
    get_form_data=lambda s: {
        "symbol": s.symbol,
        "company_name": s.company_name,
        "shares_owned": s.shares_owned,
        "cost_basis": s.cost_basis,
        "institution_name": s.institution_name,
    },
    supported_view_modes=("list", "grid", "charts"),
    grid_columns=4,
)


def render() -> None:
    render_asset_page(CONFIG)
