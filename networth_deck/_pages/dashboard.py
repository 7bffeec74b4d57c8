"""dashboard.py

Landing page: the **net-worth summary** served by ``GET /net-worth``.

Shows the headline net worth, the per-asset-class metrics and an
allocation donut. Everything the donut shows is computed by
`allocation`, a pure function so the bucket maths can be tested
without Streamlit.
"""

from __future__ import annotations

# Third‑party ------------------------------------------------------------------
import pandas as pd
import plotly.express as px
import requests
import streamlit as st

# First‑party / project --------------------------------------------------------
from networth_deck.services import api
from networth_deck.services.model import NetWorthSummary
from networth_deck.utils.logger import get_logger
from ._charts import chart_guard, finite_frame
from ._helpers import format_compact_number, format_currency, format_date, show_metrics_bulk

logger = get_logger(__name__)

NO_DATA_COLOR = "#9CA3AF"

# name, summary field, colour
BUCKETS = (
    ("Direct Stocks", "stock_holdings_value", "#3B82F6"),
    ("Equity Comp", "vested_equity_value", "#8B5CF6"),
    ("Real Estate", "real_estate_equity", "#10B981"),
    ("Cash Holdings", "cash_holdings_value", "#22C55E"),
    ("Crypto", "crypto_holdings_value", "#F97316"),
)

# -----------------------------------------------------------------------------
# Allocation maths
# -----------------------------------------------------------------------------

def allocation(summary: NetWorthSummary) -> list[dict]:
    """Non-empty asset buckets with whole-number percentages summing to 100.

    *Other* is whatever part of ``total_assets`` the named buckets do not
    explain. Without any positive bucket a single *No Data* slice is
    returned.
    """
    rows = [
        {"name": name, "amount": max(getattr(summary, field) or 0.0, 0.0), "color": color}
        for name, field, color in BUCKETS
    ]
    other = summary.total_assets - sum(r["amount"] for r in rows)
    rows.append({"name": "Other", "amount": max(other, 0.0), "color": "#F59E0B"})
    rows = [r for r in rows if r["amount"] > 0]
    if not rows:
        return [{"name": "No Data", "amount": 0.0, "color": NO_DATA_COLOR, "percentage": 100}]

    total = sum(r["amount"] for r in rows)
    running = 0
    for i, row in enumerate(rows):
        if i == len(rows) - 1:
            row["percentage"] = 100 - running
        else:
            row["percentage"] = round(row["amount"] / total * 100)
            running += row["percentage"]
    return rows


def load_summary() -> NetWorthSummary | None:
    try:
        return NetWorthSummary.model_validate(api.get_net_worth())
    except (requests.RequestException, TypeError, ValueError) as exc:
        logger.error("❌ Failed to load net worth: %s", exc, exc_info=True)
        return None

# -----------------------------------------------------------------------------
# Page
# -----------------------------------------------------------------------------

def render() -> None:
    st.title("📊 Net Worth")
    summary = load_summary()
    if summary is None:
        st.error("Failed to load net worth data. Is the backend running?")
        st.button("Retry", key="dashboard-retry")
        return

    st.metric("Net Worth", format_currency(summary.net_worth))
    st.caption(
        f"{format_compact_number(summary.total_assets)} in assets · "
        f"last updated {format_date(summary.last_updated, include_time=True)}"
    )

    show_metrics_bulk([
        {"label": "Total Assets", "value": format_currency(summary.total_assets)},
        {"label": "Liabilities", "value": format_currency(summary.total_liabilities)},
        {"label": "Vested Equity", "value": format_currency(summary.vested_equity_value)},
        {"label": "Future Value", "value": format_currency(summary.unvested_equity_value),
         "help": "Unvested equity"},
    ])
    show_metrics_bulk([
        {"label": "Real Estate Equity", "value": format_currency(summary.real_estate_equity)},
        {"label": "Total Cash", "value": format_currency(summary.cash_holdings_value)},
        {"label": "Crypto Holdings", "value": format_currency(summary.crypto_holdings_value)},
        {"label": "Stock Holdings", "value": format_currency(summary.stock_holdings_value)},
    ])

    st.subheader("Asset allocation")
    with chart_guard("dashboard-allocation") as box:
        df = finite_frame(pd.DataFrame(allocation(summary)), ["amount", "percentage"])
        fig = px.pie(
            df, names="name", values="percentage", hole=0.45,
            color="name", color_discrete_map=dict(zip(df["name"], df["color"])),
            hover_data={"amount": ":,.0f"},
        )
        fig.update_layout(height=420, margin=dict(t=20, b=20, l=20, r=20))
        box.plotly_chart(fig, use_container_width=True)
