"""cash_holdings.py

Streamlit page for **cash holdings** – checking, savings, money-market,
CDs and brokerage sweep accounts.

Main features
-------------
* Cards with balance, interest rate, monthly contribution and an activity
  status (*Dormant* after 90 days without update, *High Yield* at ≥ 2 %).
* Summary metrics: total cash, number of accounts, average balance and
  distinct institutions.
* Charts: balance by account type (donut) and by institution (bar).
* Interest helpers: monthly interest and a 12-month projection that
  compounds monthly with an optional contribution.
"""

from __future__ import annotations

# Standard library -------------------------------------------------------------
from datetime import datetime, timezone

# Third‑party ------------------------------------------------------------------
import pandas as pd
import plotly.express as px
import streamlit as st

# First‑party / project --------------------------------------------------------
from networth_deck.services import api
from networth_deck.services.crud import AssetCRUDConfig
from networth_deck.services.model import CashHolding
from networth_deck.services.transformers import transform_cash_holdings
from ._charts import finite_frame, plot
from ._colors import account_type_info, chart_palette, institution_type
from ._helpers import format_currency, format_percentage, format_relative_time, show_metrics_bulk
from .asset_page import AssetPageConfig, render_asset_page

# -----------------------------------------------------------------------------
# Interest maths
# -----------------------------------------------------------------------------

def monthly_interest(balance: float, annual_rate: float) -> float:
    """Interest earned in one month at *annual_rate* percent."""
    return balance * (annual_rate / 100) / 12


def annual_projection(balance: float, annual_rate: float, monthly_contribution: float = 0.0) -> float:
    """Balance after 12 months: contribution added, then monthly compounding."""
    monthly_rate = annual_rate / 100 / 12
    projected = balance
    for _ in range(12):
        projected = (projected + monthly_contribution) * (1 + monthly_rate)
    return projected


def account_status(holding: CashHolding, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    try:
        updated = datetime.fromisoformat(holding.updated_at.replace("Z", "+00:00"))
    except ValueError:
        updated = None
    if updated is not None and updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)
    days = (now - updated).days if updated else None

    if days is not None and days > 90:
        return "Dormant"
    if (holding.interest_rate or 0) >= 2:
        return "High Yield"
    if days is not None and days <= 30:
        return "Active"
    return "Standard"

# -----------------------------------------------------------------------------
# Render hooks
# -----------------------------------------------------------------------------

def _card(h: CashHolding) -> None:
    info = account_type_info(h.account_type)
    st.markdown(f"### {info['icon']} {h.institution_name}")
    st.caption(
        f"{h.account_name} ({h.account_type.replace('_', ' ')}) · "
        f"{institution_type(h.institution_name)} · {info['risk']}"
    )
    if h.account_number_last4:
        st.caption(f"****{h.account_number_last4}")
    st.metric("Current Balance", format_currency(h.current_balance, h.currency, 2))

    left, right = st.columns(2)
    if h.interest_rate:
        left.metric("Interest Rate", format_percentage(h.interest_rate, 2),
                    f"{format_currency(monthly_interest(h.current_balance, h.interest_rate), h.currency, 2)}/mo",
                    delta_color="off")
    if h.monthly_contribution:
        right.metric("Monthly Contribution", format_currency(h.monthly_contribution, h.currency))
    if h.interest_rate:
        projected = annual_projection(h.current_balance, h.interest_rate, h.monthly_contribution or 0)
        st.caption(f"12-month projection: **{format_currency(projected, h.currency)}**")
    st.caption(f"{account_status(h)} · updated {format_relative_time(h.updated_at)}")


def _row(h: CashHolding) -> dict:
    return {
        "Institution": h.institution_name,
        "Account": h.account_name,
        "Type": h.account_type.replace("_", " ").title(),
        "Balance": format_currency(h.current_balance, h.currency, 2),
        "Rate": format_percentage(h.interest_rate, 2) if h.interest_rate else "--",
        "Status": account_status(h),
    }


def _summary(holdings: list[CashHolding], _raw) -> None:
    total = sum(h.current_balance for h in holdings)
    count = len(holdings)
    show_metrics_bulk([
        {"label": "Total Cash", "value": format_currency(total)},
        {"label": "Accounts", "value": count},
        {"label": "Average Balance", "value": format_currency(total / count if count else 0)},
        {"label": "Institutions", "value": len({h.institution_name for h in holdings})},
    ])


def _frame(holdings: list[CashHolding]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "institution": h.institution_name or "Unknown",
                "account_type": (h.account_type or "other").replace("_", " ").title(),
                "balance": h.current_balance,
            }
            for h in holdings
        ]
    )
    return finite_frame(df, ["balance"])


def _charts(holdings: list[CashHolding]) -> None:
    df = _frame(holdings)
    by_type = df.groupby("account_type", as_index=False)["balance"].sum()
    by_inst = df.groupby("institution", as_index=False)["balance"].sum().sort_values("balance", ascending=False)

    left, right = st.columns(2)
    with left:
        st.subheader("By account type")
        plot("cash-by-type", lambda: px.pie(
            by_type, names="account_type", values="balance", hole=0.4,
            color_discrete_sequence=chart_palette(len(by_type)),
        ))
    with right:
        st.subheader("By institution")
        plot("cash-by-institution", lambda: px.bar(
            by_inst, x="institution", y="balance",
            color_discrete_sequence=chart_palette(1),
        ))

# -----------------------------------------------------------------------------
# Page configuration
# -----------------------------------------------------------------------------

CONFIG: AssetPageConfig[CashHolding] = AssetPageConfig(
    key="cash_holdings",
    title="Cash Holdings",
    description="Manage your cash accounts, savings, and liquid investments",
    icon="💰",
    crud=AssetCRUDConfig(
        entity_name="Cash Holding",
        fetch_all=api.cash_holdings.get_all,
        create=api.cash_holdings.create,
        update=api.cash_holdings.update,
        delete=api.cash_holdings.delete,
        fetch_schema=lambda: api.get_schema("cash_holdings"),
        transform_data=transform_cash_holdings,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_charts=_charts,
    item_label=lambda h: f"{h.institution_name} – {h.account_name}",
    get_form_data=lambda h: {
        "institution_name": h.institution_name,
        "account_name": h.account_name,
        "account_type": h.account_type,
        "current_balance": h.current_balance,
        "interest_rate": h.interest_rate,
        "monthly_contribution": h.monthly_contribution,
        "account_number_last4": h.account_number_last4,
        "currency": h.currency or "USD",
        "notes": h.notes,
    },
    supported_view_modes=("grid", "list", "charts"),
)


def render() -> None:
    render_asset_page(CONFIG)
