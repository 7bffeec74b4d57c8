"""equity.py

Streamlit page for **equity compensation** – RSUs, RSAs and stock options
synced from the brokerage plugins.

Grants are created by the sync, so the page offers no *Add* button; grants
can still be corrected or removed. Values are intrinsic: options are worth
``max(price − strike, 0)`` per share, restricted stock the full price.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import streamlit as st

from networth_deck.services import api
from networth_deck.services.crud import AssetCRUDConfig
from networth_deck.services.model import EquityGrant
from networth_deck.services.transformers import transform_equity_grants
from ._charts import finite_frame, plot
from ._colors import chart_palette
from ._helpers import format_currency, format_date, format_number, format_percentage, show_metrics_bulk
from .asset_page import AssetPageConfig, render_asset_page

GRANT_LABELS = {
    "rsu": "RSU",
    "rsa": "RSA",
    "stock_option": "Stock Option",
    "stock_options": "Stock Option",
    "espp": "ESPP",
}


def grant_label(grant_type: str) -> str:
    return GRANT_LABELS.get(grant_type.lower(), grant_type.replace("_", " ").title() or "Grant")


def vested_ratio(g: EquityGrant) -> float:
    """Share of the grant already vested, in percent."""
    if g.total_shares <= 0:
        return 0.0
    return min(g.vested_shares / g.total_shares * 100, 100.0)


def _card(g: EquityGrant) -> None:
    st.markdown(f"### {g.company_symbol or 'Equity'} {grant_label(g.grant_type)}")
    st.caption(f"Granted {format_date(g.grant_date)} · source {g.data_source or 'manual'}")
    st.metric("Vested Value", format_currency(g.vested_value, decimals=2))
    st.progress(vested_ratio(g) / 100, text=f"{format_percentage(vested_ratio(g))} vested")
    st.write(
        f"{format_number(g.vested_shares)} / {format_number(g.total_shares)} shares"
        f" @ {format_currency(g.current_price, decimals=2)}"
    )
    if g.strike_price:
        st.caption(f"Strike {format_currency(g.strike_price, decimals=2)}")
    st.caption(f"Unvested: {format_currency(g.unvested_value)}")


def _row(g: EquityGrant) -> dict:
    return {
        "Symbol": g.company_symbol,
        "Type": grant_label(g.grant_type),
        "Total": format_number(g.total_shares),
        "Vested": format_number(g.vested_shares),
        "Unvested": format_number(g.unvested_shares),
        "Strike": format_currency(g.strike_price, decimals=2) if g.strike_price else "--",
        "Vested Value": format_currency(g.vested_value),
        "Unvested Value": format_currency(g.unvested_value),
    }


def _summary(grants: list[EquityGrant], _raw) -> None:
    show_metrics_bulk([
        {"label": "Vested Value", "value": format_currency(sum(g.vested_value for g in grants))},
        {"label": "Unvested Value", "value": format_currency(sum(g.unvested_value for g in grants))},
        {"label": "Grants", "value": len(grants)},
    ])


def _charts(grants: list[EquityGrant]) -> None:
    df = pd.DataFrame(
        [
            {"grant": f"{g.company_symbol} {grant_label(g.grant_type)} #{g.id}",
             "status": status, "value": value}
            for g in grants
            for status, value in (("Vested", g.vested_value), ("Unvested", g.unvested_value))
        ]
    )
    df = finite_frame(df, ["value"])
    st.subheader("Vested vs unvested")
    plot("equity-vesting", lambda: px.bar(
        df, x="grant", y="value", color="status", barmode="stack",
        color_discrete_sequence=chart_palette(2),
    ))


CONFIG: AssetPageConfig[EquityGrant] = AssetPageConfig(
    key="equity",
    title="Equity Compensation",
    description="Track your RSUs, stock options and other equity grants",
    icon="🏢",
    crud=AssetCRUDConfig(
        entity_name="Equity Grant",
        fetch_all=api.equity.get_all,
        update=api.equity.update,
        delete=api.equity.delete,
        fetch_schema=lambda: api.get_schema("morgan_stanley"),
        transform_data=transform_equity_grants,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_charts=_charts,
    item_label=lambda g: f"{g.company_symbol} {grant_label(g.grant_type)}",
    get_form_data=lambda g: {
        "company_symbol": g.company_symbol,
        "grant_type": g.grant_type,
        "total_shares": g.total_shares,
        "vested_shares": g.vested_shares,
        "strike_price": g.strike_price,
        "grant_date": g.grant_date,
        "vest_start_date": g.vest_start_date,
    },
    supported_view_modes=("grid", "list", "charts"),
    enable_add=False,
    empty_hint="No equity grants yet. They appear here once a brokerage sync has run.",
)


def render() -> None:
    render_asset_page(CONFIG)
