"""real_estate.py

Streamlit page for **real estate** – homes, rentals and land.

Each card shows the property's value, mortgage and equity (value − mortgage);
rentals also show their monthly income and gross yield. The summary uses
``summarize_real_estate`` and the charts compare value with equity per
property.
"""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from networth_deck.services import api
from networth_deck.services.crud import AssetCRUDConfig
from networth_deck.services.model import RealEstate
from networth_deck.services.transformers import summarize_real_estate, transform_real_estate
from ._charts import finite_frame, plot
from ._colors import chart_palette
from ._helpers import format_currency, format_number, format_percentage, show_metrics_bulk
from .asset_page import AssetPageConfig, render_asset_page

PROPERTY_ICONS = {
    "single_family": "🏠",
    "condo": "🏢",
    "townhouse": "🏘️",
    "multi_family": "🏬",
    "land": "🌳",
    "commercial": "🏪",
}


def address(p: RealEstate) -> str:
    city_line = " ".join(part for part in (p.state, p.zip_code) if part)
    return ", ".join(part for part in (p.street_address, p.city, city_line) if part)


def gross_yield(p: RealEstate) -> float:
    """Annual rent over current value, in percent."""
    if not p.rental_income_monthly or p.current_value <= 0:
        return 0.0
    return p.rental_income_monthly * 12 / p.current_value * 100


def appreciation(p: RealEstate) -> float | None:
    if not p.purchase_price:
        return None
    return (p.current_value - p.purchase_price) / p.purchase_price * 100


def _card(p: RealEstate) -> None:
    icon = PROPERTY_ICONS.get(p.property_type, "🏠")
    st.markdown(f"### {icon} {p.property_name or 'Property'}")
    st.caption(address(p) or p.property_type.replace("_", " ").title())
    gain = appreciation(p)
    st.metric("Current Value", format_currency(p.current_value),
              format_percentage(gain) if gain is not None else None)
    left, right = st.columns(2)
    left.metric("Mortgage", format_currency(p.outstanding_mortgage))
    right.metric("Equity", format_currency(p.equity))
    if p.rental_income_monthly:
        st.caption(f"Rent {format_currency(p.rental_income_monthly)}/mo · "
                   f"yield {format_percentage(gross_yield(p), 2)}")
    if p.property_size_sqft:
        st.caption(f"{format_number(p.property_size_sqft)} sqft")


def _row(p: RealEstate) -> dict:
    return {
        "Property": p.property_name,
        "Type": p.property_type.replace("_", " ").title(),
        "Address": address(p),
        "Value": format_currency(p.current_value),
        "Mortgage": format_currency(p.outstanding_mortgage),
        "Equity": format_currency(p.equity),
    }


def _summary(properties: list[RealEstate], _raw) -> None:
    totals = summarize_real_estate(properties)
    show_metrics_bulk([
        {"label": "Total Value", "value": format_currency(totals["total_value"])},
        {"label": "Total Equity", "value": format_currency(totals["total_equity"])},
        {"label": "Total Mortgage", "value": format_currency(totals["total_mortgage"])},
        {"label": "Properties", "value": totals["count"]},
    ])


def _figure(df: pd.DataFrame) -> go.Figure:
    value_color, equity_color = chart_palette(2)
    fig = go.Figure()
    fig.add_bar(x=df["property"], y=df["value"], name="Value", marker_color=value_color)
    fig.add_bar(x=df["property"], y=df["equity"], name="Equity", marker_color=equity_color)
    fig.update_layout(barmode="group")
    return fig


def _charts(properties: list[RealEstate]) -> None:
    df = pd.DataFrame(
        [{"property": p.property_name or f"#{p.id}", "value": p.current_value, "equity": p.equity}
         for p in properties]
    )
    df = finite_frame(df, ["value", "equity"])
    st.subheader("Value vs equity")
    plot("real-estate-equity", lambda: _figure(df))


CONFIG: AssetPageConfig[RealEstate] = AssetPageConfig(
    key="real_estate",
    title="Real Estate",
    description="Manage your property portfolio and track equity",
    icon="🏠",
    crud=AssetCRUDConfig(
        entity_name="Property",
        fetch_all=api.real_estate.get_raw,
        create=api.real_estate.create,
        update=api.real_estate.update,
        delete=api.real_estate.delete,
        fetch_schema=lambda: api.get_schema("real_estate"),
        transform_data=transform_real_estate,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_charts=_charts,
    item_label=lambda p: p.property_name or f"Property #{p.id}",
    get_form_data=lambda p: {
        "property_name": p.property_name,
        "property_type": p.property_type,
        "street_address": p.street_address,
        "city": p.city,
        "state": p.state,
        "zip_code": p.zip_code,
        "current_value": p.current_value,
        "purchase_price": p.purchase_price,
        "purchase_date": p.purchase_date,
        "outstanding_mortgage": p.outstanding_mortgage,
        "property_size_sqft": p.property_size_sqft,
        "rental_income_monthly": p.rental_income_monthly,
        "notes": p.notes,
    },
    supported_view_modes=("grid", "list", "charts"),
    plural="Properties",
)


def render() -> None:
    render_asset_page(CONFIG)
