"""other_assets.py

Streamlit page for **other assets** – vehicles, collectibles, jewellery …
anything that belongs to a user-defined asset category.

Main features
-------------
* Sidebar category filter; the list is re-fetched with ``?category=`` and
  the add / edit form switches to the category's own schema so its custom
  fields show up.
* Cards with value, amount owed and equity plus the category colour chip.
* Charts: value by category (donut) and equity per asset (bar).
"""

from __future__ import annotations

# Standard library -------------------------------------------------------------
from typing import Any

# Third‑party ------------------------------------------------------------------
import pandas as pd
import plotly.express as px
import requests
import streamlit as st

# First‑party / project --------------------------------------------------------
from networth_deck.config import settings
from networth_deck.services import api
from networth_deck.services.crud import AssetCRUD, AssetCRUDConfig
from networth_deck.services.model import AssetCategory, OtherAsset
from networth_deck.services.transformers import transform_asset_categories, transform_other_assets
from networth_deck.services.validation import flatten_custom_fields
from networth_deck.utils.logger import get_logger
from ._charts import finite_frame, plot
from ._colors import chart_palette, color_chip_html
from ._helpers import format_currency, format_date, show_metrics_bulk
from .asset_page import STATE_PREFIX, AssetPageConfig, render_asset_page

logger = get_logger(__name__)

PAGE_KEY = "other_assets"
CATEGORY_KEY = "other_assets-category"

# -----------------------------------------------------------------------------
# Categories
# -----------------------------------------------------------------------------

@st.cache_data(ttl=settings()["REFRESH_SECONDS"] or 60, show_spinner=False)
def load_categories() -> list[AssetCategory]:
    """Active categories for the filter; empty when the API is unreachable."""
    try:
        raw = api.asset_categories.get_all()
    except requests.RequestException as exc:
        logger.error("❌ Failed to load asset categories: %s", exc, exc_info=True)
        return []
    return [c for c in transform_asset_categories(raw) if c.is_active]


def selected_category() -> int | None:
    return st.session_state.get(CATEGORY_KEY)


def _fetch_assets() -> list:
    category = selected_category()
    return api.get_other_assets(str(category) if category else None)


def _fetch_schema() -> Any:
    category = selected_category()
    if category:
        return api.get_schema_for_category("other_assets", category)
    return api.get_schema("other_assets")


def _create(data: dict) -> Any:
    category = selected_category()
    if category and "asset_category_id" not in data:
        data = {**data, "asset_category_id": category}
    return api.process_manual_entry("other_assets", data)


def _on_category_change() -> None:
    crud: AssetCRUD | None = st.session_state.get(f"{STATE_PREFIX}{PAGE_KEY}")
    if crud is None:
        return
    crud.close_modals()
    crud.load_items()
    category = selected_category()
    if category:
        crud.load_schema_for_category(category)
    else:
        crud.load_schema()


def _category_filter() -> None:
    categories = load_categories()
    names = {c.id: f"{c.icon} {c.name}".strip() for c in categories}
    st.sidebar.header("Filters")
    st.sidebar.selectbox(
        "Category", [None, *names], format_func=lambda i: "All categories" if i is None else names[i],
        key=CATEGORY_KEY, on_change=_on_category_change,
    )

# -----------------------------------------------------------------------------
# Render hooks
# -----------------------------------------------------------------------------

def category_name(a: OtherAsset) -> str:
    return a.category.name if a.category and a.category.name else "Uncategorised"


def _card(a: OtherAsset) -> None:
    st.markdown(f"### {a.category.icon if a.category else ''} {a.asset_name}".strip())
    if a.category:
        st.markdown(color_chip_html(a.category.color or "#3B82F6", category_name(a)),
                    unsafe_allow_html=True)
    st.metric("Current Value", format_currency(a.current_value))
    if a.amount_owed:
        left, right = st.columns(2)
        left.metric("Owed", format_currency(a.amount_owed))
        right.metric("Equity", format_currency(a.equity))
    for name, value in list(a.custom_fields.items())[:3]:
        st.caption(f"{name.replace('_', ' ').title()}: {value}")
    st.caption(f"{a.valuation_method.title()} valuation · {format_date(a.last_updated)}")


def _row(a: OtherAsset) -> dict:
    return {
        "Asset": a.asset_name,
        "Category": category_name(a),
        "Value": format_currency(a.current_value),
        "Owed": format_currency(a.amount_owed or 0),
        "Equity": format_currency(a.equity),
        "Valuation": a.valuation_method,
    }


def _summary(assets: list[OtherAsset], _raw) -> None:
    show_metrics_bulk([
        {"label": "Total Value", "value": format_currency(sum(a.current_value for a in assets))},
        {"label": "Total Equity", "value": format_currency(sum(a.equity for a in assets))},
        {"label": "Assets", "value": len(assets)},
        {"label": "Categories", "value": len({category_name(a) for a in assets})},
    ])


def _charts(assets: list[OtherAsset]) -> None:
    df = finite_frame(
        pd.DataFrame([{"category": category_name(a), "asset": a.asset_name,
                       "value": a.current_value, "equity": a.equity} for a in assets]),
        ["value", "equity"],
    )
    by_category = df.groupby("category", as_index=False)["value"].sum()
    left, right = st.columns(2)
    with left:
        st.subheader("By category")
        plot("other-assets-by-category", lambda: px.pie(
            by_category, names="category", values="value", hole=0.4,
            color_discrete_sequence=chart_palette(len(by_category)),
        ))
    with right:
        st.subheader("Equity per asset")
        plot("other-assets-equity", lambda: px.bar(
            df.sort_values("equity", ascending=False), x="asset", y="equity",
            color_discrete_sequence=chart_palette(1),
        ))

# -----------------------------------------------------------------------------
# Page configuration
# -----------------------------------------------------------------------------

CONFIG: AssetPageConfig[OtherAsset] = AssetPageConfig(
    key=PAGE_KEY,
    title="Other Assets",
    description="Vehicles, collectibles and anything else you own",
    icon="📦",
    crud=AssetCRUDConfig(
        entity_name="Asset",
        fetch_all=_fetch_assets,
        create=_create,
        update=api.other_assets.update,
        delete=api.other_assets.delete,
        fetch_schema=_fetch_schema,
        fetch_schema_for_category=lambda category: api.get_schema_for_category("other_assets", category),
        transform_data=transform_other_assets,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_charts=_charts,
    item_label=lambda a: a.asset_name or f"Asset #{a.id}",
    get_form_data=lambda a: flatten_custom_fields({
        "asset_name": a.asset_name,
        "asset_category_id": a.asset_category_id,
        "current_value": a.current_value,
        "purchase_price": a.purchase_price,
        "amount_owed": a.amount_owed,
        "purchase_date": a.purchase_date,
        "description": a.description,
        "notes": a.notes,
        "custom_fields": a.custom_fields,
    }),
    supported_view_modes=("grid", "list", "charts"),
)


def render() -> None:
    _category_filter()
    render_asset_page(CONFIG)
