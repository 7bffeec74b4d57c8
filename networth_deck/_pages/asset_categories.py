"""asset_categories.py

Streamlit page for **asset categories** – the user-defined groups *other
assets* belong to. Categories carry an icon, a display colour and an
optional custom-field schema; the form here edits the fixed attributes,
the custom schema is shown read-only in the details panel.
"""

from __future__ import annotations

import json

import pandas as pd
import requests
import streamlit as st

from networth_deck.services import api
from networth_deck.services.crud import AssetCRUDConfig
from networth_deck.services.model import AssetCategory, FormSchema
from networth_deck.services.transformers import transform_asset_categories
from networth_deck.utils.logger import get_logger
from ._colors import color_chip_html
from ._helpers import format_date, truncate_text
from .asset_page import AssetPageConfig, render_asset_page

logger = get_logger(__name__)

CATEGORY_FORM = FormSchema.model_validate(
    {
        "name": "asset_category",
        "description": "Name, icon and colour of the category",
        "fields": [
            {"name": "name", "label": "Name", "type": "text", "required": True,
             "validation": {"min_length": 2, "max_length": 50}},
            {"name": "description", "label": "Description", "type": "textarea"},
            {"name": "icon", "label": "Icon", "type": "text", "placeholder": "🚗",
             "validation": {"max_length": 8}},
            {"name": "color", "label": "Colour", "type": "text", "placeholder": "#3B82F6",
             "validation": {"pattern": r"^#[0-9A-Fa-f]{6}$"}},
            {"name": "sort_order", "label": "Sort order", "type": "integer",
             "validation": {"min": 0}},
        ],
    }
)


def live_schema(c: AssetCategory) -> dict:
    """Custom schema as the backend serves it now; the list copy if that fails."""
    try:
        payload = api.get_asset_category_schema(c.id)
    except requests.RequestException as exc:
        logger.warning("Schema of category %s unavailable: %s", c.id, exc)
        return c.custom_schema
    schema = payload.get("schema") if isinstance(payload, dict) else None
    return schema if isinstance(schema, dict) else c.custom_schema


def _card(c: AssetCategory) -> None:
    st.markdown(f"### {c.icon} {c.name}".strip())
    st.markdown(color_chip_html(c.color, c.color), unsafe_allow_html=True)
    if c.description:
        st.caption(truncate_text(c.description, 80))
    st.write(f"{c.custom_field_count} custom field(s)")
    if not c.is_active:
        st.caption("Inactive")


def _row(c: AssetCategory) -> dict:
    return {
        "Category": f"{c.icon} {c.name}".strip(),
        "Colour": c.color,
        "Custom fields": c.custom_field_count,
        "Order": c.sort_order,
        "Active": "✅" if c.is_active else "❌",
    }


def _details(c: AssetCategory) -> None:
    st.markdown(color_chip_html(c.color, c.name), unsafe_allow_html=True)
    st.write(c.description or "No description.")
    st.caption(f"Created {format_date(c.created_at)} · updated {format_date(c.updated_at)}")
    fields = live_schema(c).get("fields", [])
    if isinstance(fields, list) and fields:
        st.dataframe(
            pd.DataFrame(
                [
                    {"Field": f.get("label") or f.get("name"), "Type": f.get("type", "text"),
                     "Required": bool(f.get("required"))}
                    for f in fields if isinstance(f, dict)
                ]
            ),
            hide_index=True, use_container_width=True,
        )
    else:
        st.code(json.dumps(c.custom_schema, indent=2) if c.custom_schema else "{}", language="json")


CONFIG: AssetPageConfig[AssetCategory] = AssetPageConfig(
    key="asset_categories",
    title="Asset Categories",
    description="Organise other assets into categories with their own fields",
    icon="🗂️",
    crud=AssetCRUDConfig(
        entity_name="Category",
        fetch_all=api.asset_categories.get_all,
        create=api.asset_categories.create,
        update=api.asset_categories.update,
        delete=api.asset_categories.delete,
        fetch_schema=lambda: CATEGORY_FORM,
        transform_data=transform_asset_categories,
    ),
    render_card=_card,
    to_row=_row,
    render_details=_details,
    item_label=lambda c: c.name or f"Category #{c.id}",
    get_form_data=lambda c: {
        "name": c.name,
        "description": c.description,
        "icon": c.icon,
        "color": c.color,
        "sort_order": c.sort_order,
    },
    grid_columns=4,
    plural="Categories",
    empty_hint="No categories yet. Create one to start tracking other assets.",
)


def render() -> None:
    render_asset_page(CONFIG)
