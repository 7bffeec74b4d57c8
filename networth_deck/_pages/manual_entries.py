"""manual_entries.py

Streamlit page for **manual entries** – everything the user typed in by hand
through one of the backend's manual-entry plugins.

Manual entries from different plugins live in different tables, so an id is
only unique together with its ``entry_type``: edits and deletes always send
both. The add form is the schema of the plugin picked in the sidebar; the
edit form is the schema of the entry's own plugin.

Main features
-------------
* Sidebar: plugin picker for new entries, type filter and free-text search.
* Readable titles and values per entry type (stock, equity grant, property,
  cash account, crypto, other asset).
* List is deduplicated on load (see ``transform_manual_entries``).
"""

from __future__ import annotations

# Standard library -------------------------------------------------------------
from typing import Any

# Third‑party ------------------------------------------------------------------
import requests
import streamlit as st

# First‑party / project --------------------------------------------------------
from networth_deck.config import settings
from networth_deck.services import api
from networth_deck.services.crud import AssetCRUD, AssetCRUDConfig
from networth_deck.services.model import ManualEntry, Plugin
from networth_deck.services.transformers import to_float, to_str, transform_manual_entries
from networth_deck.services.validation import flatten_custom_fields
from networth_deck.utils.logger import get_logger
from ._helpers import format_currency, format_relative_time, show_metrics_bulk
from .asset_page import STATE_PREFIX, AssetPageConfig, get_crud, render_asset_page

logger = get_logger(__name__)

PAGE_KEY = "manual_entries"
PLUGIN_KEY = "manual_entries-plugin"
SCHEMA_FOR_KEY = "manual_entries-schema-for"
TYPE_FILTER_KEY = "manual_entries-type"
SEARCH_KEY = "manual_entries-search"

SEARCH_FIELDS = (
    "institution_name", "symbol", "company_symbol", "crypto_symbol",
    "property_name", "account_name", "grant_type",
)

# -----------------------------------------------------------------------------
# Titles & values
# -----------------------------------------------------------------------------

def entry_title(entry: ManualEntry) -> str:
    d = entry.data
    kind = entry.entry_type
    if kind == "stock_holding":
        return (f"{d.get('symbol') or 'Stock'} at {d.get('institution_name') or 'Institution'}"
                f" - {to_float(d.get('shares_owned')):g} shares")
    if kind == "morgan_stanley":
        return f"{d.get('company_symbol') or 'Equity'} {d.get('grant_type') or 'Grant'}"
    if kind == "real_estate":
        return to_str(d.get("property_name")) or "Real Estate Property"
    if kind == "cash_holdings":
        return (f"{d.get('institution_name') or 'Bank'} - {d.get('account_name') or 'Account'}"
                f" ({d.get('account_type') or 'Cash'})")
    if kind == "crypto_holdings":
        return (f"{d.get('institution_name') or 'Exchange'} - {d.get('crypto_symbol') or 'Crypto'}"
                f" ({to_float(d.get('balance_tokens')):g} tokens)")
    if kind == "other_assets":
        return to_str(d.get("asset_name")) or f"{d.get('category_name') or 'Other'} Asset"
    return f"{kind} Entry"


def entry_value(entry: ManualEntry) -> float | None:
    """Market value of the entry in its own currency, ``None`` when unknown."""
    d = entry.data
    kind = entry.entry_type
    if kind == "stock_holding":
        shares, price = to_float(d.get("shares_owned")), to_float(d.get("current_price"))
        return shares * price if shares and price else None
    if kind == "morgan_stanley":
        shares, price = to_float(d.get("vested_shares")), to_float(d.get("current_price"))
        if not (shares and price):
            return None
        strike = to_float(d.get("strike_price"))
        if d.get("grant_type") == "stock_option" and strike:
            return shares * max(0.0, price - strike)
        return shares * price
    if kind == "real_estate":
        return to_float(d.get("current_value")) or None
    if kind == "cash_holdings":
        return to_float(d.get("current_balance")) or None
    if kind == "crypto_holdings":
        if to_float(d.get("current_value_usd")):
            return to_float(d.get("current_value_usd"))
        tokens, price = to_float(d.get("balance_tokens")), to_float(d.get("current_price_usd"))
        return tokens * price if tokens and price else None
    if kind == "other_assets":
        value = to_float(d.get("current_value"))
        return value - to_float(d.get("amount_owed")) if value else None
    return None


def display_value(entry: ManualEntry) -> str:
    value = entry_value(entry)
    if value is None:
        if entry.entry_type == "crypto_holdings":
            d = entry.data
            return f"{to_float(d.get('balance_tokens')):g} {d.get('crypto_symbol') or 'tokens'}"
        return "N/A"
    currency = to_str(entry.data.get("currency")) if entry.entry_type == "cash_holdings" else None
    return format_currency(value, currency or "USD", 2)


def matches_search(entry: ManualEntry, text: str) -> bool:
    needle = text.strip().lower()
    if not needle:
        return True
    d = entry.data
    haystack = " ".join([entry.entry_type, *(to_str(d.get(f)) for f in SEARCH_FIELDS)]).lower()
    return needle in haystack

# -----------------------------------------------------------------------------
# Plugins & schema selection
# -----------------------------------------------------------------------------

@st.cache_data(ttl=settings()["REFRESH_SECONDS"] or 60, show_spinner=False)
def load_plugins() -> list[Plugin]:
    """Enabled manual-entry plugins; empty when the API is unreachable."""
    try:
        raw = api.get_plugins()
    except requests.RequestException as exc:
        logger.error("❌ Failed to load plugins: %s", exc, exc_info=True)
        return []
    plugins = [Plugin.model_validate(p) for p in raw if isinstance(p, dict) and p.get("name")]
    return [p for p in plugins if p.is_manual]


def _crud() -> AssetCRUD | None:
    return st.session_state.get(f"{STATE_PREFIX}{PAGE_KEY}")


def _selected_type() -> str:
    crud = _crud()
    item = crud.state.selected_item if crud else None
    if item is None:
        raise ValueError("No manual entry selected")
    return item.entry_type


def _fetch_schema() -> Any:
    plugin = st.session_state.get(SCHEMA_FOR_KEY)
    return api.get_schema(plugin) if plugin else None


def _create(data: dict) -> Any:
    plugin = st.session_state.get(PLUGIN_KEY)
    if not plugin:
        raise ValueError("Choose an entry type first")
    return api.process_manual_entry(plugin, data)


def _use_schema_of(crud: AssetCRUD, plugin: str | None) -> None:
    if plugin and (st.session_state.get(SCHEMA_FOR_KEY) != plugin or crud.state.schema is None):
        st.session_state[SCHEMA_FOR_KEY] = plugin
        crud.load_schema()


def _sync_schema(crud: AssetCRUD) -> None:
    """Point the form schema at the plugin the open panel needs."""
    state = crud.state
    if state.edit_modal_open and state.selected_item is not None:
        _use_schema_of(crud, state.selected_item.entry_type)
    else:
        _use_schema_of(crud, st.session_state.get(PLUGIN_KEY))


def _sidebar(crud: AssetCRUD) -> None:
    plugins = load_plugins()
    names = {p.name: p.friendly_name or p.name for p in plugins}
    st.sidebar.header("New entry")
    if names:
        st.sidebar.selectbox("Entry type", list(names), format_func=lambda n: names[n], key=PLUGIN_KEY)
    else:
        st.sidebar.caption("No manual-entry plugins available.")

    st.sidebar.header("Filters")
    types = sorted({e.entry_type for e in crud.state.items})
    st.sidebar.selectbox("Type", [None, *types], format_func=lambda t: "All types" if t is None else t,
                         key=TYPE_FILTER_KEY)
    st.sidebar.text_input("Search", key=SEARCH_KEY, placeholder="symbol, institution, property…")


def filter_entries(entries: list[ManualEntry], entry_type: str | None = None, search: str = "") -> list[ManualEntry]:
    return [
        e for e in entries
        if (not entry_type or e.entry_type == entry_type) and matches_search(e, search)
    ]

# -----------------------------------------------------------------------------
# Render hooks
# -----------------------------------------------------------------------------

def _card(e: ManualEntry) -> None:
    st.markdown(f"**{entry_title(e)}**")
    st.caption(f"{e.entry_type} · updated {format_relative_time(e.updated_at or e.created_at)}")
    st.metric("Value", display_value(e))
    if e.account_name or e.institution:
        st.caption(" · ".join(p for p in (e.institution, e.account_name) if p))


def _row(e: ManualEntry) -> dict:
    return {
        "Entry": entry_title(e),
        "Type": e.entry_type,
        "Value": display_value(e),
        "Updated": format_relative_time(e.updated_at or e.created_at),
    }


def _details(e: ManualEntry) -> None:
    st.caption(f"{e.entry_type} #{e.id} · account {e.account_id}")
    st.json(e.data)


def _summary(entries: list[ManualEntry], _raw) -> None:
    show_metrics_bulk([
        {"label": "Entries", "value": len(entries)},
        {"label": "Entry Types", "value": len({e.entry_type for e in entries})},
        {"label": "Total Value", "value": format_currency(sum(entry_value(e) or 0 for e in entries))},
    ])

# -----------------------------------------------------------------------------
# Page configuration
# -----------------------------------------------------------------------------

CONFIG: AssetPageConfig[ManualEntry] = AssetPageConfig(
    key=PAGE_KEY,
    title="Manual Entries",
    description="Everything you entered by hand, across all plugins",
    icon="✍️",
    crud=AssetCRUDConfig(
        entity_name="Manual Entry",
        fetch_all=api.manual_entries.get_raw,
        create=_create,
        update=lambda entry_id, data: api.update_manual_entry(entry_id, _selected_type(), data),
        delete=lambda entry_id: api.delete_manual_entry(entry_id, _selected_type()),
        fetch_schema=_fetch_schema,
        transform_data=transform_manual_entries,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_details=_details,
    filter_items=lambda entries: filter_entries(
        entries,
        st.session_state.get(TYPE_FILTER_KEY),
        st.session_state.get(SEARCH_KEY, ""),
    ),
    item_label=entry_title,
    get_form_data=lambda e: flatten_custom_fields(e.data),
    supported_view_modes=("list", "grid"),
    plural="Manual Entries",
    empty_hint="No manual entries match. Pick an entry type in the sidebar and add one.",
)


def render() -> None:
    crud = get_crud(CONFIG)
    _sidebar(crud)
    _sync_schema(crud)
    render_asset_page(CONFIG)
