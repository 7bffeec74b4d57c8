"""asset_page.py

Configuration-driven page shared by every asset type.

An asset page is described by an `AssetPageConfig` – API bindings (via the
embedded ``AssetCRUDConfig``), render hooks and feature flags – and drawn
by `render_asset_page`. All list / panel / form state comes from the
page's `AssetCRUD` orchestrator, which lives in ``st.session_state`` for as
long as the user stays on the page.

Workflow
--------
1. First render: create the orchestrator and load items + schema.
2. Header: title, view-mode switch, *Refresh* and *Add* buttons.
3. Banners: persistent page error (with *Retry*) and transient message.
4. Summary cards, then the open panel (add / edit / view / delete).
5. Items in the selected view (grid cards, list rows or charts).
"""

from __future__ import annotations

# Standard library -------------------------------------------------------------
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

# Third‑party ------------------------------------------------------------------
import pandas as pd
import streamlit as st
from streamlit.runtime.scriptrunner import add_script_run_ctx, get_script_run_ctx

# First‑party / project --------------------------------------------------------
from networth_deck.services.crud import AssetCRUD, AssetCRUDConfig
from ._charts import chart_guard
from ._forms import render_schema_form
from ._helpers import format_date

T = TypeVar("T")

STATE_PREFIX = "crud::"
VIEW_LABELS = {"grid": "▦ Grid", "list": "☰ List", "charts": "📊 Charts"}

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

@dataclass
class AssetPageConfig(Generic[T]):
    key: str
    title: str
    description: str
    icon: str
    crud: AssetCRUDConfig[T]
    # Render hooks -----------------------------------------------------------
    render_card: Optional[Callable[[T], None]] = None
    to_row: Optional[Callable[[T], dict]] = None
    render_summary: Optional[Callable[[list[T], Any], None]] = None
    render_charts: Optional[Callable[[list[T]], None]] = None
    render_details: Optional[Callable[[T], None]] = None
    render_toolbar: Optional[Callable[[AssetCRUD], None]] = None
    filter_items: Optional[Callable[[list[T]], list[T]]] = None
    item_label: Callable[[T], str] = lambda item: f"#{item.id}"
    # Forms ------------------------------------------------------------------
    get_form_data: Optional[Callable[[T], dict]] = None
    # Feature flags ----------------------------------------------------------
    supported_view_modes: tuple[str, ...] = ("grid", "list")
    enable_add: bool = True
    enable_refresh: bool = True
    grid_columns: int = 3
    empty_hint: str = ""
    # Only needed where appending "s" to the entity name is wrong
    plural: str = ""

    @property
    def plural_name(self) -> str:
        return self.plural or f"{self.crud.entity_name}s"

# -----------------------------------------------------------------------------
# Orchestrator lifecycle
# -----------------------------------------------------------------------------

def _share_script_context() -> Callable[[], None]:
    """Initializer giving a worker thread this script run's context.

    Page hooks read ``st.session_state`` (selected plugin, category filter);
    without the context a worker thread sees an empty session.
    """
    ctx = get_script_run_ctx()
    return lambda: add_script_run_ctx(threading.current_thread(), ctx)


def get_crud(config: AssetPageConfig[T]) -> AssetCRUD[T]:
    """Return the page's orchestrator, creating and loading it on first use."""
    key = f"{STATE_PREFIX}{config.key}"
    if key not in st.session_state:
        crud = AssetCRUD(config.crud, worker_init=_share_script_context())
        with st.spinner(f"Loading {config.title.lower()}…"):
            crud.initialize()
        st.session_state[key] = crud
    return st.session_state[key]


def release_orchestrators(keep: str | None = None) -> None:
    """Drop the state of every asset page except *keep* (page unmount)."""
    for key in [k for k in st.session_state.keys() if str(k).startswith(STATE_PREFIX)]:
        if key != f"{STATE_PREFIX}{keep}":
            del st.session_state[key]

# -----------------------------------------------------------------------------
# Small building blocks
# -----------------------------------------------------------------------------

def _switch(crud: AssetCRUD, opener: Callable, *args) -> None:
    """Panels are exclusive: close whatever is open before opening another."""
    crud.close_modals()
    opener(*args)


def _item_actions(config: AssetPageConfig[T], crud: AssetCRUD[T], item: T) -> None:
    view, edit, delete = st.columns(3)
    view.button("👁 View", key=f"{config.key}-view-{item.id}",
                on_click=_switch, args=(crud, crud.open_view_modal, item), use_container_width=True)
    if crud.config.update:
        edit.button("✏️ Edit", key=f"{config.key}-edit-{item.id}",
                    on_click=_switch, args=(crud, crud.open_edit_modal, item), use_container_width=True)
    if crud.config.delete:
        delete.button("🗑 Delete", key=f"{config.key}-delete-{item.id}",
                      on_click=_switch, args=(crud, crud.open_delete_modal, item), use_container_width=True)


def _default_card(item: Any) -> None:
    data = item.model_dump() if hasattr(item, "model_dump") else dict(item)
    shown = [(k, v) for k, v in data.items() if k not in ("id", "created_at", "updated_at")][:3]
    for k, v in shown:
        st.markdown(f"**{k.replace('_', ' ').title()}:** {v}")


def _default_row(item: Any) -> dict:
    data = item.model_dump() if hasattr(item, "model_dump") else dict(item)
    return {k: v for k, v in data.items() if not isinstance(v, (dict, list))}


def _default_details(item: Any) -> None:
    data = _default_row(item)
    table = pd.DataFrame(
        [
            {
                "Field": k.replace("_", " ").title(),
                "Value": format_date(v, include_time=True) if k.endswith("_at") else str(v),
            }
            for k, v in data.items()
            if v not in (None, "")
        ]
    )
    st.dataframe(table, hide_index=True, use_container_width=True)

# -----------------------------------------------------------------------------
# Panels
# -----------------------------------------------------------------------------

def _render_panels(config: AssetPageConfig[T], crud: AssetCRUD[T]) -> None:
    state = crud.state
    entity = crud.config.entity_name

    if state.add_modal_open:
        with st.container(border=True):
            st.subheader(f"Add {entity}")
            data = render_schema_form(state.schema, f"{config.key}-add-form",
                                      submit_label=f"Add {entity}", disabled=state.submitting)
            st.button("Cancel", key=f"{config.key}-add-cancel", on_click=crud.close_modals)
            if data is not None:
                crud.handle_create(data)
                st.rerun()

    elif state.edit_modal_open and state.selected_item is not None:
        item = state.selected_item
        initial = config.get_form_data(item) if config.get_form_data else item.model_dump()
        with st.container(border=True):
            st.subheader(f"Edit {entity}: {config.item_label(item)}")
            data = render_schema_form(state.schema, f"{config.key}-edit-form-{item.id}",
                                      initial=initial, submit_label="Save changes",
                                      disabled=state.submitting)
            st.button("Cancel", key=f"{config.key}-edit-cancel", on_click=crud.close_modals)
            if data is not None:
                crud.handle_update(data)
                st.rerun()

    elif state.view_modal_open and state.selected_item is not None:
        item = state.selected_item
        with st.container(border=True):
            st.subheader(f"{entity}: {config.item_label(item)}")
            (config.render_details or _default_details)(item)
            st.button("Close", key=f"{config.key}-view-close", on_click=crud.close_modals)

    elif state.delete_modal_open and state.selected_item is not None:
        item = state.selected_item
        with st.container(border=True):
            st.subheader(f"Delete {entity}")
            st.warning(
                f"Are you sure you want to delete **{config.item_label(item)}**? "
                "This action cannot be undone."
            )
            confirm, cancel = st.columns(2)
            if confirm.button("🗑 Delete", key=f"{config.key}-delete-confirm",
                              type="primary", disabled=state.submitting):
                crud.handle_delete()
                st.rerun()
            cancel.button("Cancel", key=f"{config.key}-delete-cancel", on_click=crud.close_modals)

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

def _render_grid(config: AssetPageConfig[T], crud: AssetCRUD[T], items: list[T]) -> None:
    n = max(config.grid_columns, 1)
    for start in range(0, len(items), n):
        for column, item in zip(st.columns(n), items[start:start + n]):
            with column, st.container(border=True):
                (config.render_card or _default_card)(item)
                _item_actions(config, crud, item)


def _render_list(config: AssetPageConfig[T], crud: AssetCRUD[T], items: list[T]) -> None:
    rows = [(config.to_row or _default_row)(item) for item in items]
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

    labels = {item.id: config.item_label(item) for item in items}
    picked = st.selectbox(
        "Select an entry", list(labels), format_func=lambda i: labels[i],
        key=f"{config.key}-list-pick",
    )
    item = next((i for i in items if i.id == picked), None)
    if item is not None:
        _item_actions(config, crud, item)


def render_asset_page(config: AssetPageConfig[T]) -> None:
    """Draw one asset page from its configuration."""
    crud = get_crud(config)
    state = crud.state

    # ------------------------------------------------------------------
    # 0) Header – title, view switch and actions
    # ------------------------------------------------------------------
    st.title(f"{config.icon} {config.title}")
    st.caption(config.description)

    left, right = st.columns([0.6, 0.4])
    with left:
        modes = list(config.supported_view_modes)
        if len(modes) > 1:
            mode = st.radio(
                "View", modes,
                index=modes.index(state.view_mode) if state.view_mode in modes else 0,
                format_func=lambda m: VIEW_LABELS.get(m, m.title()),
                horizontal=True, label_visibility="collapsed",
                key=f"{config.key}-view-mode",
            )
            if mode != state.view_mode:
                crud.set_view_mode(mode)
        else:
            mode = modes[0] if modes else "grid"
    with right:
        actions = st.columns(3)
        if config.enable_refresh:
            actions[0].button("🔄 Refresh", key=f"{config.key}-refresh",
                              on_click=crud.refresh_items, disabled=state.refreshing,
                              use_container_width=True)
        if config.enable_add and crud.config.create:
            actions[1].button("➕ Add", key=f"{config.key}-add",
                              on_click=_switch, args=(crud, crud.open_add_modal),
                              type="primary", use_container_width=True)
        if config.render_toolbar:
            with actions[2]:
                config.render_toolbar(crud)

    # ------------------------------------------------------------------
    # 1) Banners – persistent error, transient message
    # ------------------------------------------------------------------
    state = crud.state
    if state.error:
        st.error(state.error)
        retry, dismiss, _ = st.columns([0.15, 0.15, 0.7])
        retry.button("Retry", key=f"{config.key}-retry", on_click=crud.load_items)
        dismiss.button("Dismiss", key=f"{config.key}-dismiss-error", on_click=crud.clear_error)
    if state.message:
        box = st.success if state.message.type == "success" else st.error
        box(state.message.text)
        st.button("✕ Dismiss", key=f"{config.key}-dismiss-msg", on_click=crud.clear_message)

    # ------------------------------------------------------------------
    # 2) Summary & panels
    # ------------------------------------------------------------------
    items = config.filter_items(state.items) if config.filter_items else state.items
    if config.render_summary and items:
        with chart_guard(f"{config.key}-summary"):
            config.render_summary(items, state.raw_data)

    _render_panels(config, crud)

    # ------------------------------------------------------------------
    # 3) Items
    # ------------------------------------------------------------------
    if not items:
        st.info(config.empty_hint or f"No {config.plural_name.lower()} found. Add your first one to get started.")
        return

    if mode == "charts" and config.render_charts:
        config.render_charts(items)
    elif mode == "list":
        _render_list(config, crud, items)
    else:
        _render_grid(config, crud, items)
