"""main.py

Streamlit **entry-point** for the NetWorth dashboard.

Responsibilities
----------------
* Define global page layout (wide view, expanded sidebar, title).
* Implement the **navigation radio** over the page registry and keep the
  ``?page=`` query-param in sync so links are shareable.
* Release the orchestrator state of every asset page the user navigated
  away from (a page's list / panel state lives only while it is shown).
* Light / dark theme toggle, forwarded to the embedded API docs.
* **Auto-refresh** the read-only pages (dashboard, API status) every
  *REFRESH_SECONDS*; asset pages are refreshed by hand so an open form is
  never interrupted.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Third-party imports
# -----------------------------------------------------------------------------
from datetime import datetime

import streamlit as st
from streamlit_autorefresh import st_autorefresh

# -----------------------------------------------------------------------------
# 0) Global page configuration – must run before any Streamlit call
# -----------------------------------------------------------------------------
from networth_deck import APP_ICON
from networth_deck.config import settings

st.set_page_config(
    page_title=settings()["APP_TITLE"],
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded",
)

# -----------------------------------------------------------------------------
# Local imports (after Streamlit initialisation)
# -----------------------------------------------------------------------------
from networth_deck._pages import registry  # noqa: E402
from networth_deck._pages._helpers import LOCAL_TZ, TS_FMT, update_page  # noqa: E402
from networth_deck._pages.asset_page import release_orchestrators  # noqa: E402
from networth_deck.utils.logger import get_logger, setup_logging  # noqa: E402

setup_logging(settings()["LOG_LEVEL"])
logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# 1) Sidebar – title, navigation radio, theme
# -----------------------------------------------------------------------------
st.sidebar.title(f"{APP_ICON} {settings()['APP_TITLE']}")

labels = list(registry)
initial_page = st.query_params.get("page", labels[0])
if initial_page not in registry:
    initial_page = labels[0]

page = st.sidebar.radio(
    "Navigate",
    labels,
    index=labels.index(initial_page),
    key="sidebar_page",
    on_change=update_page,  # Update URL query-params when page changes
)

dark = st.sidebar.toggle("🌙 Dark mode", key="dark_mode")
st.session_state["theme"] = "dark" if dark else "light"

current = registry[page]
release_orchestrators(keep=current.key)

# -----------------------------------------------------------------------------
# 2) Auto-refresh – read-only pages only
# -----------------------------------------------------------------------------
if current.live and settings()["REFRESH_SECONDS"] > 0:
    st_autorefresh(interval=settings()["REFRESH_SECONDS"] * 1000, key="refresh")

# -----------------------------------------------------------------------------
# 3) Routing
# -----------------------------------------------------------------------------
logger.debug("Rendering page %s", current.key)
current.render()

st.sidebar.markdown("---")
# Local clock (updates on every rerun / autorefresh)
st.sidebar.metric(
    label="🕒 Last refresh:",
    value=datetime.now(LOCAL_TZ).strftime(TS_FMT),
    delta=str(LOCAL_TZ),
    delta_color="off",
)
