"""api_status.py

**API** page: backend health at a glance, the OpenAPI document as a
download, and the interactive API docs embedded below.

The embedded docs page follows the dashboard theme. It is loaded with
``?theme=`` and, because the iframe survives reruns, also receives a
``{"type": "theme-change", "theme": ...}`` message whenever the theme is
toggled.
"""

from __future__ import annotations

import json
from urllib.parse import urlsplit

import requests
import streamlit as st
import streamlit.components.v1 as components

from networth_deck.services import api
from networth_deck.services.model import HealthStatus
from networth_deck.utils.logger import get_logger
from ._colors import status_light
from ._helpers import format_date

logger = get_logger(__name__)

SPEC_FILENAME = "networth-api-spec.json"
THEME_KEY = "theme"


def theme_change_message(theme: str) -> dict[str, str]:
    return {"type": "theme-change", "theme": theme}


def docs_origin(url: str) -> str:
    """Origin (scheme + host + port) the docs frame is served from."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def current_theme() -> str:
    return "dark" if st.session_state.get(THEME_KEY) == "dark" else "light"


def load_health() -> tuple[HealthStatus | None, str | None]:
    """``(status, None)`` on success, ``(None, error text)`` otherwise."""
    try:
        return HealthStatus.model_validate(api.get_health()), None
    except requests.RequestException as exc:
        logger.error("❌ Health check failed: %s", exc, exc_info=True)
        return None, api.error_message(exc, "Failed to fetch health status")
    except ValueError as exc:
        logger.error("❌ Unexpected health payload: %s", exc, exc_info=True)
        return None, "Unexpected health payload"


def _health_panel() -> None:
    head, refresh = st.columns([0.8, 0.2])
    head.subheader("System status")
    refresh.button("🔄 Refresh", key="api-health-refresh", use_container_width=True)

    health, error = load_health()
    if error:
        st.error(f"Error: {error}")
        return

    st.markdown(f"### {status_light(health.status)} {health.status.upper()}")
    db, plugins, prices, market = st.columns(4)
    db.metric("Database", f"{status_light(health.database)} {health.database or 'unknown'}")
    plugins.metric("Plugins", f"{health.plugins.total_count} available")
    prices.metric(
        "Price Service", health.price_service.provider or "--",
        f"{health.price_service.stale_prices} stale / {health.price_service.total_symbols}",
        delta_color="off",
    )
    market.metric("Market", "🟢 Open" if health.market_open else "🔴 Closed")
    st.caption(f"Last updated: {format_date(health.timestamp, include_time=True)}"
               + (f" · backend {health.version}" if health.version else ""))


def _download() -> None:
    try:
        spec = api.get_swagger_spec()
    except requests.RequestException as exc:
        logger.error("❌ Failed to fetch API spec: %s", exc, exc_info=True)
        st.warning("API specification unavailable. Please ensure the backend is running.")
        return
    st.download_button("⬇️ Download OpenAPI spec", data=spec, file_name=SPEC_FILENAME,
                       mime="application/json", key="api-spec-download")


def _docs_frame(theme: str) -> None:
    url = api.swagger_ui_url(theme)
    message = json.dumps(theme_change_message(theme))
    origin = json.dumps(docs_origin(url))
    # The message re-sends the theme to an already loaded frame.
    components.html(
        f"""
        <iframe id="api-docs" src="{url}" style="width:100%;height:780px;border:0"></iframe>
        <script>
          const frame = document.getElementById("api-docs");
          frame.addEventListener("load", () => frame.contentWindow.postMessage({message}, {origin}));
        </script>
        """,
        height=800,
    )


def render() -> None:
    st.title("🔌 API")
    st.caption("Interactive API documentation and system status for the NetWorth Dashboard API")
    _health_panel()
    st.divider()
    _download()
    st.subheader("API documentation")
    _docs_frame(current_theme())
