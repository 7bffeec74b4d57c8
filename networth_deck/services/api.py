"""api.py

Thin synchronous REST wrapper around the NetWorth back-end.

* Centralises **base-URL**, prefix and timeout handling so pages can simply
  call ``cash_holdings.get_all()``, ``get_health()`` … without repeating
  boilerplate.
* Unwraps the ``{"<resource>": [...]}`` envelopes the list endpoints return
  so callers always get a plain list.
* Lets ``requests`` exceptions propagate; ``error_message`` turns them into
  the user-facing text the backend put in its ``error`` field.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library & 3rd-party imports
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any

import requests

from networth_deck.config import settings
from networth_deck.utils.logger import get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Global constants (resolved once at import time)
# -----------------------------------------------------------------------------
BASE = settings()["API_URL"].rstrip("/")
PREFIX = settings()["API_PREFIX"]
TIMEOUT = settings()["API_TIMEOUT"]
HEAD = {"Content-Type": "application/json"}

# -----------------------------------------------------------------------------
# Internal convenience helpers (prefixed with underscore)
# -----------------------------------------------------------------------------

def _url(path: str, *, root: bool = False) -> str:
    """``/health`` lives outside the versioned prefix, everything else inside."""
    return f"{BASE}{path}" if root else f"{BASE}{PREFIX}{path}"


def _request(
    method: str,
    path: str,
    *,
    params: dict | None = None,
    json: Any = None,
    root: bool = False,
):
    """Send one request and return the decoded JSON body (``None`` if empty).

    Raises ``requests.exceptions.HTTPError`` on non-2xx responses so the
    caller can handle it explicitly.
    """
    url = _url(path, root=root)
    logger.debug("%s %s params=%s", method, url, params)
    r = requests.request(method, url, headers=HEAD, params=params, json=json, timeout=TIMEOUT)
    try:
        r.raise_for_status()
    except requests.HTTPError:
        logger.error("%s %s -> %s %s", method, url, r.status_code, r.text[:200])
        raise
    if not r.content:
        return None
    return r.json()


def _get(path: str, **kwargs):
    return _request("GET", path, **kwargs)


def _post(path: str, data: Any = None, **kwargs):
    return _request("POST", path, json=data, **kwargs)


def _put(path: str, data: Any = None, **kwargs):
    return _request("PUT", path, json=data, **kwargs)


def _delete(path: str, **kwargs) -> None:
    _request("DELETE", path, **kwargs)


def _unwrap(payload: Any, key: str) -> list:
    """Return the list stored under *key* (or the payload if it already is one)."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        value = payload.get(key)
        return value if isinstance(value, list) else []
    return []


def error_message(exc: BaseException, fallback: str) -> str:
    """Pick the backend's ``{"error": "..."}`` text out of a failed request.

    Any exception without such a payload (timeouts, connection errors,
    non-JSON bodies) yields *fallback*.
    """
    response = getattr(exc, "response", None)
    if response is None:
        return fallback
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback

# -----------------------------------------------------------------------------
# Resource endpoints (one per asset type)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Resource:
    """CRUD bindings for one REST collection such as ``/cash-holdings``."""

    path: str
    list_key: str

    def get_all(self, params: dict | None = None) -> list:
        return _unwrap(_get(self.path, params=params), self.list_key)

    def get_raw(self, params: dict | None = None) -> Any:
        """List payload as sent, envelope included (for tolerant transformers)."""
        return _get(self.path, params=params)

    def create(self, data: dict) -> dict:
        return _post(self.path, data)

    def update(self, item_id: int, data: dict) -> dict:
        return _put(f"{self.path}/{item_id}", data)

    def delete(self, item_id: int) -> None:
        _delete(f"{self.path}/{item_id}")


cash_holdings = Resource("/cash-holdings", "cash_holdings")
crypto_holdings = Resource("/crypto-holdings", "crypto_holdings")
stocks = Resource("/stocks", "stocks")
equity = Resource("/equity", "equity_grants")
real_estate = Resource("/real-estate", "real_estate")
other_assets = Resource("/other-assets", "other_assets")
asset_categories = Resource("/asset-categories", "asset_categories")
manual_entries = Resource("/manual-entries", "manual_entries")

# -----------------------------------------------------------------------------
# Public API helpers (called by Streamlit pages)
# -----------------------------------------------------------------------------

def get_other_assets(category: str | None = None) -> list:
    """`/other-assets`, optionally narrowed to one category id."""
    return other_assets.get_all(params={"category": category} if category else None)


def get_asset_category_schema(category_id: int) -> dict:
    return _get(f"/asset-categories/{category_id}/schema")


def update_manual_entry(entry_id: int, entry_type: str, data: dict) -> dict:
    """Manual entries are addressed by ``(id, type)`` – ids repeat across types."""
    return _put(f"/manual-entries/{entry_id}", data, params={"type": entry_type})


def delete_manual_entry(entry_id: int, entry_type: str) -> None:
    _delete(f"/manual-entries/{entry_id}", params={"type": entry_type})


def get_plugins() -> list:
    return _unwrap(_get("/plugins"), "plugins")


def get_schema(plugin_name: str) -> dict:
    """Form schema a manual-entry plugin declares for its inputs."""
    return _get(f"/plugins/{plugin_name}/schema")


def get_schema_for_category(plugin_name: str, category_id: int) -> dict:
    return _get(f"/plugins/{plugin_name}/schema/{category_id}")


def process_manual_entry(plugin_name: str, data: dict) -> dict:
    return _post(f"/plugins/{plugin_name}/manual-entry", data)


def get_net_worth() -> dict:
    summary = _get("/net-worth")
    if not isinstance(summary, dict):
        raise TypeError(f"Expected dict from /net-worth, got {type(summary)}")
    return summary


def get_consolidated_stocks() -> list:
    return _unwrap(_get("/stocks/consolidated"), "consolidated_stocks")


def refresh_crypto_prices() -> dict:
    return _post("/crypto/prices/refresh")


def refresh_prices(force: bool = False) -> dict:
    """Smart refresh respects cache / market hours; ``force`` bypasses both."""
    res = _post("/prices/refresh", params={"force": "true"} if force else None)
    return res.get("summary", {}) if isinstance(res, dict) else {}


def get_market_status() -> dict:
    return _get("/market/status")


def get_health() -> dict:
    """`GET /health` – served at the root, not under the API prefix."""
    return _get("/health", root=True)


def get_swagger_spec() -> bytes:
    """Raw OpenAPI document for the download button."""
    url = _url("/swagger/spec")
    r = requests.get(url, timeout=TIMEOUT)
    r.raise_for_status()
    return r.content


def swagger_ui_url(theme: str) -> str:
    return f"{BASE}/swagger-ui.html?theme={theme}"
