"""_helpers.py

Utility helpers shared by multiple Streamlit pages.

The module groups three kinds of helpers:

1. **Navigation helpers** – `update_page` keeps the ``?page=`` query
   parameter in sync with the sidebar radio so links are shareable.
2. **Formatting helpers** – currency / number / percentage / crypto /
   date formatting used by every card, table and metric.
3. **Metric helpers** – `show_metrics_bulk` prints a row of `st.metric`
   widgets from a list of specs.
"""

from __future__ import annotations

# Third-party -----------------------------------------------------------------
import math
import os
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pandas as pd
import streamlit as st

# Project ---------------------------------------------------------------------
from networth_deck.config import settings

# -----------------------------------------------------------------------------
# 0) Navigation
# -----------------------------------------------------------------------------
def update_page(page: None | str = None) -> None:
    """Update the ?page=... query-parameter in the URL.

    Parameters
    ----------
    page : None | str
        The new page value to set or None to use the sidebar selection.
    """
    if page is None:
        st.query_params.update(page=st.session_state.sidebar_page)
    else:
        st.query_params.update(page=page)

# -----------------------------------------------------------------------------
# 1) Formatting helpers
# -----------------------------------------------------------------------------

LOCAL_TZ = ZoneInfo(os.getenv("LOCAL_TZ", "UTC"))
TS_FMT = "%b %d, %Y %H:%M"  # Timestamp format for human-readable dates
DATE_FMT = "%b %d, %Y"
ZERO_DISPLAY = "--"  # Default display for missing values
CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "CAD": "C$", "AUD": "A$"}


def _finite(value: float | int | None) -> bool:
    return value is not None and not pd.isna(value) and not math.isinf(value)


def format_number(value: float | int | None, min_decimals: int = 0, max_decimals: int = 2) -> str:
    """Thousand separators, trailing zeros trimmed down to *min_decimals*.

    >>> format_number(1234.5)
    '1,234.5'
    >>> format_number(3, min_decimals=2)
    '3.00'
    """
    if not _finite(value):
        return ZERO_DISPLAY
    text = f"{value:,.{max_decimals}f}"
    if max_decimals > min_decimals and "." in text:
        whole, frac = text.split(".")
        frac = frac.rstrip("0").ljust(min_decimals, "0")
        text = f"{whole}.{frac}" if frac else whole
    return text


def format_currency(
    value: float | int | None,
    currency: str | None = None,
    decimals: int = 0,
) -> str:
    """``$1,500`` style amounts; BTC gets the ₿ sign and 8 decimals.

    Unknown currency codes are appended instead of prefixed
    (``1,500 CHF``). Negative amounts keep the sign in front of the symbol.
    """
    if not _finite(value):
        return ZERO_DISPLAY
    currency = (currency or settings()["CURRENCY"]).upper()
    if currency == "BTC":
        return f"₿{format_number(value, 8, 8)}"
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.{decimals}f}"
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{sign}{body} {currency}"
    return f"{sign}{symbol}{body}"


def format_percentage(value: float | int | None, decimals: int = 1) -> str:
    """*value* is already in percent: ``4.25`` → ``4.3%``."""
    if not _finite(value):
        return ZERO_DISPLAY
    return f"{value:,.{decimals}f}%"


def format_compact_number(value: float | int | None) -> str:
    """``1_250_000`` → ``1.2M``."""
    if not _finite(value):
        return ZERO_DISPLAY
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(value) >= threshold:
            return f"{value / threshold:.1f}".rstrip("0").rstrip(".") + suffix
    return format_number(value, 0, 1)


def format_crypto(amount: float | None, symbol: str) -> str:
    """BTC / ETH keep 8 decimals, every other coin 4."""
    symbol = symbol.upper()
    decimals = 8 if symbol in ("BTC", "ETH") else 4
    return f"{format_number(amount, 0, decimals)} {symbol}"


def _parse_ts(ts: str | datetime | date | None) -> datetime | None:
    if isinstance(ts, datetime):
        dt = ts
    elif isinstance(ts, date):
        dt = datetime(ts.year, ts.month, ts.day)
    elif isinstance(ts, str) and ts:
        try:
            dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    # Naive timestamps from the backend are UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def format_date(ts: str | datetime | date | None, include_time: bool = False) -> str:
    dt = _parse_ts(ts)
    if dt is None:
        return ZERO_DISPLAY
    return dt.astimezone(LOCAL_TZ).strftime(TS_FMT if include_time else DATE_FMT)


def format_relative_time(ts: str | datetime | None, now: datetime | None = None) -> str:
    """``just now`` / ``5 minutes ago`` / ``3 days ago``; older than 30 days → date."""
    dt = _parse_ts(ts)
    if dt is None:
        return ZERO_DISPLAY
    now = now or datetime.now(timezone.utc)
    minutes = int((now - dt).total_seconds() // 60)
    hours, days = minutes // 60, minutes // (60 * 24)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} minute{'' if minutes == 1 else 's'} ago"
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if days < 30:
        return f"{days} day{'' if days == 1 else 's'} ago"
    return format_date(dt)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."

# -----------------------------------------------------------------------------
# 2) Streamlit metric helpers
# -----------------------------------------------------------------------------

def show_metrics_bulk(specs: list[dict]) -> None:
    """
    Print a row of metrics, one column each.

    specs = [
        {"label": "Total Cash", "value": "$12,000"},
        {"label": "Accounts", "value": 4, "help": "..."},
    ]
    """
    if not specs:
        return
    for column, spec in zip(st.columns(len(specs)), specs):
        with column:
            st.metric(spec["label"], spec["value"], spec.get("delta"), help=spec.get("help"))
