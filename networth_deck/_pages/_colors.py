"""_colors.py

Colour and badge utilities shared by the asset pages.

The module provides:
* Emoji *status lights* (`_STATUS_LIGHT`) for the health / service badges
  on the API status page.
* Per account-type metadata (`ACCOUNT_TYPE_INFO`) – icon, chart colour and
  protection level – used by the cash-holdings cards.
* Functions to:
  - Classify an institution by name (`institution_type`).
  - Pick a legible foreground for a category colour (`contrast_text_color`).
  - Build an HTML colour chip for category badges (`color_chip_html`).
  - Extend a base palette to *n* chart colours (`chart_palette`).
"""

from __future__ import annotations

from html import escape

# -----------------------------------------------------------------------------
# PUBLIC CONSTANTS – status → emoji / colour
# -----------------------------------------------------------------------------
_STATUS_LIGHT: dict[str, str] = {
    "healthy": "🟢",
    "ok": "🟢",
    "connected": "🟢",
    "degraded": "🟡",
    "unknown": "🟡",
    "unhealthy": "🔴",
    "error": "🔴",
    "disconnected": "🔴",
}

# Base chart colours (Tailwind 600 shades – matches the category defaults)
_BASE_PALETTE: list[str] = [
    "#2563EB",  # blue
    "#16A34A",  # green
    "#9333EA",  # purple
    "#EA580C",  # orange
    "#DC2626",  # red
    "#0891B2",  # cyan
    "#CA8A04",  # yellow
    "#DB2777",  # pink
]

ACCOUNT_TYPE_INFO: dict[str, dict[str, str]] = {
    "checking": {"icon": "💵", "color": "#2563EB", "risk": "FDIC Insured"},
    "savings": {"icon": "🏦", "color": "#16A34A", "risk": "FDIC Insured"},
    "money_market": {"icon": "📈", "color": "#9333EA", "risk": "FDIC Insured"},
    "cd": {"icon": "⏳", "color": "#EA580C", "risk": "FDIC Insured"},
    "high_yield": {"icon": "💹", "color": "#059669", "risk": "FDIC Insured"},
    "brokerage": {"icon": "📊", "color": "#DC2626", "risk": "SIPC Protected"},
}
_DEFAULT_ACCOUNT_TYPE = {"icon": "👛", "color": "#6B7280", "risk": "Unknown"}

# -----------------------------------------------------------------------------
# Lookups
# -----------------------------------------------------------------------------

def status_light(status: str | None) -> str:
    return _STATUS_LIGHT.get(str(status or "unknown").lower(), "🟡")


def account_type_info(account_type: str) -> dict[str, str]:
    return ACCOUNT_TYPE_INFO.get(account_type.lower(), _DEFAULT_ACCOUNT_TYPE)


def institution_type(name: str) -> str:
    """Rough institution class from its name: Credit Union, Online Bank …"""
    lowered = name.lower()
    if "credit union" in lowered or lowered.startswith("cu ") or " cu " in lowered:
        return "Credit Union"
    if any(k in lowered for k in ("online", "ally", "marcus", "capital one")):
        return "Online Bank"
    if any(k in lowered for k in ("schwab", "fidelity", "vanguard")):
        return "Brokerage"
    return "Bank"

# -----------------------------------------------------------------------------
# Colour maths
# -----------------------------------------------------------------------------

def _color_interp(c0: str, t: float) -> str:  # noqa: D401 – short desc ok
    """Return a **darkened** version of *c0* by blending with black.

    Parameters
    ----------
    c0 : str
        Hex colour "#RRGGBB" (no shorthand allowed).
    t : float
        Fraction 0 ≤ `t` ≤ 1. 0 ⇒ original colour; 1 ⇒ black.
    """
    r0, g0, b0 = int(c0[1:3], 16), int(c0[3:5], 16), int(c0[5:7], 16)
    r = round(r0 * (1 - t))
    g = round(g0 * (1 - t))
    b = round(b0 * (1 - t))
    return f"#{r:02x}{g:02x}{b:02x}"


def contrast_text_color(bg_hex: str) -> str:  # noqa: D401
    """Pick black or white text for best contrast on *bg_hex*.

    Uses the YIQ perceptual luminance formula and returns **black** if the
    background is light, **white** otherwise. Unparsable input → black.
    """
    h = bg_hex.lstrip("#")
    if len(h) == 3:  # allow shorthand e.g. #fff
        h = "".join(ch * 2 for ch in h)
    try:
        r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        return "#000000"
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return "#000000" if yiq >= 128 else "#ffffff"


def chart_palette(n: int) -> list[str]:
    """*n* colours: the base palette, then progressively darker passes of it."""
    colors: list[str] = []
    shade = 0
    while len(colors) < n:
        fade = min(shade * 0.25, 0.75)
        colors.extend(_color_interp(c, fade) for c in _BASE_PALETTE)
        shade += 1
    return colors[:n]


def color_chip_html(bg_hex: str, label: str) -> str:
    """Inline pill with *label* on *bg_hex* for ``st.markdown(unsafe_allow_html=True)``."""
    fg = contrast_text_color(bg_hex)
    return (
        f'<span style="background-color:{escape(bg_hex)};color:{fg};'
        f'padding:2px 10px;border-radius:12px;font-size:0.85em">{escape(label)}</span>'
    )
