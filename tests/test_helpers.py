"""Formatting and colour helpers used by the pages."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from networth_deck._pages import _colors as colors
from networth_deck._pages import _helpers as h


@pytest.mark.parametrize(
    "value, kwargs, expected",
    [
        (1500, {}, "$1,500"),
        (1234.567, {"decimals": 2}, "$1,234.57"),
        (-250, {}, "-$250"),
        (1000, {"currency": "eur"}, "€1,000"),
        (1500, {"currency": "CHF"}, "1,500 CHF"),
        (0.5, {"currency": "BTC"}, "₿0.50000000"),
        (None, {}, "--"),
        (float("nan"), {}, "--"),
        (float("inf"), {}, "--"),
    ],
)
def test_format_currency(value, kwargs, expected):
    kwargs.setdefault("currency", "USD")
    assert h.format_currency(value, **kwargs) == expected


def test_format_number_trims_zeros():
    assert h.format_number(1234.5) == "1,234.5"
    assert h.format_number(1200.0) == "1,200"
    assert h.format_number(3, min_decimals=2) == "3.00"


def test_format_percentage_and_compact():
    assert h.format_percentage(4.25, 2) == "4.25%"
    assert h.format_percentage(None) == "--"
    assert h.format_compact_number(1_250_000) == "1.2M"
    assert h.format_compact_number(2_000) == "2K"
    assert h.format_compact_number(999) == "999"


def test_format_crypto_decimals():
    assert h.format_crypto(0.123456789, "btc") == "0.12345679 BTC"
    assert h.format_crypto(1.5, "sol") == "1.5 SOL"


def test_format_relative_time():
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert h.format_relative_time(now - timedelta(seconds=20), now) == "just now"
    assert h.format_relative_time(now - timedelta(minutes=1), now) == "1 minute ago"
    assert h.format_relative_time((now - timedelta(hours=5)).isoformat(), now) == "5 hours ago"
    assert h.format_relative_time("2024-05-29T12:00:00Z", now) == "3 days ago"
    assert h.format_relative_time("garbage", now) == "--"


def test_format_date_handles_bad_input():
    assert h.format_date("") == "--"
    assert h.format_date("not a date") == "--"


def test_truncate_text():
    assert h.truncate_text("short", 10) == "short"
    assert h.truncate_text("a" * 20, 10) == "aaaaaaa..."


def test_contrast_text_color():
    assert colors.contrast_text_color("#FFFFFF") == "#000000"
    assert colors.contrast_text_color("#000") == "#ffffff"
    assert colors.contrast_text_color("#1E3A8A") == "#ffffff"
    assert colors.contrast_text_color("nonsense") == "#000000"


def test_chart_palette_extends_without_repeats():
    palette = colors.chart_palette(12)
    assert len(palette) == 12
    assert len(set(palette)) == 12
    assert colors.chart_palette(0) == []


def test_color_chip_escapes_label():
    chip = colors.color_chip_html("#FFFFFF", "<b>Cars</b>")
    assert "&lt;b&gt;Cars&lt;/b&gt;" in chip
    assert "color:#000000" in chip


def test_lookups():
    assert colors.status_light("healthy") == "🟢"
    assert colors.status_light("unhealthy") == "🔴"
    assert colors.status_light(None) == "🟡"
    assert colors.account_type_info("Savings")["risk"] == "FDIC Insured"
    assert colors.account_type_info("mattress")["icon"] == "👛"
    assert colors.institution_type("Navy Federal Credit Union") == "Credit Union"
    assert colors.institution_type("Ally Bank") == "Online Bank"
    assert colors.institution_type("Chase") == "Bank"
