"""Coercion of loosely-typed API payloads into the domain models."""
from __future__ import annotations

import json
import math

import pytest

from networth_deck.services import transformers as t
from networth_deck.services.model import EquityGrant, ManualEntry


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.5", 12.5),
        (3, 3.0),
        ("not-a-number", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("", 0.0),
    ],
)
def test_to_float(raw, expected):
    assert t.to_float(raw) == expected


def test_to_float_optional_default():
    assert t.to_float("garbage", None) is None
    assert t.to_int("4") == 4
    assert t.to_int("4.5", None) is None


def test_to_list_unwraps_envelope():
    assert t.to_list({"stocks": [1, 2]}, "stocks") == [1, 2]
    assert t.to_list({"other": [1]}, "stocks") == []
    assert t.to_list("nope") == []


def test_cash_holdings_never_produce_nan():
    rows = t.transform_cash_holdings(
        {"cash_holdings": [
            {"id": 1, "current_balance": "not-a-number", "interest_rate": "NaN"},
            {"id": "2", "current_balance": "250.75", "currency": None},
        ]}
    )
    assert rows[0].current_balance == 0
    assert rows[0].interest_rate is None
    assert rows[1].id == 2
    assert rows[1].current_balance == 250.75
    assert rows[1].currency == "USD"
    assert not any(math.isnan(r.current_balance) for r in rows)


def test_rows_without_id_or_not_objects_are_skipped():
    rows = t.transform_cash_holdings([{"institution_name": "no id"}, "junk", {"id": 3}])
    assert [r.id for r in rows] == [3]


def test_non_list_payload_gives_empty_list():
    assert t.transform_stock_holdings(None) == []
    assert t.transform_crypto_holdings({"unexpected": True}) == []


def test_crypto_symbol_upper_cased():
    (h,) = t.transform_crypto_holdings([{"id": 1, "crypto_symbol": "btc", "balance_tokens": "0.5",
                                        "current_price_usd": 60000}])
    assert h.crypto_symbol == "BTC"
    assert h.value_usd == 30000


def test_stock_value_prefers_market_value():
    a, b = t.transform_stock_holdings([
        {"id": 1, "symbol": "aapl", "shares_owned": 10, "current_price": 200, "market_value": 1999},
        {"id": 2, "symbol": "MSFT", "shares_owned": 2, "current_price": "400"},
    ])
    assert a.symbol == "AAPL"
    assert a.value == 1999
    assert b.value == 800


def test_equity_option_value_uses_spread():
    grant = EquityGrant(id=1, grant_type="stock_option", vested_shares=100, unvested_shares=50,
                        strike_price=30, current_price=50)
    assert grant.vested_value == 2000
    assert grant.unvested_value == 1000


def test_equity_underwater_option_is_worth_zero():
    grant = EquityGrant(id=1, grant_type="stock_option", vested_shares=100, strike_price=80, current_price=50)
    assert grant.vested_value == 0


def test_equity_rsu_ignores_strike():
    (grant,) = t.transform_equity_grants({"equity_grants": [
        {"id": 1, "grant_type": "rsu", "company_symbol": "ms", "vested_shares": "10",
         "current_price": 100, "strike_price": 40},
    ]})
    assert grant.company_symbol == "MS"
    assert grant.vested_value == 1000


def test_real_estate_accepts_properties_envelope():
    rows = t.transform_real_estate({"properties": [
        {"id": 1, "property_name": "Home", "current_value": "500000", "outstanding_mortgage": 200000},
    ]})
    assert len(rows) == 1
    assert rows[0].equity == 300000


def test_summarize_real_estate():
    rows = t.transform_real_estate([
        {"id": 1, "current_value": 500000, "outstanding_mortgage": 200000},
        {"id": 2, "current_value": 100000},
    ])
    assert t.summarize_real_estate(rows) == {
        "total_value": 600000,
        "total_equity": 400000,
        "total_mortgage": 200000,
        "count": 2,
    }


def test_other_assets_defaults():
    (a,) = t.transform_other_assets([
        {"id": 1, "asset_name": "Car", "current_value": 20000, "amount_owed": "5000",
         "custom_fields": {"make": "Honda"}, "category": {"name": "Vehicles", "color": "#FF0000"}},
    ])
    assert a.equity == 15000
    assert a.valuation_method == "manual"
    assert a.custom_fields == {"make": "Honda"}
    assert a.category.name == "Vehicles"


def test_categories_sorted_by_order_then_name():
    cats = t.transform_asset_categories([
        {"id": 1, "name": "beta", "sort_order": 2},
        {"id": 2, "name": "Alpha", "sort_order": 2},
        {"id": 3, "name": "zeta", "sort_order": 1, "color": ""},
    ])
    assert [c.name for c in cats] == ["zeta", "Alpha", "beta"]
    assert cats[0].color == "#3B82F6"


def _entry(**kw) -> dict:
    row = {"id": 1, "account_id": 9, "entry_type": "cash_holdings",
           "created_at": "2024-01-01T00:00:00Z", "data_json": json.dumps({"x": 1})}
    row.update(kw)
    return row


def test_manual_entries_are_deduplicated():
    rows = t.transform_manual_entries({"manual_entries": [
        _entry(), _entry(), _entry(entry_type="real_estate"), _entry(id=2),
    ]})
    assert [(e.entry_type, e.id) for e in rows] == [
        ("cash_holdings", 1), ("real_estate", 1), ("cash_holdings", 2),
    ]


def test_manual_entries_without_type_are_dropped(caplog):
    rows = t.transform_manual_entries([_entry(entry_type="")])
    assert rows == []
    assert "without entry_type" in caplog.text


def test_manual_entry_data_tolerates_bad_json():
    assert ManualEntry(id=1, data_json="{broken").data == {}
    assert ManualEntry(id=1, data_json="[1, 2]").data == {}
    assert ManualEntry(id=1, data_json='{"a": 1}').data == {"a": 1}
