"""Form validation and coercion."""
from __future__ import annotations

from datetime import date

import pytest

from networth_deck.services.model import FormSchema
from networth_deck.services import validation as v

SCHEMA = FormSchema.model_validate(
    {
        "name": "cash_holdings",
        "fields": [
            {"name": "institution_name", "label": "Institution", "required": True,
             "validation": {"min_length": 2}},
            {"name": "current_balance", "label": "Balance", "type": "currency", "required": True,
             "validation": {"min": 0}},
            {"name": "interest_rate", "label": "Rate", "type": "percentage",
             "validation": {"max": 100}},
            {"name": "account_type", "label": "Type", "type": "select",
             "options": [{"value": "checking", "label": "Checking"},
                         {"value": "savings", "label": "Savings"}]},
            {"name": "opened", "label": "Opened", "type": "date"},
            {"name": "currency", "label": "Currency", "validation": {"pattern": "^[A-Z]{3}$"}},
            {"name": "sort_order", "type": "integer"},
            {"name": "symbol", "label": "Symbol"},
            {"name": "custom_fields.make", "label": "Make"},
        ],
    }
)


def test_valid_form_has_no_errors():
    data = {"institution_name": "Chase", "current_balance": 10.0, "account_type": "savings",
            "opened": date(2024, 1, 2), "currency": "USD"}
    assert v.validate_form(SCHEMA, data) == {}


def test_required_fields():
    errors = v.validate_form(SCHEMA, {"institution_name": "  ", "current_balance": None})
    assert errors == {
        "institution_name": "Institution is required",
        "current_balance": "Balance is required",
    }


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("current_balance", "abc", "Balance must be a valid number"),
        ("current_balance", -1, "Balance must be at least 0"),
        ("interest_rate", 150, "Rate must be at most 100"),
        ("account_type", "brokerage", "Type must be one of the listed options"),
        ("opened", "31/12/2024", "Opened must be a valid date"),
        ("currency", "usd", "Currency has an invalid format"),
        ("currency", "EURO", "Currency must be a 3-letter currency code"),
        ("symbol", "TOOLONGX", "Symbol must be a valid ticker symbol"),
        ("institution_name", "X", "Institution must be at least 2 characters"),
    ],
)
def test_field_rules(field, value, message):
    data = {"institution_name": "Chase", "current_balance": 1, field: value}
    assert v.validate_form(SCHEMA, data)[field] == message


def test_helpers():
    assert v.is_valid_currency_code("eur")
    assert not v.is_valid_currency_code("EURO")
    assert v.is_valid_stock_symbol("aapl")
    assert not v.is_valid_stock_symbol("TOOLONG")
    assert v.is_valid_date("2024-02-29")
    assert not v.is_valid_number(True)
    assert v.is_valid_number("3.5")


def test_coerce_form_data():
    out = v.coerce_form_data(SCHEMA, {
        "institution_name": "  Chase ",
        "current_balance": "12.5",
        "interest_rate": None,
        "opened": date(2024, 1, 2),
        "sort_order": 3.0,
        "custom_fields.make": "Honda",
        "currency": "",
    })
    assert out == {
        "institution_name": "Chase",
        "current_balance": 12.5,
        "opened": "2024-01-02",
        "sort_order": 3,
        "custom_fields": {"make": "Honda"},
    }
    assert isinstance(out["sort_order"], int)


def test_flatten_custom_fields():
    flat = v.flatten_custom_fields({"asset_name": "Car", "custom_fields": {"make": "Honda", "year": 2020}})
    assert flat == {"asset_name": "Car", "custom_fields.make": "Honda", "custom_fields.year": 2020}
