"""Checks applied to form input before it is sent to the backend.

``validate_form`` walks a ``FormSchema`` and returns ``{field: message}``
for every field that fails; an empty dict means the data may be submitted.
``coerce_form_data`` turns widget values into the JSON types the backend
expects (numbers as floats, blanks dropped, ``custom_fields.x`` keys
nested back under ``custom_fields``).
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from .model import FormField, FormSchema
from .transformers import to_float

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
STOCK_SYMBOL_RE = re.compile(r"^[A-Z]{1,5}$")
CUSTOM_PREFIX = "custom_fields."
SYMBOL_FIELDS = ("symbol", "company_symbol")
NUMERIC_TYPES = ("number", "integer", "currency", "percentage")


def is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_number(value: Any) -> bool:
    return not isinstance(value, bool) and to_float(value, None) is not None


def is_valid_currency_code(code: str) -> bool:
    return not is_empty(code) and bool(CURRENCY_RE.match(code.strip().upper()))


def is_valid_stock_symbol(symbol: str) -> bool:
    return not is_empty(symbol) and bool(STOCK_SYMBOL_RE.match(symbol.strip().upper()))


def is_valid_date(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if is_empty(value):
        return False
    try:
        datetime.fromisoformat(str(value))
    except ValueError:
        return False
    return True


def _check_field(field: FormField, value: Any) -> str | None:
    label = field.label or field.name
    if is_empty(value):
        return f"{label} is required" if field.required else None

    rules = field.validation
    if field.type in NUMERIC_TYPES:
        if not is_valid_number(value):
            return f"{label} must be a valid number"
        number = to_float(value)
        if rules and rules.min is not None and number < rules.min:
            return f"{label} must be at least {rules.min:g}"
        if rules and rules.max is not None and number > rules.max:
            return f"{label} must be at most {rules.max:g}"
        return None

    if field.name == "currency" and not is_valid_currency_code(str(value)):
        return f"{label} must be a 3-letter currency code"
    if field.name in SYMBOL_FIELDS and not is_valid_stock_symbol(str(value)):
        return f"{label} must be a valid ticker symbol"

    if field.type == "date" and not is_valid_date(value):
        return f"{label} must be a valid date"

    if field.type == "select" and field.options:
        if str(value) not in {o.value for o in field.options}:
            return f"{label} must be one of the listed options"

    if rules and isinstance(value, str):
        text = value.strip()
        if rules.min_length is not None and len(text) < rules.min_length:
            return f"{label} must be at least {rules.min_length} characters"
        if rules.max_length is not None and len(text) > rules.max_length:
            return f"{label} must be at most {rules.max_length} characters"
        if rules.pattern and not re.fullmatch(rules.pattern, text):
            return f"{label} has an invalid format"
    return None


def validate_form(schema: FormSchema, data: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field in schema.fields:
        problem = _check_field(field, data.get(field.name))
        if problem:
            errors[field.name] = problem
    return errors


def flatten_custom_fields(data: dict[str, Any]) -> dict[str, Any]:
    """``{"custom_fields": {"make": "Honda"}}`` → ``{"custom_fields.make": "Honda"}``."""
    out = {k: v for k, v in data.items() if k != "custom_fields"}
    nested = data.get("custom_fields")
    if isinstance(nested, dict):
        for name, value in nested.items():
            out[f"{CUSTOM_PREFIX}{name}"] = value
    return out


def coerce_form_data(schema: FormSchema, data: dict[str, Any]) -> dict[str, Any]:
    types = {f.name: f.type for f in schema.fields}
    out: dict[str, Any] = {}
    custom: dict[str, Any] = {}
    for name, value in data.items():
        if is_empty(value):
            continue
        if types.get(name) == "integer":
            value = int(to_float(value))
        elif types.get(name) in NUMERIC_TYPES:
            value = to_float(value)
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, str):
            value = value.strip()
        if name.startswith(CUSTOM_PREFIX):
            custom[name[len(CUSTOM_PREFIX):]] = value
        else:
            out[name] = value
    if custom:
        out["custom_fields"] = custom
    return out
