"""transformers.py

Pure functions turning loosely-typed API JSON into the pydantic models in
``model.py``.

The backend is not strict about types: balances arrive as strings, optional
numbers as ``""``, lists sometimes wrapped in an envelope. Every transformer
here substitutes a safe default instead of letting ``NaN`` or a
``ValidationError`` reach the page:

* non-numeric / NaN / infinite numbers → ``0`` (or ``None`` when optional)
* missing strings → ``""``
* anything that is not a list → ``[]``

Rows without a usable integer ``id`` are dropped – the CRUD pages cannot
address them anyway.
"""

from __future__ import annotations

import math
from typing import Any, Callable, TypeVar

from pydantic import ValidationError

from .model import (
    AssetCategory,
    CashHolding,
    CategoryRef,
    CryptoHolding,
    EquityGrant,
    ManualEntry,
    OtherAsset,
    RealEstate,
    StockHolding,
)
from networth_deck.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# -----------------------------------------------------------------------------
# Scalar coercers
# -----------------------------------------------------------------------------

def to_float(value: Any, default: float | None = 0.0) -> float | None:
    """Return *value* as a finite float, or *default*.

    >>> to_float("12.5")
    12.5
    >>> to_float("not-a-number")
    0.0
    >>> to_float(float("nan"), None) is None
    True
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_int(value: Any, default: int | None = 0) -> int | None:
    number = to_float(value, None)
    if number is None or number != int(number):
        return default
    return int(number)


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def to_list(value: Any, key: str | None = None) -> list:
    """Lists pass through; ``{key: [...]}`` envelopes are unwrapped."""
    if isinstance(value, list):
        return value
    if key and isinstance(value, dict) and isinstance(value.get(key), list):
        return value[key]
    return []


def to_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}

# -----------------------------------------------------------------------------
# Generic row driver
# -----------------------------------------------------------------------------

def _transform_rows(
    raw: Any,
    key: str,
    row_fn: Callable[[dict], T],
) -> list[T]:
    out: list[T] = []
    for row in to_list(raw, key):
        if not isinstance(row, dict):
            logger.warning("Skipping non-object %s row: %r", key, row)
            continue
        if to_int(row.get("id"), None) is None:
            logger.warning("Skipping %s row without id: %r", key, row)
            continue
        try:
            out.append(row_fn(row))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s row %s: %s", key, row.get("id"), exc)
    return out


def _base(row: dict) -> dict:
    return {"id": to_int(row.get("id")), "created_at": to_str(row.get("created_at"))}

# -----------------------------------------------------------------------------
# Per asset type
# -----------------------------------------------------------------------------

def _cash_row(row: dict) -> CashHolding:
    return CashHolding(
        **_base(row),
        institution_name=to_str(row.get("institution_name")),
        account_name=to_str(row.get("account_name")),
        account_type=to_str(row.get("account_type")),
        current_balance=to_float(row.get("current_balance")),
        interest_rate=to_float(row.get("interest_rate"), None),
        monthly_contribution=to_float(row.get("monthly_contribution"), None),
        account_number_last4=to_str(row.get("account_number_last4")),
        currency=to_str(row.get("currency")) or "USD",
        notes=to_str(row.get("notes")),
        updated_at=to_str(row.get("updated_at")),
    )


def transform_cash_holdings(raw: Any) -> list[CashHolding]:
    return _transform_rows(raw, "cash_holdings", _cash_row)


def _crypto_row(row: dict) -> CryptoHolding:
    return CryptoHolding(
        **_base(row),
        institution_name=to_str(row.get("institution_name")),
        crypto_symbol=to_str(row.get("crypto_symbol")).upper(),
        balance_tokens=to_float(row.get("balance_tokens")),
        purchase_price_usd=to_float(row.get("purchase_price_usd"), None),
        purchase_date=to_str(row.get("purchase_date")),
        wallet_address=to_str(row.get("wallet_address")),
        notes=to_str(row.get("notes")),
        updated_at=to_str(row.get("updated_at")),
        current_price_usd=to_float(row.get("current_price_usd"), None),
        current_price_btc=to_float(row.get("current_price_btc"), None),
        current_value_usd=to_float(row.get("current_value_usd"), None),
        price_change_24h=to_float(row.get("price_change_24h"), None),
        price_last_updated=to_str(row.get("price_last_updated")),
    )


def transform_crypto_holdings(raw: Any) -> list[CryptoHolding]:
    return _transform_rows(raw, "crypto_holdings", _crypto_row)


def _stock_row(row: dict) -> StockHolding:
    return StockHolding(
        **_base(row),
        account_id=to_int(row.get("account_id")),
        symbol=to_str(row.get("symbol")).upper(),
        company_name=to_str(row.get("company_name")),
        shares_owned=to_float(row.get("shares_owned")),
        cost_basis=to_float(row.get("cost_basis"), None),
        current_price=to_float(row.get("current_price"), None),
        market_value=to_float(row.get("market_value"), None),
        data_source=to_str(row.get("data_source")),
        institution_name=to_str(row.get("institution_name")),
    )


def transform_stock_holdings(raw: Any) -> list[StockHolding]:
    return _transform_rows(raw, "stocks", _stock_row)


def _equity_row(row: dict) -> EquityGrant:
    return EquityGrant(
        **_base(row),
        account_id=to_int(row.get("account_id")),
        grant_type=to_str(row.get("grant_type")),
        company_symbol=to_str(row.get("company_symbol")).upper(),
        total_shares=to_float(row.get("total_shares")),
        vested_shares=to_float(row.get("vested_shares")),
        unvested_shares=to_float(row.get("unvested_shares")),
        strike_price=to_float(row.get("strike_price"), None),
        grant_date=to_str(row.get("grant_date")),
        vest_start_date=to_str(row.get("vest_start_date")),
        current_price=to_float(row.get("current_price"), None),
        data_source=to_str(row.get("data_source")),
    )


def transform_equity_grants(raw: Any) -> list[EquityGrant]:
    return _transform_rows(raw, "equity_grants", _equity_row)


def _real_estate_row(row: dict) -> RealEstate:
    return RealEstate(
        **_base(row),
        account_id=to_int(row.get("account_id")),
        property_name=to_str(row.get("property_name")),
        property_type=to_str(row.get("property_type")),
        street_address=to_str(row.get("street_address")),
        city=to_str(row.get("city")),
        state=to_str(row.get("state")),
        zip_code=to_str(row.get("zip_code")),
        current_value=to_float(row.get("current_value")),
        purchase_price=to_float(row.get("purchase_price"), None),
        purchase_date=to_str(row.get("purchase_date")),
        outstanding_mortgage=to_float(row.get("outstanding_mortgage")),
        property_size_sqft=to_float(row.get("property_size_sqft"), None),
        lot_size_acres=to_float(row.get("lot_size_acres"), None),
        rental_income_monthly=to_float(row.get("rental_income_monthly"), None),
        property_tax_annual=to_float(row.get("property_tax_annual"), None),
        notes=to_str(row.get("notes")),
    )


def transform_real_estate(raw: Any) -> list[RealEstate]:
    # Older backends answer {"properties": [...]} instead of {"real_estate": [...]}
    if isinstance(raw, dict) and "real_estate" not in raw:
        raw = raw.get("properties", [])
    return _transform_rows(raw, "real_estate", _real_estate_row)


def summarize_real_estate(properties: list[RealEstate]) -> dict[str, float]:
    """Totals shown above the property grid."""
    return {
        "total_value": sum(p.current_value for p in properties),
        "total_equity": sum(p.equity for p in properties),
        "total_mortgage": sum(p.outstanding_mortgage for p in properties),
        "count": len(properties),
    }


def _other_asset_row(row: dict) -> OtherAsset:
    category = row.get("category")
    current_value = to_float(row.get("current_value"))
    amount_owed = to_float(row.get("amount_owed"), None)
    return OtherAsset(
        **_base(row),
        asset_name=to_str(row.get("asset_name")),
        asset_category_id=to_int(row.get("asset_category_id")),
        current_value=current_value,
        purchase_price=to_float(row.get("purchase_price"), None),
        amount_owed=amount_owed,
        equity=to_float(row.get("equity"), current_value - (amount_owed or 0)),
        purchase_date=to_str(row.get("purchase_date")),
        description=to_str(row.get("description")),
        notes=to_str(row.get("notes")),
        custom_fields=to_dict(row.get("custom_fields")),
        valuation_method=to_str(row.get("valuation_method")) or "manual",
        last_updated=to_str(row.get("last_updated")),
        category=CategoryRef(**{k: to_str(v) for k, v in category.items() if k in CategoryRef.model_fields})
        if isinstance(category, dict) else None,
    )


def transform_other_assets(raw: Any) -> list[OtherAsset]:
    return _transform_rows(raw, "other_assets", _other_asset_row)


def _category_row(row: dict) -> AssetCategory:
    return AssetCategory(
        **_base(row),
        name=to_str(row.get("name")),
        description=to_str(row.get("description")),
        icon=to_str(row.get("icon")),
        color=to_str(row.get("color")) or "#3B82F6",
        custom_schema=to_dict(row.get("custom_schema")),
        is_active=bool(row.get("is_active", True)),
        sort_order=to_int(row.get("sort_order")),
        updated_at=to_str(row.get("updated_at")),
    )


def transform_asset_categories(raw: Any) -> list[AssetCategory]:
    categories = _transform_rows(raw, "asset_categories", _category_row)
    return sorted(categories, key=lambda c: (c.sort_order, c.name.lower()))


def _manual_entry_row(row: dict) -> ManualEntry:
    data_json = row.get("data_json")
    return ManualEntry(
        **_base(row),
        account_id=to_int(row.get("account_id")),
        entry_type=to_str(row.get("entry_type")),
        data_json=data_json if isinstance(data_json, str) else "{}",
        updated_at=to_str(row.get("updated_at")),
        account_name=to_str(row.get("account_name")),
        institution=to_str(row.get("institution")),
    )


def dedupe_manual_entries(entries: list[ManualEntry]) -> list[ManualEntry]:
    """Keep the first entry per ``entry_type-id-account_id-created_at``.

    Entries without an ``entry_type`` cannot be edited or deleted (the
    backend needs the type) and are dropped as well.
    """
    seen: set[str] = set()
    unique: list[ManualEntry] = []
    for entry in entries:
        if not entry.entry_type:
            logger.warning("Dropping manual entry %s without entry_type", entry.id)
            continue
        if entry.dedupe_key in seen:
            logger.warning("Dropping duplicate manual entry %s", entry.dedupe_key)
            continue
        seen.add(entry.dedupe_key)
        unique.append(entry)
    return unique


def transform_manual_entries(raw: Any) -> list[ManualEntry]:
    return dedupe_manual_entries(_transform_rows(raw, "manual_entries", _manual_entry_row))
