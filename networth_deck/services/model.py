"""model.py

Pydantic **domain models** shared across UI layers.

These classes mirror the JSON payloads coming from the NetWorth API so
that Streamlit pages (or any other consumer) get *typed* records with
autocompletion while staying agnostic of the wire format. Raw payloads are
loosely typed; ``transformers.py`` coerces them before they reach these
models.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import json
from typing import Any, Literal, Optional

# Third-party
from pydantic import BaseModel, ConfigDict, Field

# -----------------------------------------------------------------------------
# Base record
# -----------------------------------------------------------------------------

class AssetRecord(BaseModel):
    """Every item handled by the CRUD pages has an integer id."""

    model_config = ConfigDict(extra="allow")

    id: int
    created_at: str = ""


# -----------------------------------------------------------------------------
# Asset models
# -----------------------------------------------------------------------------

class CashHolding(AssetRecord):
    """Checking, savings, money-market … account at an institution."""

    institution_name: str = ""
    account_name: str = ""
    account_type: str = ""
    current_balance: float = 0.0
    interest_rate: Optional[float] = None          # annual, in percent
    monthly_contribution: Optional[float] = None
    account_number_last4: str = ""
    currency: str = "USD"
    notes: str = ""
    updated_at: str = ""


class CryptoHolding(AssetRecord):
    """Token balance held at an exchange or in a wallet."""

    institution_name: str = ""
    crypto_symbol: str = ""
    balance_tokens: float = 0.0
    purchase_price_usd: Optional[float] = None
    purchase_date: str = ""
    wallet_address: str = ""
    notes: str = ""
    updated_at: str = ""
    # Filled in by the backend price service
    current_price_usd: Optional[float] = None
    current_price_btc: Optional[float] = None
    current_value_usd: Optional[float] = None
    price_change_24h: Optional[float] = None
    price_last_updated: str = ""

    @property
    def value_usd(self) -> float:  # noqa: D401 – short property description fine
        """Market value in USD – falls back to balance × price, then 0."""
        if self.current_value_usd is not None:
            return self.current_value_usd
        return self.balance_tokens * (self.current_price_usd or 0)


class StockHolding(AssetRecord):
    account_id: int = 0
    symbol: str = ""
    company_name: str = ""
    shares_owned: float = 0.0
    cost_basis: Optional[float] = None
    current_price: Optional[float] = None
    market_value: Optional[float] = None
    data_source: str = ""
    institution_name: str = ""

    @property
    def value(self) -> float:
        if self.market_value is not None:
            return self.market_value
        return self.shares_owned * (self.current_price or 0)


class StockConsolidation(BaseModel):
    """One symbol aggregated across every account that holds it."""

    symbol: str
    company_name: str = ""
    total_shares: float = 0.0
    total_value: float = 0.0
    current_price: float = 0.0
    unrealized_gains: float = 0.0


class EquityGrant(AssetRecord):
    account_id: int = 0
    grant_type: str = ""
    company_symbol: str = ""
    total_shares: float = 0.0
    vested_shares: float = 0.0
    unvested_shares: float = 0.0
    strike_price: Optional[float] = None
    grant_date: str = ""
    vest_start_date: str = ""
    current_price: Optional[float] = None
    data_source: str = ""

    @property
    def per_share_value(self) -> float:
        """Options are worth price − strike (floored at 0); RSUs / RSAs the price."""
        price = self.current_price or 0
        if self.grant_type in ("stock_option", "stock_options") and self.strike_price:
            return max(price - self.strike_price, 0)
        return price

    @property
    def vested_value(self) -> float:
        return self.vested_shares * self.per_share_value

    @property
    def unvested_value(self) -> float:
        return self.unvested_shares * self.per_share_value


class RealEstate(AssetRecord):
    account_id: int = 0
    property_name: str = ""
    property_type: str = ""
    street_address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    current_value: float = 0.0
    purchase_price: Optional[float] = None
    purchase_date: str = ""
    outstanding_mortgage: float = 0.0
    property_size_sqft: Optional[float] = None
    lot_size_acres: Optional[float] = None
    rental_income_monthly: Optional[float] = None
    property_tax_annual: Optional[float] = None
    notes: str = ""

    @property
    def equity(self) -> float:
        return self.current_value - self.outstanding_mortgage


class CategoryRef(BaseModel):
    name: str = ""
    description: str = ""
    icon: str = ""
    color: str = ""


class OtherAsset(AssetRecord):
    asset_name: str = ""
    asset_category_id: int = 0
    current_value: float = 0.0
    purchase_price: Optional[float] = None
    amount_owed: Optional[float] = None
    equity: float = 0.0
    purchase_date: str = ""
    description: str = ""
    notes: str = ""
    custom_fields: dict[str, Any] = Field(default_factory=dict)
    valuation_method: str = ""
    last_updated: str = ""
    category: Optional[CategoryRef] = None


class AssetCategory(AssetRecord):
    name: str = ""
    description: str = ""
    icon: str = ""
    color: str = "#3B82F6"
    custom_schema: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    sort_order: int = 0
    updated_at: str = ""

    @property
    def custom_field_count(self) -> int:
        fields = self.custom_schema.get("fields", [])
        return len(fields) if isinstance(fields, list) else 0


class ManualEntry(AssetRecord):
    """Row from `/manual-entries`; the payload itself is JSON in a string."""

    account_id: int = 0
    entry_type: str = ""
    data_json: str = "{}"
    updated_at: str = ""
    account_name: str = ""
    institution: str = ""

    @property
    def data(self) -> dict[str, Any]:
        """Decoded ``data_json`` – an empty dict when it is not valid JSON."""
        try:
            parsed = json.loads(self.data_json)
        except (TypeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}

    @property
    def dedupe_key(self) -> str:
        return f"{self.entry_type}-{self.id}-{self.account_id}-{self.created_at}"


# -----------------------------------------------------------------------------
# Form schema (drives the dynamic form renderer)
# -----------------------------------------------------------------------------

class FieldOption(BaseModel):
    value: str
    label: str


class FieldValidation(BaseModel):
    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None


class FormField(BaseModel):
    name: str
    type: str = "text"                     # text, number, date, select, textarea …
    label: str = ""
    description: str = ""
    required: bool = False
    placeholder: str = ""
    default_value: Any = None
    options: list[FieldOption] = Field(default_factory=list)
    validation: Optional[FieldValidation] = None


class FormSchema(BaseModel):
    """Backend-declared description of a form (plugin or category)."""

    name: str = ""
    description: str = ""
    version: str = ""
    fields: list[FormField] = Field(default_factory=list)


class Plugin(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    friendly_name: str = ""
    type: str = ""
    description: str = ""
    enabled: bool = False
    status: str = ""

    @property
    def is_manual(self) -> bool:
        return self.type == "manual" and self.enabled


# -----------------------------------------------------------------------------
# Dashboard / status models
# -----------------------------------------------------------------------------

class NetWorthSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    net_worth: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    vested_equity_value: float = 0.0
    unvested_equity_value: float = 0.0
    stock_holdings_value: float = 0.0
    real_estate_equity: float = 0.0
    cash_holdings_value: float = 0.0
    crypto_holdings_value: float = 0.0
    other_assets_value: float = 0.0
    last_updated: str = ""


class PluginsInfo(BaseModel):
    total_count: int = 0
    available: list[str] = Field(default_factory=list)


class PriceServiceInfo(BaseModel):
    provider: str = ""
    last_updated: str = ""
    stale_prices: int = 0
    total_symbols: int = 0
    cache_age_minutes: float = 0.0
    force_refresh_needed: bool = False


class HealthStatus(BaseModel):
    """Payload of `GET /health`."""

    model_config = ConfigDict(extra="allow")

    status: str = "unknown"
    timestamp: str = ""
    database: str = ""
    plugins: PluginsInfo = Field(default_factory=PluginsInfo)
    price_service: PriceServiceInfo = Field(default_factory=PriceServiceInfo)
    market_status: dict[str, Any] = Field(default_factory=dict)
    crypto_service: dict[str, Any] = Field(default_factory=dict)
    property_service: dict[str, Any] = Field(default_factory=dict)
    version: str = ""

    @property
    def market_open(self) -> bool:
        return bool(self.market_status.get("is_open", False))


class Message(BaseModel):
    """Banner shown near a form; success banners carry an expiry."""

    type: Literal["success", "error"]
    text: str
    expires_at: Optional[float] = None
