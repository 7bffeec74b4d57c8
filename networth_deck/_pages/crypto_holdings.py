"""crypto_holdings.py

Streamlit page for **crypto holdings** held on exchanges or in wallets.

New holdings go through the ``crypto_holdings`` manual-entry plugin so the
backend can validate the symbol and attach a price; edits and deletes use
the plain `/crypto-holdings` endpoints. The toolbar offers a *Prices*
button that asks the backend to refresh every tracked price before the
list is reloaded.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import requests
import streamlit as st

from networth_deck.services import api
from networth_deck.services.crud import AssetCRUD, AssetCRUDConfig
from networth_deck.services.model import CryptoHolding
from networth_deck.services.transformers import transform_crypto_holdings
from networth_deck.utils.logger import get_logger
from ._charts import finite_frame, plot
from ._colors import chart_palette
from ._helpers import (
    format_crypto,
    format_currency,
    format_percentage,
    format_relative_time,
    show_metrics_bulk,
)
from .asset_page import AssetPageConfig, render_asset_page

logger = get_logger(__name__)

COINGECKO_IDS = {
    "BTC": "bitcoin", "ETH": "ethereum", "SOL": "solana", "ADA": "cardano",
    "DOT": "polkadot", "XRP": "ripple", "DOGE": "dogecoin", "USDC": "usd-coin",
    "USDT": "tether", "AVAX": "avalanche-2", "MATIC": "matic-network", "LINK": "chainlink",
}


def coingecko_url(symbol: str) -> str:
    return f"https://www.coingecko.com/en/coins/{COINGECKO_IDS.get(symbol.upper(), symbol.lower())}"


def _refresh_prices(crud: AssetCRUD) -> None:
    try:
        api.refresh_crypto_prices()
    except requests.RequestException as exc:
        logger.error("❌ Failed to refresh crypto prices: %s", exc, exc_info=True)
        st.toast("Price refresh failed – showing last known prices.", icon="⚠️")
    crud.refresh_items()


def _toolbar(crud: AssetCRUD) -> None:
    st.button("💱 Prices", key="crypto-refresh-prices", on_click=_refresh_prices,
              args=(crud,), help="Refresh all crypto prices", use_container_width=True)


def _card(h: CryptoHolding) -> None:
    st.markdown(f"### [{h.crypto_symbol}]({coingecko_url(h.crypto_symbol)})")
    st.caption(h.institution_name)
    st.metric(
        "Value",
        format_currency(h.value_usd, "USD", 2),
        format_percentage(h.price_change_24h, 2) if h.price_change_24h is not None else None,
    )
    st.write(format_crypto(h.balance_tokens, h.crypto_symbol))
    if h.current_price_usd is not None:
        st.caption(f"Price {format_currency(h.current_price_usd, 'USD', 2)}"
                   f" · updated {format_relative_time(h.price_last_updated)}")


def _row(h: CryptoHolding) -> dict:
    return {
        "Symbol": h.crypto_symbol,
        "Institution": h.institution_name,
        "Balance": format_crypto(h.balance_tokens, h.crypto_symbol),
        "Price": format_currency(h.current_price_usd, "USD", 2),
        "Value": format_currency(h.value_usd, "USD", 2),
        "24h": format_percentage(h.price_change_24h, 2),
    }


def portfolio_change_24h(holdings: list[CryptoHolding]) -> float:
    """Value-weighted 24h change in percent (0 when nothing is priced)."""
    weighted = [(h.value_usd, h.price_change_24h) for h in holdings if h.price_change_24h is not None]
    total = sum(v for v, _ in weighted)
    if total <= 0:
        return 0.0
    return sum(v * c for v, c in weighted) / total


def _summary(holdings: list[CryptoHolding], _raw) -> None:
    show_metrics_bulk([
        {"label": "Total Value", "value": format_currency(sum(h.value_usd for h in holdings))},
        {"label": "Holdings", "value": len(holdings)},
        {"label": "Coins", "value": len({h.crypto_symbol for h in holdings})},
        {"label": "24h Change", "value": format_percentage(portfolio_change_24h(holdings), 2)},
    ])


def _charts(holdings: list[CryptoHolding]) -> None:
    df = finite_frame(
        pd.DataFrame([{"symbol": h.crypto_symbol, "value": h.value_usd} for h in holdings]),
        ["value"],
    )
    alloc = df.groupby("symbol", as_index=False)["value"].sum()
    st.subheader("Allocation")
    plot("crypto-allocation", lambda: px.pie(
        alloc, names="symbol", values="value", hole=0.4,
        color_discrete_sequence=chart_palette(len(alloc)),
    ))


CONFIG: AssetPageConfig[CryptoHolding] = AssetPageConfig(
    key="crypto_holdings",
    title="Crypto Holdings",
    description="Track your cryptocurrency portfolio across exchanges and wallets",
    icon="🪙",
    crud=AssetCRUDConfig(
        entity_name="Crypto Holding",
        fetch_all=api.crypto_holdings.get_all,
        create=lambda data: api.process_manual_entry("crypto_holdings", data),
        update=api.crypto_holdings.update,
        delete=api.crypto_holdings.delete,
        fetch_schema=lambda: api.get_schema("crypto_holdings"),
        transform_data=transform_crypto_holdings,
    ),
    render_card=_card,
    to_row=_row,
    render_summary=_summary,
    render_charts=_charts,
    render_toolbar=_toolbar,
    item_label=lambda h: f"{h.crypto_symbol} @ {h.institution_name}",
    get_form_data=lambda h: {
        "institution_name": h.institution_name,
        "crypto_symbol": h.crypto_symbol,
        "balance_tokens": h.balance_tokens,
        "purchase_price_usd": h.purchase_price_usd,
        "purchase_date": h.purchase_date,
        "wallet_address": h.wallet_address,
        "notes": h.notes,
    },
    supported_view_modes=("grid", "list", "charts"),
    grid_columns=4,
)


def render() -> None:
    render_asset_page(CONFIG)
