"""REST client against a mocked backend (requests-mock)."""
from __future__ import annotations

import pytest
import requests

from networth_deck.services import api

V1 = f"{api.BASE}{api.PREFIX}"


def test_list_unwraps_envelope(requests_mock):
    requests_mock.get(f"{V1}/cash-holdings", json={"cash_holdings": [{"id": 1}], "count": 1})
    assert api.cash_holdings.get_all() == [{"id": 1}]


def test_list_accepts_bare_list_and_missing_key(requests_mock):
    requests_mock.get(f"{V1}/stocks", json=[{"id": 1}])
    requests_mock.get(f"{V1}/equity", json={"something_else": []})
    assert api.stocks.get_all() == [{"id": 1}]
    assert api.equity.get_all() == []


def test_get_raw_keeps_envelope(requests_mock):
    payload = {"properties": [{"id": 1}]}
    requests_mock.get(f"{V1}/real-estate", json=payload)
    assert api.real_estate.get_raw() == payload


def test_create_update_delete(requests_mock):
    create = requests_mock.post(f"{V1}/cash-holdings", json={"id": 5})
    update = requests_mock.put(f"{V1}/cash-holdings/5", json={"id": 5})
    delete = requests_mock.delete(f"{V1}/cash-holdings/5", status_code=204)

    assert api.cash_holdings.create({"institution_name": "Chase"}) == {"id": 5}
    api.cash_holdings.update(5, {"current_balance": 10.0})
    assert api.cash_holdings.delete(5) is None

    assert create.last_request.json() == {"institution_name": "Chase"}
    assert update.last_request.json() == {"current_balance": 10.0}
    assert delete.called_once


def test_manual_entry_mutations_send_type(requests_mock):
    put = requests_mock.put(f"{V1}/manual-entries/3", json={})
    delete = requests_mock.delete(f"{V1}/manual-entries/3", status_code=204)
    api.update_manual_entry(3, "real_estate", {"current_value": 1.0})
    api.delete_manual_entry(3, "cash_holdings")
    assert put.last_request.qs == {"type": ["real_estate"]}
    assert delete.last_request.qs == {"type": ["cash_holdings"]}


def test_other_assets_category_filter(requests_mock):
    m = requests_mock.get(f"{V1}/other-assets", json={"other_assets": []})
    api.get_other_assets("4")
    assert m.last_request.qs == {"category": ["4"]}
    api.get_other_assets()
    assert m.last_request.qs == {}


def test_plugin_endpoints(requests_mock):
    requests_mock.get(f"{V1}/plugins", json={"plugins": [{"name": "cash_holdings"}]})
    requests_mock.get(f"{V1}/plugins/other_assets/schema/2", json={"name": "other_assets", "fields": []})
    post = requests_mock.post(f"{V1}/plugins/crypto_holdings/manual-entry", json={"ok": True})

    assert api.get_plugins() == [{"name": "cash_holdings"}]
    assert api.get_schema_for_category("other_assets", 2)["name"] == "other_assets"
    api.process_manual_entry("crypto_holdings", {"crypto_symbol": "BTC"})
    assert post.last_request.json() == {"crypto_symbol": "BTC"}


def test_refresh_prices_force_flag(requests_mock):
    m = requests_mock.post(f"{V1}/prices/refresh", json={"summary": {"updated": 3}})
    assert api.refresh_prices(force=True) == {"updated": 3}
    assert m.last_request.qs == {"force": ["true"]}
    assert api.refresh_prices() == {"updated": 3}
    assert m.last_request.qs == {}


def test_net_worth_must_be_object(requests_mock):
    requests_mock.get(f"{V1}/net-worth", json=[1, 2])
    with pytest.raises(TypeError):
        api.get_net_worth()


def test_health_lives_outside_prefix(requests_mock):
    requests_mock.get(f"{api.BASE}/health", json={"status": "healthy"})
    assert api.get_health() == {"status": "healthy"}


def test_swagger_spec_is_raw_bytes(requests_mock):
    requests_mock.get(f"{V1}/swagger/spec", content=b'{"openapi": "3.0.0"}')
    assert api.get_swagger_spec() == b'{"openapi": "3.0.0"}'
    assert api.swagger_ui_url("dark").endswith("/swagger-ui.html?theme=dark")


def test_http_errors_propagate(requests_mock):
    requests_mock.get(f"{V1}/stocks", status_code=500, text="boom")
    with pytest.raises(requests.HTTPError):
        api.stocks.get_all()


def test_error_message_reads_backend_error(requests_mock):
    requests_mock.post(f"{V1}/cash-holdings", status_code=400, json={"error": "Invalid currency"})
    with pytest.raises(requests.HTTPError) as info:
        api.cash_holdings.create({"currency": "XX"})
    assert api.error_message(info.value, "fallback") == "Invalid currency"


def test_error_message_falls_back(requests_mock):
    requests_mock.post(f"{V1}/cash-holdings", status_code=500, text="not json")
    with pytest.raises(requests.HTTPError) as info:
        api.cash_holdings.create({})
    assert api.error_message(info.value, "fallback") == "fallback"
    assert api.error_message(requests.ConnectionError("down"), "fallback") == "fallback"
    assert api.error_message(ValueError("x"), "fallback") == "fallback"
