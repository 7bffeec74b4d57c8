"""Behaviour of the AssetCRUD orchestrator against an in-memory API."""
from __future__ import annotations

import logging
import threading

import pytest
import requests

from conftest import FakeCashApi, make_crud
from networth_deck.services.crud import AssetCRUD, CRUDError, UnsupportedOperationError
from networth_deck.services.model import CashHolding


def _http_error(body: bytes, status: int = 400) -> requests.HTTPError:
    response = requests.Response()
    response.status_code = status
    response._content = body
    return requests.HTTPError(f"{status} Client Error", response=response)

# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def test_initial_state_is_loading(cash_api, clock):
    fresh = make_crud(cash_api, clock)
    assert fresh.state.loading is True
    assert fresh.state.items == []
    assert fresh.state.view_mode == "grid"


def test_load_items_transforms_rows(crud):
    state = crud.state
    assert state.loading is False
    assert state.error is None
    assert [h.institution_name for h in state.items] == ["Chase", "Ally"]
    assert all(isinstance(h, CashHolding) for h in state.items)
    assert state.items[1].current_balance == 5000.5
    assert isinstance(state.raw_data, list)


def test_reload_is_idempotent(crud):
    first = crud.state.items
    crud.load_items()
    crud.load_items()
    assert crud.state.items == first


def test_non_numeric_balance_becomes_zero(clock):
    api = FakeCashApi([{"id": 7, "institution_name": "X", "current_balance": "not-a-number"}])
    c = make_crud(api, clock)
    c.load_items()
    assert c.state.items[0].current_balance == 0


def test_state_is_a_snapshot(crud):
    snapshot = crud.state
    snapshot.items.clear()
    snapshot.add_modal_open = True
    assert len(crud.state.items) == 2
    assert crud.state.add_modal_open is False


def test_load_failure_keeps_last_items(crud, cash_api):
    cash_api.fail_on.add("get_all")
    crud.load_items()
    state = crud.state
    assert state.error == "Failed to load Cash Holdings. Please try again."
    assert len(state.items) == 2
    assert state.loading is False


def test_refresh_drives_refreshing_flag(cash_api, clock):
    seen = {}
    holder: dict[str, AssetCRUD] = {}

    def fetch():
        seen["refreshing"] = holder["crud"].state.refreshing
        seen["loading"] = holder["crud"].state.loading
        return cash_api.get_all()

    c = make_crud(cash_api, clock, fetch_all=fetch)
    holder["crud"] = c
    c.load_items()
    c.refresh_items()
    assert seen == {"refreshing": True, "loading": False}
    assert c.state.refreshing is False


def test_refresh_failure_sets_error(crud, cash_api):
    cash_api.fail_on.add("get_all")
    crud.refresh_items()
    assert crud.state.error == "Failed to refresh Cash Holdings. Please try again."
    assert crud.state.refreshing is False


def test_stale_load_is_discarded(cash_api, clock):
    """A load that finishes after a newer one must not overwrite it."""
    holder: dict[str, AssetCRUD] = {}
    stale = [{"id": 99, "institution_name": "Stale Bank"}]
    calls = {"n": 0}

    def fetch():
        calls["n"] += 1
        if calls["n"] == 1:
            holder["crud"].load_items()  # a newer load starts and completes first
            return stale
        return cash_api.get_all()

    c = make_crud(cash_api, clock, fetch_all=fetch)
    holder["crud"] = c
    c.load_items()
    assert [h.institution_name for h in c.state.items] == ["Chase", "Ally"]


def test_initialize_loads_items_and_schema(cash_api, clock):
    c = make_crud(cash_api, clock)
    c.initialize()
    state = c.state
    assert len(state.items) == 2
    assert state.schema["name"] == "cash_holdings"
    assert cash_api.count("get_all") == 1
    assert cash_api.count("schema") == 1


def test_schema_failure_is_not_fatal(cash_api, clock):
    def broken():
        raise RuntimeError("no schema")

    c = make_crud(cash_api, clock, fetch_schema=broken)
    c.initialize()
    assert c.state.schema is None
    assert c.state.error is None
    assert len(c.state.items) == 2


def test_empty_schema_keeps_previous_one(cash_api, clock, caplog):
    c = make_crud(cash_api, clock)
    c.load_schema()
    c.config.fetch_schema = lambda: None
    with caplog.at_level(logging.INFO):
        caplog.clear()
        c.load_schema()
    assert c.state.schema["name"] == "cash_holdings"
    assert "No schema to load for Cash Holding" in caplog.text
    assert "Loaded schema" not in caplog.text


def test_initialize_prepares_each_worker_thread(cash_api, clock):
    prepared: list[str] = []
    c = AssetCRUD(
        make_crud(cash_api, clock).config, clock=clock, message_ttl=3,
        worker_init=lambda: prepared.append(threading.current_thread().name),
    )
    c.initialize()
    assert prepared
    assert all(name.startswith("crud-init") for name in prepared)
    assert c.state.schema["name"] == "cash_holdings"


def test_load_schema_for_category(cash_api, clock):
    c = make_crud(cash_api, clock, fetch_schema_for_category=lambda cid: {"name": f"cat-{cid}"})
    c.load_schema_for_category(4)
    assert c.state.schema == {"name": "cat-4"}

# -----------------------------------------------------------------------------
# Panels
# -----------------------------------------------------------------------------

def test_close_modals_resets_everything(crud):
    item = crud.state.items[0]
    crud.open_add_modal()
    crud.open_edit_modal(item)
    crud.open_view_modal(item)
    crud.open_delete_modal(item)
    assert crud.state.any_modal_open
    crud.close_modals()
    state = crud.state
    assert not (state.add_modal_open or state.edit_modal_open
                or state.view_modal_open or state.delete_modal_open)
    assert state.selected_item is None


def test_open_edit_selects_item(crud):
    item = crud.state.items[1]
    crud.open_edit_modal(item)
    assert crud.state.edit_modal_open is True
    assert crud.state.selected_item == item


def test_view_mode_and_clearing(crud):
    crud.set_view_mode("list")
    assert crud.state.view_mode == "list"
    crud._set(error="boom")
    crud.clear_error()
    assert crud.state.error is None

# -----------------------------------------------------------------------------
# Create
# -----------------------------------------------------------------------------

def test_create_success_scenario(crud, cash_api, clock):
    payload = {"institution_name": "Chase", "account_name": "Savings",
               "account_type": "savings", "current_balance": 1000}
    crud.open_add_modal()
    crud.handle_create(payload)

    assert cash_api.count("create") == 1
    assert ("create", payload) in cash_api.calls
    state = crud.state
    assert state.add_modal_open is False
    assert state.submitting is False
    assert any(h.account_name == "Savings" and h.current_balance == 1000 for h in state.items)
    assert state.message.type == "success"
    assert state.message.text == "Cash Holding added successfully!"

    clock.advance(2.999)
    assert crud.state.message is not None
    clock.advance(0.001)
    assert crud.state.message is None


def test_create_failure_keeps_panel_open(crud, cash_api):
    cash_api.fail_on.add("create")
    crud.open_add_modal()
    crud.handle_create({"institution_name": "Nope"})
    state = crud.state
    assert state.add_modal_open is True
    assert state.message.type == "error"
    assert state.message.text == "Failed to add Cash Holding. Please try again."
    assert state.submitting is False
    assert len(state.items) == 2


def test_create_failure_uses_backend_error_text(crud, clock):
    def create(_data):
        raise _http_error(b'{"error": "Account already exists"}')

    c = make_crud(FakeCashApi(), clock, create=create)
    c.open_add_modal()
    c.handle_create({"institution_name": "Dup"})
    assert c.state.message.text == "Account already exists"
    assert c.state.message.expires_at is None


def test_error_message_does_not_expire(crud, cash_api, clock):
    cash_api.fail_on.add("create")
    crud.handle_create({})
    clock.advance(60)
    assert crud.state.message.type == "error"


def test_create_unsupported_raises(cash_api, clock):
    c = make_crud(cash_api, clock, create=None)
    with pytest.raises(UnsupportedOperationError):
        c.handle_create({"x": 1})
    assert cash_api.count("create") == 0
    assert issubclass(UnsupportedOperationError, CRUDError)

# -----------------------------------------------------------------------------
# Update
# -----------------------------------------------------------------------------

def test_update_without_selection_raises(crud, cash_api):
    with pytest.raises(UnsupportedOperationError):
        crud.handle_update({"account_name": "Renamed"})
    assert cash_api.count("update") == 0


def test_update_unsupported_raises(cash_api, clock):
    c = make_crud(cash_api, clock, update=None)
    c.load_items()
    c.open_edit_modal(c.state.items[0])
    with pytest.raises(UnsupportedOperationError):
        c.handle_update({"account_name": "Renamed"})
    assert cash_api.count("update") == 0


def test_update_success(crud, cash_api):
    crud.open_edit_modal(crud.state.items[0])
    crud.handle_update({"account_name": "Everyday"})
    assert ("update", 1, {"account_name": "Everyday"}) in cash_api.calls
    state = crud.state
    assert state.edit_modal_open is False
    assert state.selected_item is None
    assert state.items[0].account_name == "Everyday"
    assert state.message.text == "Cash Holding updated successfully!"


def test_update_failure_keeps_panel_open(crud, cash_api):
    cash_api.fail_on.add("update")
    item = crud.state.items[0]
    crud.open_edit_modal(item)
    crud.handle_update({"account_name": "Everyday"})
    state = crud.state
    assert state.edit_modal_open is True
    assert state.selected_item == item
    assert state.message.text == "Failed to update Cash Holding. Please try again."

# -----------------------------------------------------------------------------
# Delete
# -----------------------------------------------------------------------------

def test_delete_success(crud, cash_api):
    crud.open_delete_modal(crud.state.items[0])
    crud.handle_delete()
    assert ("delete", 1) in cash_api.calls
    state = crud.state
    assert [h.id for h in state.items] == [2]
    assert state.delete_modal_open is False
    assert state.message.text == "Cash Holding deleted successfully!"
    assert state.submitting is False


def test_delete_failure_sets_error_and_keeps_panel(crud, cash_api):
    cash_api.fail_on.add("delete")
    item = crud.state.items[0]
    crud.open_delete_modal(item)
    crud.handle_delete()
    state = crud.state
    assert state.error == "Failed to delete Cash Holding. Please try again."
    assert state.delete_modal_open is True
    assert state.selected_item == item
    assert state.submitting is False
    assert len(state.items) == 2


def test_delete_without_selection_raises(crud, cash_api):
    with pytest.raises(UnsupportedOperationError):
        crud.handle_delete()
    assert cash_api.count("delete") == 0

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------

def test_failures_go_to_injected_logger(cash_api, clock, caplog):
    logger = logging.getLogger("tests.crud")
    c = AssetCRUD(make_crud(cash_api, clock).config, logger=logger, clock=clock, message_ttl=3)
    cash_api.fail_on.add("get_all")
    with caplog.at_level(logging.ERROR, logger="tests.crud"):
        c.load_items()
    assert any("Failed to load Cash Holdings" in r.getMessage() for r in caplog.records)
    assert all(r.name == "tests.crud" for r in caplog.records)
