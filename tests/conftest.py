"""Shared fixtures: an in-memory fake of one REST collection and a manual clock."""
from __future__ import annotations

import pytest

from networth_deck.services.crud import AssetCRUD, AssetCRUDConfig
from networth_deck.services.transformers import transform_cash_holdings


class FakeClock:
    """Monotonic clock the test advances by hand (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCashApi:
    """Stands in for ``api.cash_holdings``; records every call."""

    def __init__(self, rows: list[dict] | None = None) -> None:
        self.rows = list(rows or [])
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self._next_id = max((r["id"] for r in self.rows), default=0) + 1

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"{name} exploded")

    def get_all(self):
        self.calls.append(("get_all",))
        self._maybe_fail("get_all")
        return list(self.rows)

    def create(self, data: dict):
        self.calls.append(("create", data))
        self._maybe_fail("create")
        row = {"id": self._next_id, **data}
        self._next_id += 1
        self.rows.append(row)
        return row

    def update(self, item_id: int, data: dict):
        self.calls.append(("update", item_id, data))
        self._maybe_fail("update")
        for row in self.rows:
            if row["id"] == item_id:
                row.update(data)
                return row
        raise KeyError(item_id)

    def delete(self, item_id: int) -> None:
        self.calls.append(("delete", item_id))
        self._maybe_fail("delete")
        self.rows = [r for r in self.rows if r["id"] != item_id]

    def schema(self):
        self.calls.append(("schema",))
        return {"name": "cash_holdings", "fields": [{"name": "institution_name", "required": True}]}

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cash_api() -> FakeCashApi:
    return FakeCashApi(
        [
            {"id": 1, "institution_name": "Chase", "account_name": "Checking",
             "account_type": "checking", "current_balance": 1200},
            {"id": 2, "institution_name": "Ally", "account_name": "Savings",
             "account_type": "savings", "current_balance": "5000.5", "interest_rate": 4.2},
        ]
    )


def make_crud(api: FakeCashApi, clock: FakeClock, **overrides) -> AssetCRUD:
    config = AssetCRUDConfig(
        entity_name="Cash Holding",
        fetch_all=api.get_all,
        create=api.create,
        update=api.update,
        delete=api.delete,
        fetch_schema=api.schema,
        transform_data=transform_cash_holdings,
    )
    for name, value in overrides.items():
        setattr(config, name, value)
    return AssetCRUD(config, clock=clock, message_ttl=3.0)


@pytest.fixture
def crud(cash_api, clock) -> AssetCRUD:
    c = make_crud(cash_api, clock)
    c.load_items()
    return c
