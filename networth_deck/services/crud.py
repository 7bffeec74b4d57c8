"""crud.py

State orchestrator behind every asset list page.

One ``AssetCRUD`` instance owns the list, form and panel state of a single
page (cash holdings, crypto, real estate …) and is the only thing that
talks to the API bindings it was configured with. Pages read
``crud.state`` and call the action methods; they never mutate the state
themselves.

Contract
--------
* API failures never escape an action. Load / refresh / delete failures
  land in ``state.error`` (persistent until the next successful action or
  ``clear_error``); create / update failures land in ``state.message``
  (type ``"error"``) and leave the open panel open.
* Calling a mutation the page was not configured for – or update / delete
  without a selected item – raises ``UnsupportedOperationError`` before
  any API call is made.
* Success messages expire ``message_ttl`` seconds after they are set.
* Only the most recently *issued* load may commit its result. A slow load
  that resolves after a newer one is discarded.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Optional, TypeVar

# Project
from networth_deck.config import settings
from networth_deck.utils.logger import get_logger
from .api import error_message
from .model import Message

T = TypeVar("T")

# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------

class CRUDError(Exception):
    """Base class for orchestrator contract violations."""


class UnsupportedOperationError(CRUDError):
    """Mutation not configured for this page, or no item selected."""

# -----------------------------------------------------------------------------
# Configuration & state
# -----------------------------------------------------------------------------

@dataclass
class AssetCRUDConfig(Generic[T]):
    """API bindings and per-type hooks for one asset page."""

    entity_name: str
    fetch_all: Callable[[], Any]
    create: Optional[Callable[[dict], Any]] = None
    update: Optional[Callable[[int, dict], Any]] = None
    delete: Optional[Callable[[int], None]] = None
    fetch_schema: Optional[Callable[[], Any]] = None
    fetch_schema_for_category: Optional[Callable[[int], Any]] = None
    transform_data: Optional[Callable[[Any], list[T]]] = None


@dataclass
class CRUDState(Generic[T]):
    items: list[T] = field(default_factory=list)
    raw_data: Any = None
    loading: bool = True
    refreshing: bool = False
    error: Optional[str] = None
    # Panels
    add_modal_open: bool = False
    edit_modal_open: bool = False
    view_modal_open: bool = False
    delete_modal_open: bool = False
    selected_item: Optional[T] = None
    # Forms
    schema: Any = None
    submitting: bool = False
    message: Optional[Message] = None
    view_mode: str = "grid"

    @property
    def any_modal_open(self) -> bool:
        return (
            self.add_modal_open
            or self.edit_modal_open
            or self.view_modal_open
            or self.delete_modal_open
        )

# -----------------------------------------------------------------------------
# Orchestrator
# -----------------------------------------------------------------------------

class AssetCRUD(Generic[T]):
    """Loading, panel and mutation state for one asset page."""

    def __init__(
        self,
        config: AssetCRUDConfig[T],
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
        message_ttl: float | None = None,
        worker_init: Callable[[], None] | None = None,
    ) -> None:
        self.config = config
        self.log = logger or get_logger(__name__)
        self._clock = clock
        self._message_ttl = (
            settings()["MESSAGE_TTL_SECONDS"] if message_ttl is None else message_ttl
        )
        self._state: CRUDState[T] = CRUDState()
        self._lock = threading.RLock()
        self._generation = 0
        # Runs first on every `initialize` worker thread
        self._worker_init = worker_init

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------
    @property
    def state(self) -> CRUDState[T]:
        """Snapshot of the current state with expired messages dropped."""
        with self._lock:
            msg = self._state.message
            if msg is not None and msg.expires_at is not None and self._clock() >= msg.expires_at:
                self._state.message = None
            return replace(self._state, items=list(self._state.items))

    def _set(self, **changes: Any) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(self._state, name, value)

    def _entity(self) -> str:
        return self.config.entity_name

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _fetch(self, flag: str, verb: str, icon: str) -> None:
        with self._lock:
            self._generation += 1
            generation = self._generation
            setattr(self._state, flag, True)
            self._state.error = None
        try:
            raw = self.config.fetch_all()
            items = self.config.transform_data(raw) if self.config.transform_data else list(raw or [])
        except Exception as exc:
            self.log.error("❌ Failed to %s %ss: %s", verb, self._entity(), exc, exc_info=True)
            with self._lock:
                if generation == self._generation:
                    self._state.error = f"Failed to {verb} {self._entity()}s. Please try again."
                setattr(self._state, flag, False)
            return

        with self._lock:
            if generation != self._generation:
                self.log.info("Discarding stale %s of %ss (superseded)", verb, self._entity())
            else:
                self._state.raw_data = raw
                self._state.items = items
                self.log.info("%s %sed %d %s(s)", icon, verb.capitalize(), len(items), self._entity())
            setattr(self._state, flag, False)

    def load_items(self) -> None:
        """Full (re)load – drives the page-level spinner via ``loading``."""
        self._fetch("loading", "load", "✅")

    def refresh_items(self) -> None:
        """User-triggered refresh – drives ``refreshing`` instead of ``loading``."""
        self._fetch("refreshing", "refresh", "🔄")

    def load_schema(self) -> None:
        if not self.config.fetch_schema:
            return
        try:
            schema = self.config.fetch_schema()
        except Exception as exc:
            self.log.error("❌ Failed to load schema for %s: %s", self._entity(), exc, exc_info=True)
            return
        if schema is None:
            self.log.info("No schema to load for %s", self._entity())
            return
        self._set(schema=schema)
        self.log.info("✅ Loaded schema for %s", self._entity())

    def load_schema_for_category(self, category_id: int) -> None:
        """Replace the generic schema with the one of *category_id*."""
        if not self.config.fetch_schema_for_category:
            return
        try:
            schema = self.config.fetch_schema_for_category(category_id)
        except Exception as exc:
            self.log.error(
                "❌ Failed to load schema for %s category %s: %s",
                self._entity(), category_id, exc, exc_info=True,
            )
            return
        self._set(schema=schema)
        self.log.info("✅ Loaded schema for %s category %s", self._entity(), category_id)

    def initialize(self) -> None:
        """First render: fetch the list and the form schema side by side."""
        with ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="crud-init", initializer=self._worker_init,
        ) as pool:
            futures = [pool.submit(self.load_items), pool.submit(self.load_schema)]
            for f in futures:
                f.result()

    # ------------------------------------------------------------------
    # Panels
    # ------------------------------------------------------------------
    def open_add_modal(self) -> None:
        self._set(add_modal_open=True)

    def open_edit_modal(self, item: T) -> None:
        self._set(selected_item=item, edit_modal_open=True)

    def open_view_modal(self, item: T) -> None:
        self._set(selected_item=item, view_modal_open=True)

    def open_delete_modal(self, item: T) -> None:
        self._set(selected_item=item, delete_modal_open=True)

    def close_modals(self) -> None:
        self._set(
            add_modal_open=False,
            edit_modal_open=False,
            view_modal_open=False,
            delete_modal_open=False,
            selected_item=None,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _success(self, text: str) -> None:
        self._set(message=Message(type="success", text=text, expires_at=self._clock() + self._message_ttl))

    def _submit(self, action: Callable[[], Any], past: str, verb: str) -> None:
        self._set(submitting=True, message=None)
        try:
            action()
        except Exception as exc:
            self.log.error("❌ Failed to %s %s: %s", verb, self._entity(), exc, exc_info=True)
            text = error_message(exc, f"Failed to {verb} {self._entity()}. Please try again.")
            self._set(message=Message(type="error", text=text))
        else:
            self._success(f"{self._entity()} {past} successfully!")
            self.load_items()
            self.close_modals()
        finally:
            self._set(submitting=False)

    def handle_create(self, form_data: dict) -> None:
        create = self.config.create
        if create is None:
            raise UnsupportedOperationError(f"Create not supported for {self._entity()}")
        self._submit(lambda: create(form_data), "added", "add")

    def handle_update(self, form_data: dict) -> None:
        update = self.config.update
        item = self._state.selected_item
        if update is None or item is None:
            raise UnsupportedOperationError(
                f"Update not supported for {self._entity()} or no item selected"
            )
        self._submit(lambda: update(item.id, form_data), "updated", "update")

    def handle_delete(self) -> None:
        delete = self.config.delete
        item = self._state.selected_item
        if delete is None or item is None:
            raise UnsupportedOperationError(
                f"Delete not supported for {self._entity()} or no item selected"
            )
        self._set(submitting=True)
        try:
            delete(item.id)
        except Exception as exc:
            self.log.error("❌ Failed to delete %s: %s", self._entity(), exc, exc_info=True)
            self._set(error=f"Failed to delete {self._entity()}. Please try again.")
        else:
            self.load_items()
            self.close_modals()
            self._success(f"{self._entity()} deleted successfully!")
        finally:
            self._set(submitting=False)

    # ------------------------------------------------------------------
    # UI helpers
    # ------------------------------------------------------------------
    def set_view_mode(self, mode: str) -> None:
        self._set(view_mode=mode)

    def clear_message(self) -> None:
        self._set(message=None)

    def clear_error(self) -> None:
        self._set(error=None)
