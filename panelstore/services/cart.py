"""
Cart state machine.

reduce(state, command) is the only way a CartState changes. CartStore owns one
state, runs commands through reduce() and writes a full JSON snapshot to its
storage after each one.
"""
from __future__ import annotations

import dataclasses
import json
import logging
import sqlite3
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple, Union

from panelstore.db.sqlite import kv_delete, kv_get, kv_set
from panelstore.errors import PersistenceError
from panelstore.models import CartItem, CartState

log = logging.getLogger(__name__)

EMPTY = CartState()


@dataclass(frozen=True)
class AddItem:
    item: CartItem


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    quantity: float


@dataclass(frozen=True)
class RemoveItem:
    product_id: str


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Load:
    state: CartState


Command = Union[AddItem, UpdateQuantity, RemoveItem, Clear, Load]


def reduce(state: CartState, command: Command) -> CartState:
    if isinstance(command, AddItem):
        new = command.item
        if state.find(new.product_id) is None:
            return CartState.of((*state.items, new))
        # same product: last write wins for quantity, total and lines; no summing
        return CartState.of(
            dataclasses.replace(
                it,
                quantity=new.quantity,
                total_price=new.total_price,
                lines=new.lines,
            )
            if it.product_id == new.product_id
            else it
            for it in state.items
        )

    if isinstance(command, UpdateQuantity):
        if command.quantity <= 0:
            return reduce(state, RemoveItem(command.product_id))
        return CartState.of(
            dataclasses.replace(
                it,
                quantity=command.quantity,
                total_price=it.price_per_unit * command.quantity,
            )
            if it.product_id == command.product_id
            else it
            for it in state.items
        )

    if isinstance(command, RemoveItem):
        return CartState.of(it for it in state.items if it.product_id != command.product_id)

    if isinstance(command, Clear):
        return EMPTY

    if isinstance(command, Load):
        return CartState.of(command.state.items)

    raise TypeError(f"unknown cart command: {command!r}")


def serialize(state: CartState) -> str:
    return json.dumps(state.to_dict())


def deserialize(raw: str) -> CartState:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"stored cart is not valid JSON: {e}") from e
    return CartState.from_dict(data)


# ---------------- storage ----------------

class CartStorage(Protocol):
    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SqliteCartStorage:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path

    def read(self, key: str) -> Optional[str]:
        return kv_get(key, self.db_path)

    def write(self, key: str, value: str) -> None:
        kv_set(key, value, self.db_path)

    def delete(self, key: str) -> None:
        kv_delete(key, self.db_path)


class MemoryCartStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


# ---------------- store ----------------

class CartStore:
    """
    Handlers may run on worker threads, so dispatch() holds a lock across
    reduce and persist. Snapshots reach storage in command order.
    """

    def __init__(self, storage: CartStorage, key: str = "cart"):
        self.storage = storage
        self.key = key
        self._state = EMPTY
        self._lock = threading.Lock()

    @property
    def state(self) -> CartState:
        return self._state

    def restore(self) -> CartState:
        """Read the persisted cart once at startup. Bad data is dropped."""
        try:
            raw = self.storage.read(self.key)
        except (OSError, sqlite3.Error):
            log.exception("cart storage read failed, starting empty")
            return self._state

        if raw is None:
            return self._state

        try:
            loaded = deserialize(raw)
        except PersistenceError as e:
            log.warning("discarding stored cart %r: %s", self.key, e)
            try:
                self.storage.delete(self.key)
            except (OSError, sqlite3.Error):
                log.exception("could not delete corrupt cart %r", self.key)
            self._state = EMPTY
            return self._state

        self._state = reduce(self._state, Load(loaded))
        log.info("restored cart %r: %d item(s)", self.key, self._state.total_items)
        return self._state

    def dispatch(self, command: Command) -> CartState:
        with self._lock:
            self._state = reduce(self._state, command)
            log.debug("cart %s -> %d item(s), total %.2f", type(command).__name__,
                      self._state.total_items, self._state.total_amount)
            self._persist()
            return self._state

    def _persist(self) -> None:
        try:
            self.storage.write(self.key, serialize(self._state))
        except (OSError, sqlite3.Error):
            log.exception("cart persist failed for %r", self.key)

    def add_item(self, item: CartItem) -> CartState:
        return self.dispatch(AddItem(item))

    def update_quantity(self, product_id: str, quantity: float) -> CartState:
        return self.dispatch(UpdateQuantity(product_id, quantity))

    def remove_item(self, product_id: str) -> CartState:
        return self.dispatch(RemoveItem(product_id))

    def clear(self) -> CartState:
        return self.dispatch(Clear())

    def reset(self) -> CartState:
        """Logout: forget the cart both in memory and in storage."""
        return self.clear()

    def checkout_snapshot(self) -> Tuple[CartItem, ...]:
        return self._state.items
