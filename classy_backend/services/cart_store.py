# classy_backend/services/cart_store.py
import json
import logging
import time
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from classy_backend.schemas.cart import CartItem

logger = logging.getLogger(__name__)

# How long the "added to cart" acknowledgment stays visible
LAST_ADDED_SECONDS = 2.5

CartListener = Callable[[list[CartItem]], None]


class InMemoryCartCache:
    """Non-durable cache; used for tests and throwaway sessions."""

    def __init__(self, items: list[dict] | None = None):
        self.data: list[dict] = list(items or [])

    def load(self) -> list[dict]:
        return list(self.data)

    def save(self, items: list[dict]) -> None:
        self.data = list(items)


class JsonFileCartCache:
    """
    Durable client-local cache: the cart as a JSON list in one file.

    Writes go to a temporary sibling first and are then renamed, so a crash
    mid-write leaves the previous cart instead of a truncated file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[dict]:
        """
        Raises:
            OSError: file missing or unreadable.
            ValueError: content is not a JSON list.
        """
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("cart cache is not a list")
        return data

    def save(self, items: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(items), encoding="utf-8")
        tmp.replace(self.path)


class CartStore:
    """
    The shopper's in-progress cart, one instance per client session.

    Rules:
      - at most one line per product id; adding an existing id merges by
        summing quantities
      - quantity never drops below 1; only remove_item() deletes a line
      - every mutation writes the full list through to the cache before
        listeners are notified

    Hydration fails open: a missing, unreadable or invalid cache gives an
    empty cart.
    """

    def __init__(self, cache, clock: Callable[[], float] = time.monotonic):
        self.cache = cache
        self.clock = clock
        self._items: list[CartItem] = self._hydrate()
        self._listeners: list[CartListener] = []
        self._last_added: tuple[str, float] | None = None

    def _hydrate(self) -> list[CartItem]:
        try:
            raw = self.cache.load()
            items = [CartItem.model_validate(entry) for entry in raw]
        except (OSError, ValueError, TypeError, ValidationError) as exc:
            logger.info("Starting with an empty cart: %s", exc)
            return []

        # Collapse duplicates a hand-edited cache might contain
        merged: dict[str, CartItem] = {}
        for item in items:
            if item.id in merged:
                merged[item.id].quantity += item.quantity
            else:
                merged[item.id] = item
        return list(merged.values())

    def _draft(self) -> list[CartItem]:
        """Working copy for a mutation; self._items changes only in _commit."""
        return [item.model_copy() for item in self._items]

    @staticmethod
    def _find(items: list[CartItem], item_id: str) -> CartItem | None:
        for item in items:
            if item.id == item_id:
                return item
        return None

    def _commit(self, items: list[CartItem]) -> None:
        # A failed save leaves both the cache and the in-memory cart untouched
        self.cache.save([item.model_dump(mode="json") for item in items])
        self._items = items
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)

    # ----- Queries -----

    @property
    def items(self) -> list[CartItem]:
        """Copy of the current lines."""
        return [item.model_copy() for item in self._items]

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> float:
        return round(sum(item.price * item.quantity for item in self._items), 2)

    @property
    def last_added_name(self) -> str | None:
        """Name of the last added product, for LAST_ADDED_SECONDS after the add."""
        if self._last_added is None:
            return None
        name, added_at = self._last_added
        if self.clock() - added_at >= LAST_ADDED_SECONDS:
            self._last_added = None
            return None
        return name

    def checkout_items(self) -> list[dict]:
        """Line items in the shape POST /checkout expects."""
        return [
            {
                "id": item.id,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "image": item.image,
            }
            for item in self._items
        ]

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----- Mutations -----

    def add_item(self, item: CartItem) -> None:
        items = self._draft()
        existing = self._find(items, item.id)
        if existing:
            existing.quantity += item.quantity
        else:
            items.append(item.model_copy())
        self._commit(items)
        self._last_added = (item.name, self.clock())

    def remove_item(self, item_id: str) -> None:
        if self._find(self._items, item_id) is None:
            return
        self._commit([item for item in self._draft() if item.id != item_id])

    def increase_qty(self, item_id: str) -> None:
        items = self._draft()
        item = self._find(items, item_id)
        if item is None:
            return
        item.quantity += 1
        self._commit(items)

    def decrease_qty(self, item_id: str) -> None:
        items = self._draft()
        item = self._find(items, item_id)
        if item is None or item.quantity <= 1:
            return
        item.quantity -= 1
        self._commit(items)

    def clear(self) -> None:
        self._commit([])
