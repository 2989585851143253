import json
import logging
import shutil
import time
import uuid
from collections.abc import Callable, Iterable
from datetime import timedelta
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from cafe.core.storage import FileStorage, KeyValueStorage
from cafe.schemas.cart import (
    CartLineItem,
    CartLineItemCreate,
    CartLineItemRead,
    CartSummary,
)

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "klaseco-cart"

_snapshot_adapter = TypeAdapter(list[CartLineItem])


# ---- Snapshot (de)serialization ----


def dump_snapshot(items: Iterable[CartLineItem]) -> str:
    """Serialize line items to the JSON snapshot format."""
    return json.dumps([item.model_dump(mode="json") for item in items])


def load_snapshot(raw: str | None) -> list[CartLineItem]:
    """
    Parse a stored snapshot.

    Absent, empty, or malformed data (bad JSON, wrong shape, invalid
    fields) is treated as an empty cart.
    """
    if not raw:
        return []
    try:
        return _snapshot_adapter.validate_json(raw)
    except (ValidationError, ValueError):
        logger.warning("Discarding malformed cart snapshot")
        return []


def line_total(item: CartLineItem) -> float:
    addons_total = sum(addon.price * addon.quantity for addon in item.addons)
    return (item.base_price + addons_total) * item.quantity


def new_line_id(menu_item_id: uuid.UUID) -> str:
    # Random suffix keeps ids distinct for identical, back-to-back adds.
    return f"{menu_item_id}-{uuid.uuid4().hex}"


class CartStore:
    """
    The customer's in-progress order.

    Responsibilities:
      - keep line items in insertion (display) order
      - restore from / write back to a key-value storage snapshot
      - derive totals from the current items on every read

    Every mutation re-persists the full snapshot. Persistence is
    best-effort: a failing write is logged and the in-memory cart stays
    authoritative.

    Single writer: two stores opened on the same storage slot are not
    reconciled, the last write wins.
    """

    def __init__(self, storage: KeyValueStorage, key: str = CART_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._items: list[CartLineItem] = load_snapshot(self._read())

    # ---- internal helpers ----

    def _read(self) -> str | None:
        try:
            return self.storage.get_item(self.key)
        except Exception as e:
            logger.warning("Could not read cart snapshot %r: %s", self.key, e)
            return None

    def _persist(self) -> None:
        try:
            self.storage.set_item(self.key, dump_snapshot(self._items))
        except Exception as e:
            logger.warning("Could not persist cart snapshot %r: %s", self.key, e)

    # ---- derived state ----

    @property
    def items(self) -> list[CartLineItem]:
        return list(self._items)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def total_amount(self) -> float:
        return sum((line_total(item) for item in self._items), 0.0)

    def get_item(self, line_id: str) -> CartLineItem | None:
        return next((item for item in self._items if item.id == line_id), None)

    def summary(self) -> CartSummary:
        return CartSummary(
            items=[
                CartLineItemRead(**item.model_dump(), line_total=line_total(item))
                for item in self._items
            ],
            total_items=self.total_items,
            total_amount=self.total_amount,
        )

    # ---- mutations ----

    def add_item(self, item: CartLineItemCreate) -> CartLineItem:
        """
        Append a customized product as a new line item.

        Identical payloads always produce separate line items.
        """
        line_id = new_line_id(item.menu_item_id)
        while self.get_item(line_id) is not None:
            line_id = new_line_id(item.menu_item_id)

        line = CartLineItem(**item.model_dump(), id=line_id)
        self._items.append(line)
        self._persist()
        return line

    def update_quantity(self, line_id: str, quantity: int) -> None:
        """
        Set a line item's quantity.

        quantity <= 0 removes the line item. Unknown ids are ignored.
        """
        if quantity <= 0:
            self.remove_item(line_id)
            return

        self._items = [
            item.model_copy(update={"quantity": quantity}) if item.id == line_id else item
            for item in self._items
        ]
        self._persist()

    def remove_item(self, line_id: str) -> None:
        self._items = [item for item in self._items if item.id != line_id]
        self._persist()

    def clear_cart(self) -> None:
        self._items = []
        self._persist()


class CartRegistry:
    """
    Opens the cart belonging to a client session.

    Built once at startup and injected into the cart and checkout
    routes. Each session gets its own storage namespace; the snapshot key
    inside it is always the same.

    Registries created with `on_disk` remember their base directory so
    abandoned sessions can be pruned.
    """

    def __init__(
        self,
        storage_factory: Callable[[str], KeyValueStorage],
        key: str = CART_STORAGE_KEY,
        base_dir: Path | None = None,
    ):
        self.storage_factory = storage_factory
        self.key = key
        self.base_dir = base_dir

    @classmethod
    def on_disk(cls, base_dir: Path, key: str = CART_STORAGE_KEY) -> "CartRegistry":
        return cls(lambda session_id: FileStorage(base_dir / session_id), key, base_dir)

    def open(self, session_id: str) -> CartStore:
        return CartStore(self.storage_factory(session_id), self.key)

    def prune(self, max_age: timedelta, now: float | None = None) -> int:
        """
        Delete on-disk cart sessions not written to within `max_age`.

        A session directory's mtime moves on every snapshot write.
        Returns the number of sessions removed.
        """
        if self.base_dir is None or not self.base_dir.is_dir():
            return 0

        cutoff = (now if now is not None else time.time()) - max_age.total_seconds()
        removed = 0
        for path in self.base_dir.iterdir():
            if not path.is_dir():
                continue
            try:
                if path.stat().st_mtime >= cutoff:
                    continue
                shutil.rmtree(path)
            except OSError as e:
                logger.warning("Could not prune cart session %s: %s", path.name, e)
                continue
            removed += 1

        if removed:
            logger.info("Pruned %d stale cart sessions", removed)
        return removed
