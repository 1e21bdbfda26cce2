"""Unit of work over a ``JsonStore``.

Each ``with uow`` block works on its own snapshot of the document.
``commit()`` takes the store's write lock, which is a lock file shared
with other processes.  It re-reads the latest document, merges in the
orders and products this unit touched, replays its inventory deltas and
replaces the file in one step.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager

from orderdesk.domain.exceptions import (
    DependencyFailure,
    EntityNotFoundError,
    InsufficientStockError,
)
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from orderdesk.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from orderdesk.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from orderdesk.infrastructure.persistence.json_store import JsonStore

logger = logging.getLogger(__name__)


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, store: JsonStore) -> None:
        self._store = store
        self._active = False

    def begin(self) -> None:
        try:
            doc = self._store.read()
        except (OSError, ValueError) as exc:
            raise DependencyFailure(f"Could not read {self._store.file_path}: {exc}") from exc
        self.orders = JsonOrderRepository(doc["orders"])
        self.inventory = JsonInventoryRepository(doc["inventory"])
        self.products = JsonProductRepository(doc["products"])
        self._active = True

    def commit(self) -> None:
        if not self._active:
            raise DependencyFailure("No active unit of work to commit")
        try:
            with self._store.write_lock():
                latest = self._store.read()
                self.orders.merge_into(latest["orders"])
                self.products.merge_into(latest["products"])
                self.inventory.merge_into(latest["inventory"])
                self._store.write(latest)
        except (InsufficientStockError, EntityNotFoundError) as exc:
            raise DependencyFailure(f"Inventory changed concurrently: {exc}") from exc
        except (OSError, ValueError) as exc:
            logger.error("Commit to %s failed: %s", self._store.file_path, exc)
            raise DependencyFailure(f"Could not write {self._store.file_path}: {exc}") from exc
        self._active = False

    def rollback(self) -> None:
        if self._active:
            logger.debug("Discarding uncommitted changes")
        self._active = False

    def lock_order(self, order_id: str) -> AbstractContextManager:
        return self._store.order_locks.hold(order_id)
