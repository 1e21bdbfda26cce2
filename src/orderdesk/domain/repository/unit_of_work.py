"""Abstract unit of work spanning orders, inventory and the catalog.

Usage::

    with uow.lock_order(order_id):
        with uow:
            order = uow.orders.get_by_id(order_id)
            ...
            uow.commit()

Leaving the ``with uow`` block without ``commit()`` discards every staged
write.  ``commit()`` either persists all of them or raises
``DependencyFailure`` and persists none.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from orderdesk.domain.repository.inventory_repository import InventoryRepository
from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    orders: OrderRepository
    inventory: InventoryRepository
    products: ProductRepository

    def __enter__(self) -> UnitOfWork:
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def begin(self) -> None:
        """Start a fresh transaction."""

    @abstractmethod
    def commit(self) -> None:
        """Persist all staged writes atomically."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged writes.  A no-op after a successful commit."""

    @abstractmethod
    def lock_order(self, order_id: str) -> AbstractContextManager:
        """Serialize mutations of one order across concurrent callers."""
