"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone

from orderdesk.domain.exceptions import DependencyFailure, EntityNotFoundError
from orderdesk.domain.model.inventory import InventoryItem
from orderdesk.domain.model.order import Order
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.model.value_objects import Money, ShippingAddress
from orderdesk.domain.repository.inventory_repository import InventoryRepository
from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.domain.repository.product_repository import ProductRepository
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.identifiers import IdGenerator
from orderdesk.infrastructure.locking import KeyedLock

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

ADDRESS = ShippingAddress("1 Main St", "Springfield", "IL", "62701", "US")


class FakeOrderRepository(OrderRepository):

    def __init__(self, orders: list[Order] | None = None) -> None:
        self._store: dict[str, Order] = {}
        for o in orders or []:
            self._store[o.id] = o

    def get_by_id(self, order_id: str) -> Order | None:
        return self._store.get(order_id)

    def get_by_order_number(self, order_number: str) -> Order | None:
        for o in self._store.values():
            if o.order_number == order_number:
                return o
        return None

    def get_by_return_id(self, return_id: str) -> Order | None:
        for o in self._store.values():
            if o.find_return(return_id) is not None:
                return o
        return None

    def get_by_tracking_number(self, tracking_number: str) -> Order | None:
        for o in self._store.values():
            if o.tracking_number == tracking_number:
                return o
        return None

    def list(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
        guest_email: str | None = None,
    ) -> list[Order]:
        orders = [
            o
            for o in self._store.values()
            if (status is None or o.status == status)
            and (user_id is None or o.user_id == user_id)
            and (guest_email is None or o.guest_email == guest_email)
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def save(self, order: Order) -> None:
        self._store[order.id] = order

    def delete(self, order_id: str) -> None:
        self._store.pop(order_id, None)


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for p in self._store.values():
            if p.name == name:
                return p
        return None

    def list_all(self) -> list[Product]:
        return list(self._store.values())

    def save(self, product: Product) -> None:
        self._store[product.id] = product


class FakeInventoryRepository(InventoryRepository):

    def __init__(self, items: list[InventoryItem] | None = None) -> None:
        self._store: dict[str, InventoryItem] = {}
        for item in items or []:
            self._store[item.product_id] = item

    def get_by_product_id(self, product_id: str) -> InventoryItem | None:
        return self._store.get(product_id)

    def list_all(self) -> list[InventoryItem]:
        return list(self._store.values())

    def add(self, item: InventoryItem) -> None:
        self._store[item.product_id] = item

    def adjust(self, product_id: str, available_delta: int, sold_delta: int = 0) -> InventoryItem:
        item = self._store.get(product_id)
        if item is None:
            raise EntityNotFoundError(f"No inventory record for product '{product_id}'")
        item.adjust(available_delta, sold_delta)
        return item


class FakeUnitOfWork(UnitOfWork):
    """Snapshot-and-restore unit of work over the fake repositories.

    ``fail_on_commits`` holds 1-based commit attempt numbers that raise
    ``DependencyFailure`` instead of committing.
    """

    def __init__(
        self,
        products: list[Product] | None = None,
        inventory: list[InventoryItem] | None = None,
        orders: list[Order] | None = None,
    ) -> None:
        self.orders = FakeOrderRepository(orders)
        self.inventory = FakeInventoryRepository(inventory)
        self.products = FakeProductRepository(products)
        self.fail_on_commits: set[int] = set()
        self.commit_attempts = 0
        self.commits = 0
        self.order_locks = KeyedLock()
        self._snapshot: tuple | None = None

    def begin(self) -> None:
        self._snapshot = copy.deepcopy(
            (self.orders._store, self.inventory._store, self.products._store)
        )

    def commit(self) -> None:
        self.commit_attempts += 1
        if self.commit_attempts in self.fail_on_commits:
            raise DependencyFailure(f"Simulated storage failure on commit {self.commit_attempts}")
        self._snapshot = None
        self.commits += 1

    def rollback(self) -> None:
        if self._snapshot is not None:
            self.orders._store, self.inventory._store, self.products._store = self._snapshot
            self._snapshot = None

    def lock_order(self, order_id: str):
        return self.order_locks.hold(order_id)


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids: order-1, item-1, RTN-00000001, ..."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def _next(self, kind: str) -> int:
        self._counters[kind] = self._counters.get(kind, 0) + 1
        return self._counters[kind]

    def order_id(self) -> str:
        return f"order-{self._next('order')}"

    def order_number(self, at: datetime) -> str:
        return f"ORD-{at:%y%m}-{self._next('number'):06d}"

    def line_item_id(self) -> str:
        return f"item-{self._next('item')}"

    def return_id(self) -> str:
        return f"RTN-{self._next('return'):08d}"

    def refund_id(self) -> str:
        return f"REF-{self._next('refund'):08d}"

    def tracking_number(self) -> str:
        return f"TRK-{self._next('tracking'):010d}"


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


def seeded_uow() -> FakeUnitOfWork:
    """A unit of work with a small tracked catalog.

    p1 Widget $10 (10 in stock), p2 Gadget $5 (20), p3 Gizmo $25 (5).
    """
    products = [
        Product(id="p1", name="Widget", price=Money.of("10.00"), sku="WID-1"),
        Product(id="p2", name="Gadget", price=Money.of("5.00"), sku="GAD-1"),
        Product(id="p3", name="Gizmo", price=Money.of("25.00")),
    ]
    inventory = [
        InventoryItem("p1", "Widget", available_quantity=10),
        InventoryItem("p2", "Gadget", available_quantity=20),
        InventoryItem("p3", "Gizmo", available_quantity=5),
    ]
    return FakeUnitOfWork(products=products, inventory=inventory)
