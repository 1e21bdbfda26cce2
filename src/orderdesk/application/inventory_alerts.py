"""Application services: low-stock alerts and backordered items (queries)."""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.application.show_inventory import InventoryLineDTO
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.order import RELEASED_STATUSES
from orderdesk.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class BackorderedItemDTO:
    order_id: str
    order_number: str
    product_id: str
    product_name: str
    quantity: int
    ordered_at: str


class LowStockAlertsHandler:

    def __init__(self, uow: UnitOfWork, default_threshold: int = 10) -> None:
        self._uow = uow
        self._default_threshold = default_threshold

    def handle(self, threshold: int | None = None) -> list[InventoryLineDTO]:
        """Tracked products with some, but not more than *threshold*, units left."""
        limit = self._default_threshold if threshold is None else threshold
        if limit < 0:
            raise ValidationError("Threshold cannot be negative")
        with self._uow:
            items = self._uow.inventory.list_all()
        low = [i for i in items if i.tracked and 0 < i.available_quantity <= limit]
        low.sort(key=lambda i: i.available_quantity)
        return [
            InventoryLineDTO(
                product_id=i.product_id,
                product_name=i.product_name,
                available=i.available_quantity,
                sold=i.sold_quantity,
                tracked=i.tracked,
            )
            for i in low
        ]


class BackorderedItemsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[BackorderedItemDTO]:
        with self._uow:
            orders = self._uow.orders.list()
        return [
            BackorderedItemDTO(
                order_id=order.id,
                order_number=order.order_number,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                ordered_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            )
            for order in orders
            if order.status not in RELEASED_STATUSES
            for item in order.items
            if item.backordered
        ]
