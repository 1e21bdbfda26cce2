"""Application service: Create Order use case.

Resolves products, snapshots their price and details onto line items,
takes stock for every tracked product and persists the pending order.
Stock checks, stock decrements and the order insert commit together or
not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime

from orderdesk.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from orderdesk.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from orderdesk.domain.model.order import Order, OrderLineItem
from orderdesk.domain.model.value_objects import Money, Quantity, ShippingAddress
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now
from orderdesk.domain.service.identifiers import IdGenerator
from orderdesk.domain.service.inventory_reconciliation_service import (
    InventoryReconciliationService,
)

logger = logging.getLogger(__name__)

_ORDER_NUMBER_ATTEMPTS = 5


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        ids: IdGenerator,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._ids = ids
        self._clock = clock

    def handle(
        self,
        item_specs: list[OrderItemSpec],
        shipping_address: ShippingAddress,
        user_id: str | None = None,
        guest_email: str | None = None,
        notes: str | None = None,
        shipping_fee: str = "0",
        discount: str = "0",
    ) -> OrderDTO:
        """Create a new order.

        Steps:
        1. Validate the request shape (items, quantities, amounts).
        2. Resolve each product id to a Product (fail if not found).
        3. Build OrderLineItems with *current* prices (snapshot).
        4. Take stock for tracked products, persist, commit.
        """
        if not item_specs:
            raise ValidationError("Order must contain at least one item")
        quantities = [Quantity(spec.quantity) for spec in item_specs]
        fee = Money.of(shipping_fee)
        order_discount = Money.of(discount)

        now = self._clock()
        with self._uow:
            line_items: list[OrderLineItem] = []
            for spec, quantity in zip(item_specs, quantities):
                product = self._uow.products.get_by_id(spec.product_id)
                if product is None:
                    raise EntityNotFoundError(f"Product not found: '{spec.product_id}'")

                line_items.append(
                    OrderLineItem(
                        id=self._ids.line_item_id(),
                        product_id=product.id,
                        product_name=product.name,
                        quantity=quantity,
                        unit_price=product.price,  # <-- price snapshot
                        sku=product.sku,
                        variant=spec.variant,
                        image=product.image,
                        tax=Money.of(spec.tax),
                        discount=Money.of(spec.discount),
                    )
                )

            order = Order.create(
                order_id=self._ids.order_id(),
                order_number=self._unique_order_number(now),
                items=line_items,
                shipping_address=shipping_address,
                user_id=user_id,
                guest_email=guest_email,
                shipping_fee=fee,
                discount=order_discount,
                notes=notes,
                created_at=now,
            )

            InventoryReconciliationService(self._uow.inventory).commit_for_order(order)
            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "Order %s created with %d item(s), total %s",
            order.order_number,
            len(order.items),
            order.total_amount,
        )
        return order_to_dto(order)

    def _unique_order_number(self, now: datetime) -> str:
        for _ in range(_ORDER_NUMBER_ATTEMPTS):
            number = self._ids.order_number(now)
            if self._uow.orders.get_by_order_number(number) is None:
                return number
        raise ConflictError("Could not allocate a unique order number")
