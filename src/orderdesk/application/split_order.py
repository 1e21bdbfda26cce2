"""Application service: Split Order use case.

Moves whole line items out of an order into a new child order.  The two
writes are separate units of work run as a saga:

  1. insert the child order        (compensation: delete it again)
  2. remove the items from parent  (no compensation; last step)

If step 2 fails the child is deleted.  If that delete fails as well the
saga raises ``CompensationFailedError`` for manual reconciliation.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import SplitResultDTO
from orderdesk.application.saga import Saga
from orderdesk.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from orderdesk.domain.model.order import Order, SplitSelector
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now
from orderdesk.domain.service.identifiers import IdGenerator

logger = logging.getLogger(__name__)


class SplitOrderHandler:

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
        order_id: str,
        selectors: list[SplitSelector],
        actor: str | None = None,
    ) -> SplitResultDTO:
        for selector in selectors:
            if not (selector.order_item_id or selector.product_id):
                raise ValidationError("Each split item needs an order item id or a product id")
            if selector.quantity is not None and selector.quantity <= 0:
                raise ValidationError(f"Split quantity for '{selector.label}' must be positive")

        with self._uow.lock_order(order_id):
            parent, child = self._prepare(order_id, selectors, actor)
            moved_products = {item.product_id for item in child.items}

            saga = Saga(f"split {parent.order_number}")
            saga.step("create child order", lambda: self._insert(child), self._delete)
            saga.step("update original order", lambda: self._detach(parent.id, moved_products))
            _, updated_parent = saga.run()

        logger.info(
            "Order %s split: %d item(s) moved to %s",
            parent.order_number,
            len(child.items),
            child.order_number,
        )
        return SplitResultDTO(
            original_order_id=updated_parent.id,
            original_order_number=updated_parent.order_number,
            new_order_id=child.id,
            new_order_number=child.order_number,
            moved_items=[item.id for item in child.items],
            original_total=str(updated_parent.total_amount),
            new_total=str(child.total_amount),
        )

    # --- Saga steps -----------------------------------------------------------

    def _prepare(
        self, order_id: str, selectors: list[SplitSelector], actor: str | None
    ) -> tuple[Order, Order]:
        with self._uow:
            parent = self._uow.orders.get_by_id(order_id)
            if parent is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            items = parent.select_items_for_split(selectors)
            number = self._ids.order_number(self._clock())
            if self._uow.orders.get_by_order_number(number) is not None:
                number = self._ids.order_number(self._clock())
            if self._uow.orders.get_by_order_number(number) is not None:
                raise ConflictError("Could not allocate a unique order number")

        for selector in selectors:
            for item in items:
                matched = item.id == selector.order_item_id or item.product_id == selector.product_id
                if matched and selector.quantity is not None and selector.quantity < item.quantity.value:
                    logger.info(
                        "Split of %s moves the whole line (%d units, %d requested)",
                        item.product_name,
                        item.quantity.value,
                        selector.quantity,
                    )

        child = Order.create_split(
            parent,
            items,
            order_id=self._ids.order_id(),
            order_number=number,
            created_at=self._clock(),
            changed_by=actor,
        )
        return parent, child

    def _insert(self, child: Order) -> Order:
        with self._uow:
            self._uow.orders.save(child)
            self._uow.commit()
        return child

    def _delete(self, child: Order) -> None:
        with self._uow:
            self._uow.orders.delete(child.id)
            self._uow.commit()

    def _detach(self, parent_id: str, product_ids: set[str]) -> Order:
        with self._uow:
            parent = self._uow.orders.get_by_id(parent_id)
            if parent is None:
                raise EntityNotFoundError(f"Order {parent_id} not found")
            parent.remove_products(product_ids, at=self._clock())
            self._uow.orders.save(parent)
            self._uow.commit()
        return parent
