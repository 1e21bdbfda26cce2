"""Application service: Transition Order Status use case.

Validates the requested status against the state machine, appends the
history entry and reconciles inventory, all inside one unit of work
while holding the order's lock.
"""

from __future__ import annotations

import logging
from datetime import datetime

from orderdesk.application.dto import OrderDTO, order_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.order import Order
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now
from orderdesk.domain.service.identifiers import IdGenerator
from orderdesk.domain.service.inventory_reconciliation_service import (
    InventoryReconciliationService,
    StockAction,
)

logger = logging.getLogger(__name__)


def apply_transition(
    uow: UnitOfWork,
    order: Order,
    new_status: OrderStatus,
    changed_by: str | None,
    at: datetime,
    note: str = "",
) -> StockAction:
    """Transition *order* and reconcile stock inside the caller's unit of work.

    The previous status is taken from the order as loaded in this unit of
    work, so a repeated call for an order that already moved on fails the
    state machine check instead of touching stock twice.
    """
    previous = order.transition_to(new_status, changed_by=changed_by, at=at, note=note)
    action = InventoryReconciliationService(uow.inventory).reconcile(order, previous, new_status)
    logger.info(
        "Order %s: %s -> %s by %s (stock: %s)",
        order.order_number,
        previous.value,
        new_status.value,
        changed_by,
        action.value,
    )
    return action


class TransitionOrderHandler:

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
        new_status: str | OrderStatus,
        actor: str | None,
        note: str = "",
        tracking_number: str | None = None,
    ) -> OrderDTO:
        requested = OrderStatus.parse(new_status)
        if tracking_number is not None and not tracking_number.strip():
            raise ValidationError("Tracking number cannot be empty")

        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._uow.orders.get_by_id(order_id)
                if order is None:
                    raise EntityNotFoundError(f"Order {order_id} not found")

                apply_transition(self._uow, order, requested, actor, self._clock(), note)
                if requested == OrderStatus.SHIPPED:
                    if tracking_number:
                        order.assign_tracking_number(tracking_number)
                    elif order.tracking_number is None:
                        order.assign_tracking_number(self._ids.tracking_number())

                self._uow.orders.save(order)
                self._uow.commit()

        return order_to_dto(order)
