"""Application service: Cancel Order use case.

Customers may cancel their own orders while pending or processing.  The
cancellation restores the stock held for every line item; both writes
commit together.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import OrderDTO, order_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.requester import Requester
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now
from orderdesk.domain.service.inventory_reconciliation_service import (
    InventoryReconciliationService,
)

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: str, requester: Requester, note: str = "") -> OrderDTO:
        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._uow.orders.get_by_id(order_id)
                if order is None:
                    raise EntityNotFoundError(f"Order {order_id} not found")

                previous = order.cancel(requester, at=self._clock(), note=note)
                InventoryReconciliationService(self._uow.inventory).reconcile(
                    order, previous, order.status
                )
                self._uow.orders.save(order)
                self._uow.commit()

        logger.info("Order %s cancelled (was %s)", order.order_number, previous.value)
        return order_to_dto(order)
