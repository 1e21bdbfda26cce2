"""Application service: payment outcome events.

The payment collaborator reports outcomes after the fact.  Both events
are idempotent: replaying one for an order already in that payment
state changes nothing.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import OrderDTO, order_to_dto
from orderdesk.application.transition_order import apply_transition
from orderdesk.domain.exceptions import ConflictError, EntityNotFoundError
from orderdesk.domain.model.status import OrderStatus, PaymentStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now

logger = logging.getLogger(__name__)

PAYMENT_ACTOR = "payment"

_SETTLED = frozenset({PaymentStatus.REFUNDED, PaymentStatus.PARTIALLY_REFUNDED})


class PaymentEventHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle_succeeded(self, order_id: str) -> OrderDTO:
        """Mark the order paid and release a pending order for processing."""
        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._load(order_id)
                if order.payment_status == PaymentStatus.PAID:
                    logger.debug("Payment for order %s already recorded", order.order_number)
                    return order_to_dto(order)
                if order.payment_status in _SETTLED:
                    raise ConflictError(
                        f"Order {order.order_number} payment is already "
                        f"{order.payment_status.value}"
                    )

                now = self._clock()
                order.mark_paid(now)
                if order.status == OrderStatus.PENDING:
                    apply_transition(
                        self._uow,
                        order,
                        OrderStatus.PROCESSING,
                        changed_by=PAYMENT_ACTOR,
                        at=now,
                        note="Payment received",
                    )
                self._uow.orders.save(order)
                self._uow.commit()

        logger.info("Payment succeeded for order %s", order.order_number)
        return order_to_dto(order)

    def handle_failed(self, order_id: str) -> OrderDTO:
        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._load(order_id)
                if order.payment_status == PaymentStatus.FAILED:
                    return order_to_dto(order)
                if order.payment_status != PaymentStatus.PENDING:
                    raise ConflictError(
                        f"Order {order.order_number} payment is already "
                        f"{order.payment_status.value}"
                    )
                order.mark_payment_failed(self._clock())
                self._uow.orders.save(order)
                self._uow.commit()

        logger.warning("Payment failed for order %s", order.order_number)
        return order_to_dto(order)

    def _load(self, order_id: str):
        order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        return order
