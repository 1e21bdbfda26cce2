"""Application service: Process Refund use case.

Records the outcome of a refund the payment collaborator has already
executed.  No money moves here.  Once the refunded total reaches the
order total, the order moves to ``refunded`` when the state machine
allows it; otherwise only the payment status reflects the full refund.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from orderdesk.application.dto import RefundDTO, refund_to_dto
from orderdesk.application.transition_order import apply_transition
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now
from orderdesk.domain.service.identifiers import IdGenerator
from orderdesk.domain.service.status_machine import is_valid_transition

logger = logging.getLogger(__name__)

DEFAULT_REFUND_METHOD = "original_payment"


class ProcessRefundHandler:

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
        amount: str | Decimal,
        reason: str,
        actor: str | None,
        method: str = DEFAULT_REFUND_METHOD,
    ) -> RefundDTO:
        refund_amount = Money.of(amount)
        if refund_amount.is_zero:
            raise ValidationError("Refund amount must be positive")

        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._uow.orders.get_by_id(order_id)
                if order is None:
                    raise EntityNotFoundError(f"Order {order_id} not found")

                now = self._clock()
                refund = order.record_refund(
                    refund_id=self._ids.refund_id(),
                    amount=refund_amount,
                    reason=reason,
                    method=(method or DEFAULT_REFUND_METHOD).strip(),
                    processed_by=actor,
                    at=now,
                )

                if order.is_fully_refunded and order.status != OrderStatus.REFUNDED:
                    if is_valid_transition(order.status, OrderStatus.REFUNDED):
                        apply_transition(
                            self._uow,
                            order,
                            OrderStatus.REFUNDED,
                            changed_by=actor,
                            at=now,
                            note=f"Fully refunded ({refund.refund_id})",
                        )
                    else:
                        logger.warning(
                            "Order %s fully refunded but cannot move from %s to refunded",
                            order.order_number,
                            order.status.value,
                        )

                self._uow.orders.save(order)
                self._uow.commit()

        logger.info(
            "Refund %s of %s recorded on order %s (refunded %s of %s)",
            refund.refund_id,
            refund.amount,
            order.order_number,
            order.refunded_amount,
            order.total_amount,
        )
        return refund_to_dto(order, refund)
