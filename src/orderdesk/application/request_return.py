"""Application service: Request Return use case.

A customer asks to send back items of a delivered order within the
return window.  Every item problem is reported at once.  When the new
request leaves every line item of the order under an active return, the
order moves on to ``refunded``.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import ReturnRequestDTO, return_to_dto
from orderdesk.application.transition_order import apply_transition
from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.order import RETURN_WINDOW_DAYS, ReturnLine
from orderdesk.domain.model.requester import Requester
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now
from orderdesk.domain.service.identifiers import IdGenerator
from orderdesk.domain.service.status_machine import is_valid_transition

logger = logging.getLogger(__name__)


class RequestReturnHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        ids: IdGenerator,
        clock: Clock = utc_now,
        return_window_days: int = RETURN_WINDOW_DAYS,
    ) -> None:
        self._uow = uow
        self._ids = ids
        self._clock = clock
        self._return_window_days = return_window_days

    def handle(
        self,
        order_id: str,
        requester: Requester,
        reason: str,
        lines: list[ReturnLine],
    ) -> ReturnRequestDTO:
        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._uow.orders.get_by_id(order_id)
                if order is None:
                    raise EntityNotFoundError(f"Order {order_id} not found")

                now = self._clock()
                request = order.request_return(
                    return_id=self._ids.return_id(),
                    requester=requester,
                    reason=reason,
                    lines=lines,
                    at=now,
                    window_days=self._return_window_days,
                )

                if order.all_items_under_return and is_valid_transition(
                    order.status, OrderStatus.REFUNDED
                ):
                    apply_transition(
                        self._uow,
                        order,
                        OrderStatus.REFUNDED,
                        changed_by=requester.user_id or requester.email,
                        at=now,
                        note=f"All items covered by return {request.return_id}",
                    )

                self._uow.orders.save(order)
                self._uow.commit()

        logger.info(
            "Return %s requested on order %s for %d item(s)",
            request.return_id,
            order.order_number,
            len(request.items),
        )
        return return_to_dto(order, request)
