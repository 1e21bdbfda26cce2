"""Application service: Update Return Status use case (admin)."""

from __future__ import annotations

import logging

from orderdesk.application.dto import ReturnRequestDTO, return_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.returns import UPDATABLE_RETURN_STATUSES
from orderdesk.domain.model.status import ReturnStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class UpdateReturnStatusHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        return_id: str,
        new_status: str | ReturnStatus,
        actor: str | None,
        notes: str | None = None,
    ) -> ReturnRequestDTO:
        """Set a return request's status and mirror it on undecided items."""
        if not return_id or not return_id.strip():
            raise ValidationError("Return ID is required")
        status = ReturnStatus.parse(new_status)
        if status not in UPDATABLE_RETURN_STATUSES:
            allowed = ", ".join(sorted(s.value for s in UPDATABLE_RETURN_STATUSES))
            raise ValidationError(f"Invalid status. Must be one of: {allowed}")

        order_id = self._locate(return_id)
        with self._uow.lock_order(order_id):
            with self._uow:
                order = self._uow.orders.get_by_id(order_id)
                request = order.find_return(return_id) if order else None
                if order is None or request is None:
                    raise EntityNotFoundError(f"Return request {return_id} not found")

                previous = request.apply_status(status, actor, self._clock(), notes)
                self._uow.orders.save(order)
                self._uow.commit()

        logger.info(
            "Return %s on order %s: %s -> %s",
            return_id,
            order.order_number,
            previous.value,
            status.value,
        )
        return return_to_dto(order, request)

    def _locate(self, return_id: str) -> str:
        with self._uow:
            order = self._uow.orders.get_by_return_id(return_id)
        if order is None:
            raise EntityNotFoundError(f"Return request {return_id} not found")
        return order.id
