"""Application service: List Return Requests use case (admin query)."""

from __future__ import annotations

from orderdesk.application.dto import ReturnRequestDTO, return_to_dto
from orderdesk.domain.model.status import ReturnStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork


class ListReturnRequestsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, status: str | None = None) -> list[ReturnRequestDTO]:
        """Every return request across orders, newest first."""
        status_filter = ReturnStatus.parse(status) if status else None
        with self._uow:
            orders = self._uow.orders.list()

        pairs = [
            (order, request)
            for order in orders
            for request in order.returns
            if status_filter is None or request.status == status_filter
        ]
        pairs.sort(key=lambda pair: pair[1].requested_at, reverse=True)
        return [return_to_dto(order, request) for order, request in pairs]
