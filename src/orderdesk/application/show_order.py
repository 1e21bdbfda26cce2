"""Application service: Show Order use case (query)."""

from __future__ import annotations

from orderdesk.application.dto import OrderDTO, order_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.requester import Requester
from orderdesk.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: str, requester: Requester) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        order.ensure_accessible_by(requester)
        return order_to_dto(order)
