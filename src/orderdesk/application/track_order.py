"""Application service: Track Order use case (public query by tracking number)."""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.application.dto import StatusChangeDTO, status_change_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class TrackingDTO:
    order_number: str
    tracking_number: str
    status: str
    history: list[StatusChangeDTO]


class TrackOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, tracking_number: str) -> TrackingDTO:
        if not tracking_number or not tracking_number.strip():
            raise ValidationError("Tracking number is required")
        with self._uow:
            order = self._uow.orders.get_by_tracking_number(tracking_number.strip())
        if order is None:
            raise EntityNotFoundError(f"No order found for tracking number {tracking_number}")
        return TrackingDTO(
            order_number=order.order_number,
            tracking_number=order.tracking_number,
            status=order.status.value,
            history=[status_change_to_dto(change) for change in order.status_history],
        )
