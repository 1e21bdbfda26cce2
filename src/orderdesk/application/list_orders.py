"""Application service: List Orders use case (query)."""

from __future__ import annotations

from orderdesk.application.dto import OrderPageDTO, order_to_summary
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork

MAX_PAGE_SIZE = 100


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        status: str | None = None,
        user_id: str | None = None,
        guest_email: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPageDTO:
        """Newest orders first, filtered and paginated."""
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
        status_filter = OrderStatus.parse(status) if status else None

        with self._uow:
            orders = self._uow.orders.list(
                status=status_filter,
                user_id=user_id,
                guest_email=guest_email.strip().lower() if guest_email else None,
            )

        start = (page - 1) * limit
        return OrderPageDTO(
            orders=[order_to_summary(o) for o in orders[start:start + limit]],
            total=len(orders),
            page=page,
            limit=limit,
        )
