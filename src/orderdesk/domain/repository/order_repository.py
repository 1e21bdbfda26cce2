"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.order import Order
from orderdesk.domain.model.status import OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return the order carrying *order_number*, or None."""

    @abstractmethod
    def get_by_return_id(self, return_id: str) -> Order | None:
        """Return the order that owns the return request *return_id*."""

    @abstractmethod
    def get_by_tracking_number(self, tracking_number: str) -> Order | None:
        """Return the order shipped under *tracking_number*, or None."""

    @abstractmethod
    def list(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
        guest_email: str | None = None,
    ) -> list[Order]:
        """Return matching orders, newest first."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""

    @abstractmethod
    def delete(self, order_id: str) -> None:
        """Remove an order; only used to compensate a failed split."""
