"""Status enumerations for orders, payments, returns and return items."""

from __future__ import annotations

from enum import Enum

from orderdesk.domain.exceptions import ValidationError


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    RETURNED = "returned"
    ON_HOLD = "on-hold"
    BACKORDERED = "backordered"

    @staticmethod
    def parse(raw: str | OrderStatus) -> OrderStatus:
        if isinstance(raw, OrderStatus):
            return raw
        try:
            return OrderStatus(str(raw).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError(
                f"Unknown order status '{raw}'. Must be one of: {allowed}"
            ) from exc


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class ReturnStatus(Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSING = "processing"
    COMPLETED = "completed"

    @staticmethod
    def parse(raw: str | ReturnStatus) -> ReturnStatus:
        if isinstance(raw, ReturnStatus):
            return raw
        try:
            return ReturnStatus(str(raw).strip().lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown return status '{raw}'") from exc


class ReturnItemStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RECEIVED = "received"
    REFUNDED = "refunded"
