"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI (or any other caller) and the
application layer without exposing domain internals.  Money is formatted
as text (e.g. "$15.00") and timestamps as "YYYY-MM-DD HH:MM UTC".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from orderdesk.domain.model.order import Order, OrderLineItem, RefundRecord, StatusChange
from orderdesk.domain.model.returns import ReturnRequest


def _fmt(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    return moment.strftime("%Y-%m-%d %H:%M UTC")


# --- Inputs ---------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product id + quantity)."""

    product_id: str
    quantity: int
    variant: str | None = None
    tax: str = "0"
    discount: str = "0"


# --- Outputs --------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineItemDTO:
    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str
    sku: str | None = None
    variant: str | None = None
    tax: str = "$0.00"
    discount: str = "$0.00"
    backordered: bool = False


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    changed_by: str | None
    timestamp: str
    note: str
    previous_status: str | None


@dataclass(frozen=True)
class ReturnItemDTO:
    order_item_id: str
    product_name: str | None
    quantity: int
    price: str
    reason: str
    status: str
    processed_at: str | None


@dataclass(frozen=True)
class ReturnNoteDTO:
    text: str
    added_by: str | None
    added_at: str


@dataclass(frozen=True)
class ReturnRequestDTO:
    return_id: str
    order_id: str
    order_number: str
    order_status: str
    status: str
    reason: str
    requested_at: str
    return_deadline: str
    items: list[ReturnItemDTO]
    processed_by: str | None = None
    processed_at: str | None = None
    notes: list[ReturnNoteDTO] = field(default_factory=list)


@dataclass(frozen=True)
class RefundDTO:
    refund_id: str
    order_number: str
    amount: str
    reason: str
    method: str
    processed_by: str | None
    processed_at: str
    refunded_amount: str
    remaining_balance: str
    order_status: str
    payment_status: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    order_number: str
    status: str
    payment_status: str
    customer: str
    is_guest: bool
    shipping_address: str
    items: list[OrderLineItemDTO]
    subtotal: str
    tax: str
    shipping_fee: str
    discount: str
    total: str
    refunded_amount: str
    status_history: list[StatusChangeDTO]
    returns: list[ReturnRequestDTO]
    refunds: list[RefundDTO]
    created_at: str
    parent_order_id: str | None = None
    tracking_number: str | None = None
    notes: str | None = None
    delivered_at: str | None = None


@dataclass(frozen=True)
class OrderSummaryDTO:
    id: str
    order_number: str
    status: str
    payment_status: str
    customer: str
    total: str
    item_count: int
    created_at: str


@dataclass(frozen=True)
class OrderPageDTO:
    orders: list[OrderSummaryDTO]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0


@dataclass(frozen=True)
class SplitResultDTO:
    original_order_id: str
    original_order_number: str
    new_order_id: str
    new_order_number: str
    moved_items: list[str]
    original_total: str
    new_total: str


@dataclass(frozen=True)
class BulkItemResult:
    order_id: str
    success: bool
    error_kind: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class BulkTransitionReport:
    status: str
    results: list[BulkItemResult]

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded


# --- Mapping --------------------------------------------------------------


def line_item_to_dto(item: OrderLineItem) -> OrderLineItemDTO:
    return OrderLineItemDTO(
        id=item.id,
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity.value,
        unit_price=str(item.unit_price),
        line_total=str(item.line_total),
        sku=item.sku,
        variant=item.variant,
        tax=str(item.tax),
        discount=str(item.discount),
        backordered=item.backordered,
    )


def status_change_to_dto(change: StatusChange) -> StatusChangeDTO:
    return StatusChangeDTO(
        status=change.status.value,
        changed_by=change.changed_by,
        timestamp=_fmt(change.timestamp),  # type: ignore[arg-type]
        note=change.note,
        previous_status=change.previous_status.value if change.previous_status else None,
    )


def return_to_dto(order: Order, request: ReturnRequest) -> ReturnRequestDTO:
    index = order.item_index
    return ReturnRequestDTO(
        return_id=request.return_id,
        order_id=order.id,
        order_number=order.order_number,
        order_status=order.status.value,
        status=request.status.value,
        reason=request.reason,
        requested_at=_fmt(request.requested_at),  # type: ignore[arg-type]
        return_deadline=_fmt(request.return_deadline),  # type: ignore[arg-type]
        items=[
            ReturnItemDTO(
                order_item_id=item.order_item_id,
                product_name=(
                    index[item.order_item_id].product_name
                    if item.order_item_id in index
                    else None
                ),
                quantity=item.quantity,
                price=str(item.price),
                reason=item.reason,
                status=item.status.value,
                processed_at=_fmt(item.processed_at),
            )
            for item in request.items
        ],
        processed_by=request.processed_by,
        processed_at=_fmt(request.processed_at),
        notes=[
            ReturnNoteDTO(text=n.text, added_by=n.added_by, added_at=_fmt(n.added_at))  # type: ignore[arg-type]
            for n in request.notes
        ],
    )


def refund_to_dto(order: Order, refund: RefundRecord) -> RefundDTO:
    return RefundDTO(
        refund_id=refund.refund_id,
        order_number=order.order_number,
        amount=str(refund.amount),
        reason=refund.reason,
        method=refund.method,
        processed_by=refund.processed_by,
        processed_at=_fmt(refund.processed_at),  # type: ignore[arg-type]
        refunded_amount=str(order.refunded_amount),
        remaining_balance=str(order.refundable_balance),
        order_status=order.status.value,
        payment_status=order.payment_status.value,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        payment_status=order.payment_status.value,
        customer=order.user_id or order.guest_email or "",
        is_guest=order.is_guest,
        shipping_address=str(order.shipping_address),
        items=[line_item_to_dto(item) for item in order.items],
        subtotal=str(order.subtotal),
        tax=str(order.tax),
        shipping_fee=str(order.shipping_fee),
        discount=str(order.discount),
        total=str(order.total_amount),
        refunded_amount=str(order.refunded_amount),
        status_history=[status_change_to_dto(c) for c in order.status_history],
        returns=[return_to_dto(order, r) for r in order.returns],
        refunds=[refund_to_dto(order, r) for r in order.refunds],
        created_at=_fmt(order.created_at),  # type: ignore[arg-type]
        parent_order_id=order.parent_order_id,
        tracking_number=order.tracking_number,
        notes=order.notes,
        delivered_at=_fmt(order.delivered_at),
    )


def order_to_summary(order: Order) -> OrderSummaryDTO:
    return OrderSummaryDTO(
        id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        payment_status=order.payment_status.value,
        customer=order.user_id or order.guest_email or "",
        total=str(order.total_amount),
        item_count=len(order.items),
        created_at=_fmt(order.created_at),  # type: ignore[arg-type]
    )
