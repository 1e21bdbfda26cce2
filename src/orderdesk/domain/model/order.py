"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items, status history,
return requests and refund records.  Return items reference line items by
id, resolved through ``item_index`` rather than by holding the objects.
All business invariants are enforced here.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from orderdesk.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidReturnItemsError,
    InvalidTransitionError,
    RefundExceedsBalanceError,
    ReturnWindowExpiredError,
    ValidationError,
)
from orderdesk.domain.model.requester import Requester
from orderdesk.domain.model.returns import ReturnItem, ReturnRequest
from orderdesk.domain.model.status import OrderStatus, PaymentStatus
from orderdesk.domain.model.value_objects import (
    Money,
    Quantity,
    ShippingAddress,
    normalize_email,
)
from orderdesk.domain.service.clock import utc_now
from orderdesk.domain.service.status_machine import is_valid_transition


@dataclass
class OrderLineItem:
    """Captures the product snapshot at order-creation time.

    ``quantity`` and ``unit_price`` never change once the order exists
    (price lock preserved).
    """

    id: str
    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    sku: str | None = None
    variant: str | None = None
    image: str | None = None
    tax: Money = field(default_factory=Money.zero)
    discount: Money = field(default_factory=Money.zero)
    backordered: bool = False

    @property
    def gross_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def line_total(self) -> Money:
        if self.discount > self.gross_total:
            raise ValidationError(
                f"Discount {self.discount} exceeds line value {self.gross_total} "
                f"for {self.product_name}"
            )
        return self.gross_total - self.discount


@dataclass(frozen=True)
class StatusChange:
    """One entry of the append-only status history."""

    status: OrderStatus
    changed_by: str | None
    timestamp: datetime
    note: str = ""
    previous_status: OrderStatus | None = None


@dataclass(frozen=True)
class RefundRecord:
    refund_id: str
    amount: Money
    reason: str
    method: str
    processed_by: str | None
    processed_at: datetime


@dataclass(frozen=True)
class ReturnLine:
    """A customer's request to send back *quantity* units of one line item."""

    order_item_id: str
    quantity: int
    reason: str = ""


@dataclass(frozen=True)
class SplitSelector:
    """Picks a line item for splitting, by line item id or by product id."""

    order_item_id: str | None = None
    product_id: str | None = None
    quantity: int | None = None

    @property
    def label(self) -> str:
        return self.order_item_id or self.product_id or "<empty selector>"


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50
RETURN_WINDOW_DAYS = 30
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})
SPLITTABLE_STATUSES = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.PROCESSING,
        OrderStatus.ON_HOLD,
        OrderStatus.BACKORDERED,
    }
)
RELEASED_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})


def _compute_total(
    items: list[OrderLineItem], shipping_fee: Money, discount: Money
) -> Money:
    subtotal = Money.total([item.line_total for item in items])
    tax = Money.total([item.tax for item in items])
    gross = subtotal + tax + shipping_fee
    if discount > gross:
        raise ValidationError(
            f"Order discount {discount} exceeds order value {gross}"
        )
    return gross - discount


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str
    order_number: str
    items: list[OrderLineItem]
    shipping_address: ShippingAddress
    user_id: str | None = None
    guest_email: str | None = None
    shipping_fee: Money = field(default_factory=Money.zero)
    discount: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status_history: list[StatusChange] = field(default_factory=list)
    returns: list[ReturnRequest] = field(default_factory=list)
    refunds: list[RefundRecord] = field(default_factory=list)
    parent_order_id: str | None = None
    tracking_number: str | None = None
    notes: str | None = None
    stock_committed: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None
    delivered_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: str,
        order_number: str,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        user_id: str | None = None,
        guest_email: str | None = None,
        shipping_fee: Money | None = None,
        discount: Money | None = None,
        notes: str | None = None,
        created_at: datetime | None = None,
    ) -> Order:
        """Create a new pending order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        user_id = (user_id or "").strip() or None
        guest_email = (guest_email or "").strip() or None
        if (user_id is None) == (guest_email is None):
            raise ValidationError(
                "Exactly one of a user reference or a guest email must be set"
            )
        if guest_email is not None:
            guest_email = normalize_email(guest_email)

        ids = [item.id for item in items]
        if len(set(ids)) != len(ids):
            raise ValidationError("Line item ids must be unique within an order")

        created_at = created_at or utc_now()
        order = Order(
            id=order_id,
            order_number=order_number,
            items=list(items),
            shipping_address=shipping_address,
            user_id=user_id,
            guest_email=guest_email,
            shipping_fee=shipping_fee or Money.zero(),
            discount=discount or Money.zero(),
            notes=(notes or "").strip() or None,
            created_at=created_at,
            updated_at=created_at,
        )
        # Fails early if discounts push any total below zero.
        _compute_total(order.items, order.shipping_fee, order.discount)
        order.status_history.append(
            StatusChange(
                status=OrderStatus.PENDING,
                changed_by=user_id or guest_email,
                timestamp=created_at,
                note="Order placed",
            )
        )
        return order

    @staticmethod
    def create_split(
        parent: Order,
        items: list[OrderLineItem],
        order_id: str,
        order_number: str,
        created_at: datetime,
        changed_by: str | None = None,
    ) -> Order:
        """Build the child order holding *items* moved out of *parent*.

        Payment, shipping and refund state start fresh; the stock held for
        the moved items travels with them.
        """
        child = Order(
            id=order_id,
            order_number=order_number,
            items=[replace(item) for item in items],
            shipping_address=parent.shipping_address,
            user_id=parent.user_id,
            guest_email=parent.guest_email,
            status=OrderStatus.PROCESSING,
            payment_status=PaymentStatus.PENDING,
            parent_order_id=parent.id,
            notes=parent.notes,
            stock_committed=parent.stock_committed,
            created_at=created_at,
            updated_at=created_at,
        )
        child.status_history.append(
            StatusChange(
                status=OrderStatus.PROCESSING,
                changed_by=changed_by,
                timestamp=created_at,
                note=f"Split from order {parent.order_number}",
            )
        )
        return child

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return Money.total([item.line_total for item in self.items])

    @property
    def tax(self) -> Money:
        return Money.total([item.tax for item in self.items])

    @property
    def total_amount(self) -> Money:
        return _compute_total(self.items, self.shipping_fee, self.discount)

    @property
    def refunded_amount(self) -> Money:
        return Money.total([refund.amount for refund in self.refunds])

    @property
    def refundable_balance(self) -> Money:
        return self.total_amount - self.refunded_amount

    @property
    def is_guest(self) -> bool:
        return self.guest_email is not None

    @property
    def item_index(self) -> dict[str, OrderLineItem]:
        """Line items keyed by their id."""
        return {item.id: item for item in self.items}

    @property
    def return_deadline_base(self) -> datetime:
        return self.delivered_at or self.created_at

    def return_deadline(self, window_days: int = RETURN_WINDOW_DAYS) -> datetime:
        return self.return_deadline_base + timedelta(days=window_days)

    # --- Ownership ------------------------------------------------------------

    def is_owned_by(self, requester: Requester) -> bool:
        if self.user_id is not None:
            return requester.user_id is not None and requester.user_id == self.user_id
        if requester.email is None:
            return False
        return requester.email.strip().lower() == self.guest_email

    def ensure_accessible_by(self, requester: Requester) -> None:
        if requester.is_privileged or self.is_owned_by(requester):
            return
        raise ForbiddenError(f"Not authorized to access order {self.order_number}")

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        new_status: OrderStatus,
        changed_by: str | None,
        at: datetime | None = None,
        note: str = "",
    ) -> OrderStatus:
        """Move to *new_status* if the state machine allows it.

        Returns the status the order had before the change.  Inventory
        effects are the caller's business (see the reconciliation service).
        """
        if not is_valid_transition(self.status, new_status):
            raise InvalidTransitionError(
                f"Invalid status transition from {self.status.value} "
                f"to {new_status.value} for order {self.order_number}"
            )
        at = at or utc_now()
        previous = self.status
        self.status = new_status
        self.updated_at = at
        if new_status == OrderStatus.DELIVERED:
            self.delivered_at = at
        self.status_history.append(
            StatusChange(
                status=new_status,
                changed_by=changed_by,
                timestamp=at,
                note=note or "",
                previous_status=previous,
            )
        )
        return previous

    def cancel(
        self, requester: Requester, at: datetime | None = None, note: str = ""
    ) -> OrderStatus:
        """Customer cancellation, allowed while pending or processing."""
        if not (self.is_owned_by(requester) or requester.is_privileged):
            raise ForbiddenError(f"Not authorized to cancel order {self.order_number}")
        if self.status not in CANCELLABLE_STATUSES:
            raise ConflictError(
                f"Order cannot be cancelled because it is already {self.status.value}"
            )
        return self.transition_to(
            OrderStatus.CANCELLED,
            changed_by=requester.user_id or requester.email,
            at=at,
            note=note or "Cancelled by customer",
        )

    def assign_tracking_number(self, tracking_number: str) -> None:
        if not tracking_number or not tracking_number.strip():
            raise ValidationError("Tracking number cannot be empty")
        self.tracking_number = tracking_number.strip()

    # --- Payment outcomes -----------------------------------------------------

    def mark_paid(self, at: datetime | None = None) -> None:
        self.payment_status = PaymentStatus.PAID
        self.updated_at = at or utc_now()

    def mark_payment_failed(self, at: datetime | None = None) -> None:
        self.payment_status = PaymentStatus.FAILED
        self.updated_at = at or utc_now()

    # --- Returns --------------------------------------------------------------

    def find_return(self, return_id: str) -> ReturnRequest | None:
        for request in self.returns:
            if request.return_id == return_id:
                return request
        return None

    def has_active_return(self, order_item_id: str) -> bool:
        return any(request.is_active_for(order_item_id) for request in self.returns)

    @property
    def all_items_under_return(self) -> bool:
        return bool(self.items) and all(
            self.has_active_return(item.id) for item in self.items
        )

    def request_return(
        self,
        return_id: str,
        requester: Requester,
        reason: str,
        lines: list[ReturnLine],
        at: datetime | None = None,
        window_days: int = RETURN_WINDOW_DAYS,
    ) -> ReturnRequest:
        """Append a new return request after validating every line.

        Item problems are collected and raised together.
        """
        if not self.is_owned_by(requester):
            raise ForbiddenError(
                f"Not authorized to request a return for order {self.order_number}"
            )
        if not reason or not reason.strip():
            raise ValidationError("A return reason is required")
        if not lines:
            raise ValidationError("At least one item is required for a return")
        if self.status != OrderStatus.DELIVERED:
            raise ConflictError(
                f"Only delivered orders can be returned; order is {self.status.value}"
            )

        at = at or utc_now()
        deadline = self.return_deadline(window_days)
        if at >= deadline:
            raise ReturnWindowExpiredError(
                f"Return window has expired (deadline was {deadline:%Y-%m-%d})"
            )

        index = self.item_index
        problems: list[str] = []
        seen: set[str] = set()
        for line in lines:
            item = index.get(line.order_item_id)
            if item is None:
                problems.append(f"Order item '{line.order_item_id}' is not part of this order")
                continue
            if line.order_item_id in seen:
                problems.append(f"Order item '{line.order_item_id}' is listed more than once")
                continue
            seen.add(line.order_item_id)
            if not isinstance(line.quantity, int) or line.quantity <= 0:
                problems.append(
                    f"Return quantity for '{item.product_name}' must be positive"
                )
            elif line.quantity > item.quantity.value:
                problems.append(
                    f"Cannot return {line.quantity} of '{item.product_name}' "
                    f"(only {item.quantity.value} ordered)"
                )
            if self.has_active_return(line.order_item_id):
                problems.append(
                    f"'{item.product_name}' already has an active return"
                )
        if problems:
            raise InvalidReturnItemsError(problems)

        request = ReturnRequest(
            return_id=return_id,
            reason=reason.strip(),
            requested_at=at,
            return_deadline=deadline,
            items=[
                ReturnItem(
                    order_item_id=line.order_item_id,
                    quantity=line.quantity,
                    price=index[line.order_item_id].unit_price,
                    reason=(line.reason or "").strip(),
                )
                for line in lines
            ],
        )
        self.returns.append(request)
        self.updated_at = at
        return request

    # --- Refunds --------------------------------------------------------------

    def record_refund(
        self,
        refund_id: str,
        amount: Money,
        reason: str,
        method: str,
        processed_by: str | None,
        at: datetime | None = None,
    ) -> RefundRecord:
        """Record a refund already executed by the payment collaborator."""
        if amount.is_zero:
            raise ValidationError("Refund amount must be positive")
        balance = self.refundable_balance
        if amount > balance:
            raise RefundExceedsBalanceError(
                f"Refund amount {amount} exceeds the remaining balance {balance}"
            )
        at = at or utc_now()
        record = RefundRecord(
            refund_id=refund_id,
            amount=amount,
            reason=(reason or "").strip(),
            method=method,
            processed_by=processed_by,
            processed_at=at,
        )
        self.refunds.append(record)
        self.payment_status = (
            PaymentStatus.REFUNDED
            if self.is_fully_refunded
            else PaymentStatus.PARTIALLY_REFUNDED
        )
        self.updated_at = at
        return record

    @property
    def is_fully_refunded(self) -> bool:
        return self.refunded_amount >= self.total_amount

    # --- Splitting ------------------------------------------------------------

    def select_items_for_split(self, selectors: list[SplitSelector]) -> list[OrderLineItem]:
        """Resolve selectors to whole line items of this order.

        Raises if a selector matches nothing or if nothing would remain.
        """
        if not selectors:
            raise ValidationError("At least one item is required to split the order")
        if self.status not in SPLITTABLE_STATUSES:
            raise ConflictError(
                f"Order {self.order_number} cannot be split while {self.status.value}"
            )

        selected: dict[str, OrderLineItem] = {}
        missing: list[str] = []
        for selector in selectors:
            item = self._resolve_selector(selector)
            if item is None:
                missing.append(selector.label)
                continue
            selected[item.id] = item
        if missing:
            raise ValidationError(
                "Could not find item(s) in the order: " + ", ".join(missing)
            )

        moved_products = {item.product_id for item in selected.values()}
        remaining = [i for i in self.items if i.product_id not in moved_products]
        if not remaining:
            raise ValidationError("A split must leave at least one item on the original order")
        remaining_total = _compute_total(remaining, self.shipping_fee, self.discount)
        if self.refunded_amount > remaining_total:
            raise ConflictError(
                f"Order {self.order_number} has {self.refunded_amount} refunded; "
                f"splitting would leave a total of only {remaining_total}"
            )
        return [i for i in self.items if i.product_id in moved_products]

    def remove_products(self, product_ids: set[str], at: datetime | None = None) -> None:
        """Drop every line item for *product_ids*; totals follow automatically."""
        self.items = [item for item in self.items if item.product_id not in product_ids]
        self.updated_at = at or utc_now()

    # --- Internal helpers -----------------------------------------------------

    def _resolve_selector(self, selector: SplitSelector) -> OrderLineItem | None:
        for item in self.items:
            if selector.order_item_id and item.id == selector.order_item_id:
                return item
            if selector.product_id and item.product_id == selector.product_id:
                return item
        return None
