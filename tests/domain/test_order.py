"""Unit tests for the Order aggregate and its business rules."""

from datetime import timedelta

import pytest

from orderdesk.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    RefundExceedsBalanceError,
    ValidationError,
)
from orderdesk.domain.model.order import Order, OrderLineItem, SplitSelector
from orderdesk.domain.model.requester import Requester
from orderdesk.domain.model.status import OrderStatus, PaymentStatus
from orderdesk.domain.model.value_objects import Money, Quantity, ShippingAddress
from tests.fakes import T0

ADDRESS = ShippingAddress("1 Main St", "Springfield", "IL", "62701", "US")


def _make_item(
    item_id: str = "item-1",
    product_id: str = "p1",
    qty: int = 1,
    price: str = "10.00",
    name: str = "Widget",
    **extra,
) -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        id=item_id,
        product_id=product_id,
        product_name=name,
        quantity=Quantity(qty),
        unit_price=Money.of(price),
        **extra,
    )


def _make_order(items=None, **kwargs) -> Order:
    kwargs.setdefault("user_id", "u1")
    return Order.create(
        order_id="o1",
        order_number="ORD-2603-000001",
        items=items or [_make_item(qty=2)],
        shipping_address=ADDRESS,
        created_at=T0,
        **kwargs,
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = _make_order(items=[_make_item(qty=2, price="10.00")], shipping_fee=Money.of("5"))
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.total_amount == Money.of("25.00")
        assert [h.status for h in order.status_history] == [OrderStatus.PENDING]

    def test_total_includes_tax_and_discounts(self):
        items = [
            _make_item("a", "p1", qty=2, price="10.00", tax=Money.of("1.50"), discount=Money.of("2")),
            _make_item("b", "p2", qty=1, price="5.00"),
        ]
        order = _make_order(items=items, shipping_fee=Money.of("4"), discount=Money.of("3"))
        # (20 - 2) + 5 + 1.50 tax + 4 shipping - 3 discount
        assert order.subtotal == Money.of("23.00")
        assert order.total_amount == Money.of("25.50")

    def test_needs_exactly_one_owner(self):
        with pytest.raises(ValidationError, match="Exactly one"):
            _make_order(user_id=None)
        with pytest.raises(ValidationError, match="Exactly one"):
            _make_order(user_id="u1", guest_email="guest@example.com")

    def test_guest_email_normalized(self):
        order = _make_order(user_id=None, guest_email="Guest@Example.com")
        assert order.guest_email == "guest@example.com"
        assert order.is_guest

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("o1", "ORD-1", [], ADDRESS, user_id="u1")

    def test_51_items_rejected(self):
        items = [_make_item(f"i{n}", f"p{n}") for n in range(51)]
        with pytest.raises(ValidationError, match="Maximum 50 items"):
            _make_order(items=items)

    def test_duplicate_item_ids_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            _make_order(items=[_make_item("x", "p1"), _make_item("x", "p2")])

    def test_discount_larger_than_order_rejected(self):
        with pytest.raises(ValidationError, match="exceeds order value"):
            _make_order(discount=Money.of("1000"))


class TestTransitions:

    def test_transition_appends_history(self):
        order = _make_order()
        previous = order.transition_to(OrderStatus.PROCESSING, "admin", at=T0, note="go")
        assert previous == OrderStatus.PENDING
        last = order.status_history[-1]
        assert last.status == OrderStatus.PROCESSING
        assert last.previous_status == OrderStatus.PENDING
        assert last.changed_by == "admin"
        assert last.note == "go"

    def test_invalid_transition_leaves_order_untouched(self):
        order = _make_order()
        with pytest.raises(InvalidTransitionError, match="from pending to shipped"):
            order.transition_to(OrderStatus.SHIPPED, "admin")
        assert order.status == OrderStatus.PENDING
        assert len(order.status_history) == 1

    def test_delivery_sets_delivered_at(self):
        order = _make_order()
        order.transition_to(OrderStatus.PROCESSING, "admin", at=T0)
        order.transition_to(OrderStatus.SHIPPED, "admin", at=T0)
        delivered = T0 + timedelta(days=2)
        order.transition_to(OrderStatus.DELIVERED, "admin", at=delivered)
        assert order.delivered_at == delivered
        assert order.return_deadline() == delivered + timedelta(days=30)


class TestCancel:

    def test_owner_can_cancel_pending(self):
        order = _make_order()
        order.cancel(Requester(user_id="u1"), at=T0)
        assert order.status == OrderStatus.CANCELLED
        assert order.status_history[-1].note == "Cancelled by customer"

    def test_stranger_cannot_cancel(self):
        order = _make_order()
        with pytest.raises(ForbiddenError):
            order.cancel(Requester(user_id="someone-else"))

    def test_admin_can_cancel(self):
        order = _make_order()
        order.cancel(Requester.admin())
        assert order.status == OrderStatus.CANCELLED

    def test_shipped_order_cannot_be_cancelled(self):
        order = _make_order()
        order.transition_to(OrderStatus.PROCESSING, "admin")
        order.transition_to(OrderStatus.SHIPPED, "admin")
        with pytest.raises(ConflictError, match="already shipped"):
            order.cancel(Requester(user_id="u1"))


class TestOwnership:

    def test_guest_email_matches_case_insensitively(self):
        order = _make_order(user_id=None, guest_email="guest@example.com")
        assert order.is_owned_by(Requester(email="GUEST@example.com"))

    def test_registered_order_ignores_email(self):
        order = _make_order()
        assert not order.is_owned_by(Requester(email="u1@example.com"))

    def test_ensure_accessible_raises_forbidden(self):
        order = _make_order()
        with pytest.raises(ForbiddenError):
            order.ensure_accessible_by(Requester(user_id="u2"))


class TestRefunds:

    def test_partial_then_full_refund(self):
        order = _make_order(items=[_make_item(qty=1, price="40.00")])
        order.record_refund("REF-1", Money.of("15"), "damaged", "original_payment", "admin", at=T0)
        assert order.payment_status == PaymentStatus.PARTIALLY_REFUNDED
        assert order.refundable_balance == Money.of("25.00")

        order.record_refund("REF-2", Money.of("25"), "rest", "original_payment", "admin", at=T0)
        assert order.payment_status == PaymentStatus.REFUNDED
        assert order.is_fully_refunded

    def test_refund_over_balance_rejected(self):
        order = _make_order(items=[_make_item(qty=1, price="40.00")])
        order.record_refund("REF-1", Money.of("15"), "damaged", "original_payment", "admin")
        with pytest.raises(RefundExceedsBalanceError, match="remaining balance \\$25.00"):
            order.record_refund("REF-2", Money.of("30"), "more", "original_payment", "admin")
        assert len(order.refunds) == 1

    def test_zero_refund_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError, match="must be positive"):
            order.record_refund("REF-1", Money.zero(), "x", "original_payment", "admin")


class TestSplitSelection:

    def _order(self) -> Order:
        return _make_order(
            items=[
                _make_item("a", "p1", qty=2, price="10.00"),
                _make_item("b", "p2", qty=1, price="20.00"),
                _make_item("c", "p3", qty=3, price="5.00"),
            ]
        )

    def test_select_by_item_id_and_product_id(self):
        order = self._order()
        moved = order.select_items_for_split(
            [SplitSelector(order_item_id="a"), SplitSelector(product_id="p3")]
        )
        assert [i.id for i in moved] == ["a", "c"]

    def test_unknown_selector_reported(self):
        order = self._order()
        with pytest.raises(ValidationError, match="Could not find item\\(s\\) in the order: zzz"):
            order.select_items_for_split([SplitSelector(order_item_id="zzz")])

    def test_cannot_move_every_item(self):
        order = self._order()
        selectors = [SplitSelector(order_item_id=i) for i in ("a", "b", "c")]
        with pytest.raises(ValidationError, match="at least one item"):
            order.select_items_for_split(selectors)

    def test_shipped_order_cannot_be_split(self):
        order = self._order()
        order.transition_to(OrderStatus.PROCESSING, "admin")
        order.transition_to(OrderStatus.SHIPPED, "admin")
        with pytest.raises(ConflictError, match="cannot be split while shipped"):
            order.select_items_for_split([SplitSelector(order_item_id="a")])

    def test_remove_products_updates_total(self):
        order = self._order()
        order.remove_products({"p1"})
        assert [i.id for i in order.items] == ["b", "c"]
        assert order.total_amount == Money.of("35.00")
