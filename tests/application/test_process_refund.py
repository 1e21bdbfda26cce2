"""Integration tests for the ProcessRefund use case."""

import pytest

from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.dto import OrderItemSpec
from orderdesk.application.process_refund import ProcessRefundHandler
from orderdesk.application.transition_order import TransitionOrderHandler
from orderdesk.domain.exceptions import (
    EntityNotFoundError,
    RefundExceedsBalanceError,
    ValidationError,
)
from tests.fakes import ADDRESS, FixedClock, SequentialIdGenerator, seeded_uow


def _setup(deliver: bool = True):
    """An order worth $25 (2 Widgets, 1 Gadget)."""
    uow = seeded_uow()
    ids, clock = SequentialIdGenerator(), FixedClock()
    order = CreateOrderHandler(uow, ids, clock).handle(
        [OrderItemSpec("p1", 2), OrderItemSpec("p2", 1)], ADDRESS, user_id="u1"
    )
    if deliver:
        transition = TransitionOrderHandler(uow, ids, clock)
        for status in ("processing", "shipped", "delivered"):
            transition.handle(order.id, status, "admin")
    return ProcessRefundHandler(uow, ids, clock), uow, order.id


class TestProcessRefund:

    def test_partial_refund(self):
        handler, uow, order_id = _setup()
        dto = handler.handle(order_id, "10", "Damaged box", "admin")
        assert dto.refund_id == "REF-00000001"
        assert dto.amount == "$10.00"
        assert dto.refunded_amount == "$10.00"
        assert dto.remaining_balance == "$15.00"
        assert dto.payment_status == "partially_refunded"
        assert dto.order_status == "delivered"
        assert dto.method == "original_payment"

    def test_refund_over_remaining_balance_rejected(self):
        handler, uow, order_id = _setup()
        handler.handle(order_id, "10", "Damaged box", "admin")
        with pytest.raises(RefundExceedsBalanceError, match="\\$15.00"):
            handler.handle(order_id, "20", "More damage", "admin")
        order = uow.orders.get_by_id(order_id)
        assert str(order.refunded_amount) == "$10.00"
        assert len(order.refunds) == 1

    def test_full_refund_moves_delivered_order_to_refunded(self):
        handler, uow, order_id = _setup()
        handler.handle(order_id, "10", "First", "admin")
        dto = handler.handle(order_id, "15", "Rest", "admin")
        assert dto.payment_status == "refunded"
        assert dto.order_status == "refunded"
        assert uow.inventory.get_by_product_id("p1").available_quantity == 10

    def test_full_refund_on_pending_order_keeps_status(self):
        handler, uow, order_id = _setup(deliver=False)
        dto = handler.handle(order_id, "25", "Goodwill", "admin")
        assert dto.payment_status == "refunded"
        assert dto.order_status == "pending"
        assert uow.inventory.get_by_product_id("p1").available_quantity == 8

    def test_zero_amount_rejected(self):
        handler, _, order_id = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            handler.handle(order_id, "0", "Nothing", "admin")

    def test_negative_amount_rejected(self):
        handler, _, order_id = _setup()
        with pytest.raises(ValidationError, match="cannot be negative"):
            handler.handle(order_id, "-5", "Nothing", "admin")

    def test_unknown_order(self):
        handler, *_ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle("missing", "5", "x", "admin")
