"""Integration tests for payment outcome events."""

import pytest

from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.dto import OrderItemSpec
from orderdesk.application.payment_events import PaymentEventHandler
from orderdesk.application.process_refund import ProcessRefundHandler
from orderdesk.domain.exceptions import ConflictError, EntityNotFoundError
from tests.fakes import ADDRESS, FixedClock, SequentialIdGenerator, seeded_uow


def _setup():
    uow = seeded_uow()
    ids, clock = SequentialIdGenerator(), FixedClock()
    order = CreateOrderHandler(uow, ids, clock).handle(
        [OrderItemSpec("p1", 2)], ADDRESS, user_id="u1"
    )
    return PaymentEventHandler(uow, clock), uow, ids, clock, order.id


class TestPaymentSucceeded:

    def test_marks_paid_and_starts_processing(self):
        handler, uow, *_, order_id = _setup()
        dto = handler.handle_succeeded(order_id)
        assert dto.payment_status == "paid"
        assert dto.status == "processing"
        assert dto.status_history[-1].changed_by == "payment"
        assert uow.inventory.get_by_product_id("p1").available_quantity == 8

    def test_replay_is_a_no_op(self):
        handler, uow, *_, order_id = _setup()
        handler.handle_succeeded(order_id)
        dto = handler.handle_succeeded(order_id)
        assert dto.status == "processing"
        assert len(dto.status_history) == 2

    def test_payment_after_failure_recovers(self):
        handler, *_, order_id = _setup()
        handler.handle_failed(order_id)
        assert handler.handle_succeeded(order_id).payment_status == "paid"

    def test_refunded_order_cannot_be_paid_again(self):
        handler, uow, ids, clock, order_id = _setup()
        ProcessRefundHandler(uow, ids, clock).handle(order_id, "20", "Goodwill", "admin")
        with pytest.raises(ConflictError, match="already refunded"):
            handler.handle_succeeded(order_id)


class TestPaymentFailed:

    def test_marks_failed(self):
        handler, *_, order_id = _setup()
        dto = handler.handle_failed(order_id)
        assert dto.payment_status == "failed"
        assert dto.status == "pending"

    def test_replay_is_a_no_op(self):
        handler, *_, order_id = _setup()
        handler.handle_failed(order_id)
        assert handler.handle_failed(order_id).payment_status == "failed"

    def test_paid_order_cannot_fail(self):
        handler, *_, order_id = _setup()
        handler.handle_succeeded(order_id)
        with pytest.raises(ConflictError, match="already paid"):
            handler.handle_failed(order_id)

    def test_unknown_order(self):
        handler, *_ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle_failed("missing")
