"""Integration tests for the TransitionOrder use case."""

import pytest

from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.dto import OrderItemSpec
from orderdesk.application.show_order import ShowOrderHandler
from orderdesk.application.track_order import TrackOrderHandler
from orderdesk.application.transition_order import TransitionOrderHandler
from orderdesk.domain.exceptions import (
    DependencyFailure,
    EntityNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from orderdesk.domain.model.requester import Requester
from tests.fakes import ADDRESS, FixedClock, SequentialIdGenerator, seeded_uow


def _setup():
    uow = seeded_uow()
    ids, clock = SequentialIdGenerator(), FixedClock()
    order = CreateOrderHandler(uow, ids, clock).handle(
        [OrderItemSpec("p1", 2)], ADDRESS, user_id="u1"
    )
    return TransitionOrderHandler(uow, ids, clock), uow, clock, order.id


class TestTransitionOrder:

    def test_full_lifecycle_records_history(self):
        handler, uow, clock, order_id = _setup()
        for status in ("processing", "shipped", "delivered"):
            clock.advance(hours=1)
            handler.handle(order_id, status, "admin")
        dto = ShowOrderHandler(uow).handle(order_id, Requester(user_id="u1"))
        assert [h.status for h in dto.status_history] == [
            "pending", "processing", "shipped", "delivered",
        ]
        assert dto.delivered_at == "2026-03-01 15:00 UTC"
        # Create already took the stock; processing must not take it again.
        assert uow.inventory.get_by_product_id("p1").available_quantity == 8

    def test_skipping_states_fails(self):
        handler, uow, _, order_id = _setup()
        with pytest.raises(InvalidTransitionError, match="from pending to delivered"):
            handler.handle(order_id, "delivered", "admin")
        assert uow.orders.get_by_id(order_id).status.value == "pending"

    def test_unknown_status_rejected(self):
        handler, _, _, order_id = _setup()
        with pytest.raises(ValidationError, match="Unknown order status"):
            handler.handle(order_id, "teleported", "admin")

    def test_unknown_order(self):
        handler, *_ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle("missing", "processing", "admin")

    def test_shipping_assigns_tracking_number(self):
        handler, uow, _, order_id = _setup()
        handler.handle(order_id, "processing", "admin")
        dto = handler.handle(order_id, "shipped", "admin")
        assert dto.tracking_number == "TRK-0000000001"
        tracking = TrackOrderHandler(uow).handle("TRK-0000000001")
        assert tracking.status == "shipped"
        assert len(tracking.history) == 3

    def test_caller_supplied_tracking_number(self):
        handler, _, _, order_id = _setup()
        handler.handle(order_id, "processing", "admin")
        dto = handler.handle(order_id, "shipped", "admin", tracking_number=" 1Z999 ")
        assert dto.tracking_number == "1Z999"

    def test_blank_tracking_number_rejected(self):
        handler, _, _, order_id = _setup()
        with pytest.raises(ValidationError, match="Tracking number"):
            handler.handle(order_id, "processing", "admin", tracking_number="  ")

    def test_failed_commit_keeps_previous_state(self):
        handler, uow, _, order_id = _setup()
        uow.fail_on_commits = {uow.commit_attempts + 1}
        with pytest.raises(DependencyFailure):
            handler.handle(order_id, "cancelled", "admin")
        order = uow.orders.get_by_id(order_id)
        assert order.status.value == "pending"
        assert len(order.status_history) == 1
        assert uow.inventory.get_by_product_id("p1").available_quantity == 8


class TestShowOrder:

    def test_guest_can_view_with_email(self):
        uow = seeded_uow()
        order = CreateOrderHandler(uow, SequentialIdGenerator(), FixedClock()).handle(
            [OrderItemSpec("p1", 1)], ADDRESS, guest_email="guest@example.com"
        )
        dto = ShowOrderHandler(uow).handle(order.id, Requester(email="Guest@Example.com"))
        assert dto.order_number == order.order_number

    def test_stranger_forbidden(self):
        _, uow, _, order_id = _setup()
        with pytest.raises(ForbiddenError):
            ShowOrderHandler(uow).handle(order_id, Requester(user_id="u2"))
