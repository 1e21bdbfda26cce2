"""Integration tests for the return request use cases."""

import pytest

from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.dto import OrderItemSpec
from orderdesk.application.list_returns import ListReturnRequestsHandler
from orderdesk.application.request_return import RequestReturnHandler
from orderdesk.application.transition_order import TransitionOrderHandler
from orderdesk.application.update_return_status import UpdateReturnStatusHandler
from orderdesk.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InvalidReturnItemsError,
    ReturnWindowExpiredError,
    ValidationError,
)
from orderdesk.domain.model.order import ReturnLine
from orderdesk.domain.model.requester import Requester
from tests.fakes import ADDRESS, FixedClock, SequentialIdGenerator, seeded_uow

OWNER = Requester(user_id="u1")


def _setup(guest_email: str | None = None):
    """Deliver an order of 2 Widgets and 1 Gadget (items item-1, item-2)."""
    uow = seeded_uow()
    ids, clock = SequentialIdGenerator(), FixedClock()
    owner = {"guest_email": guest_email} if guest_email else {"user_id": "u1"}
    order = CreateOrderHandler(uow, ids, clock).handle(
        [OrderItemSpec("p1", 2), OrderItemSpec("p2", 1)], ADDRESS, **owner
    )
    transition = TransitionOrderHandler(uow, ids, clock)
    for status in ("processing", "shipped", "delivered"):
        transition.handle(order.id, status, "admin")
    request = RequestReturnHandler(uow, ids, clock)
    update = UpdateReturnStatusHandler(uow, clock)
    return request, update, uow, clock, order.id


class TestRequestReturn:

    def test_partial_return(self):
        request, _, uow, clock, order_id = _setup()
        clock.advance(days=5)
        dto = request.handle(order_id, OWNER, "Too small", [ReturnLine("item-1", 1)])
        assert dto.return_id == "RTN-00000001"
        assert dto.status == "requested"
        assert dto.items[0].product_name == "Widget"
        assert dto.items[0].price == "$10.00"
        assert dto.order_status == "delivered"
        assert dto.return_deadline == "2026-03-31 12:00 UTC"

    def test_duplicate_active_return_conflicts(self):
        request, _, uow, _, order_id = _setup()
        request.handle(order_id, OWNER, "Too small", [ReturnLine("item-1", 1)])
        with pytest.raises(InvalidReturnItemsError, match="already has an active return"):
            request.handle(order_id, OWNER, "Again", [ReturnLine("item-1", 1)])
        assert len(uow.orders.get_by_id(order_id).returns) == 1

    def test_rejected_return_allows_a_new_one(self):
        request, update, _, _, order_id = _setup()
        first = request.handle(order_id, OWNER, "Too small", [ReturnLine("item-1", 1)])
        update.handle(first.return_id, "rejected", "admin", notes="Used item")
        second = request.handle(order_id, OWNER, "Really too small", [ReturnLine("item-1", 1)])
        assert second.status == "requested"

    def test_window_expired(self):
        request, _, _, clock, order_id = _setup()
        clock.advance(days=31)
        with pytest.raises(ReturnWindowExpiredError):
            request.handle(order_id, OWNER, "Late", [ReturnLine("item-1", 1)])

    def test_guest_email_is_case_insensitive(self):
        request, _, _, _, order_id = _setup(guest_email="guest@example.com")
        dto = request.handle(
            order_id, Requester(email="GUEST@Example.com"), "Wrong colour", [ReturnLine("item-2", 1)]
        )
        assert dto.status == "requested"

    def test_returning_every_item_refunds_the_order(self):
        request, _, uow, _, order_id = _setup()
        dto = request.handle(
            order_id, OWNER, "Changed my mind", [ReturnLine("item-1", 2), ReturnLine("item-2", 1)]
        )
        assert dto.order_status == "refunded"
        assert uow.inventory.get_by_product_id("p1").available_quantity == 10
        assert uow.inventory.get_by_product_id("p2").available_quantity == 20

    def test_unknown_order(self):
        request, *_ = _setup()
        with pytest.raises(EntityNotFoundError):
            request.handle("missing", OWNER, "x", [ReturnLine("item-1", 1)])


class TestUpdateReturnStatus:

    def test_approve_updates_items_and_notes(self):
        request, update, _, _, order_id = _setup()
        created = request.handle(order_id, OWNER, "Too small", [ReturnLine("item-1", 1)])
        dto = update.handle(created.return_id, "approved", "admin", notes="Label sent")
        assert dto.status == "approved"
        assert dto.items[0].status == "approved"
        assert dto.processed_by == "admin"
        assert dto.notes[0].text == "Label sent"

    def test_completed_is_terminal(self):
        request, update, _, _, order_id = _setup()
        created = request.handle(order_id, OWNER, "Too small", [ReturnLine("item-1", 1)])
        update.handle(created.return_id, "completed", "admin")
        with pytest.raises(ConflictError, match="already completed"):
            update.handle(created.return_id, "approved", "admin")

    def test_invalid_target_status(self):
        _, update, *_ = _setup()
        with pytest.raises(ValidationError, match="Invalid status"):
            update.handle("RTN-00000001", "requested", "admin")

    def test_unknown_return(self):
        _, update, *_ = _setup()
        with pytest.raises(EntityNotFoundError, match="RTN-404"):
            update.handle("RTN-404", "approved", "admin")


class TestListReturnRequests:

    def test_newest_first_and_filtered(self):
        request, update, uow, clock, order_id = _setup()
        first = request.handle(order_id, OWNER, "One", [ReturnLine("item-1", 1)])
        clock.advance(hours=1)
        second = request.handle(order_id, OWNER, "Two", [ReturnLine("item-2", 1)])
        update.handle(first.return_id, "approved", "admin")

        listing = ListReturnRequestsHandler(uow)
        assert [r.return_id for r in listing.handle()] == [second.return_id, first.return_id]
        assert [r.return_id for r in listing.handle("approved")] == [first.return_id]
