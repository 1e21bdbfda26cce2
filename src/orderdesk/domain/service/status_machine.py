"""Order status state machine.

Pure decision logic: which status may follow which.  The machine knows
nothing about why a transition happens; callers pass that along as
history metadata.
"""

from __future__ import annotations

from orderdesk.domain.model.status import OrderStatus

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.ON_HOLD, OrderStatus.CANCELLED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.RETURNED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED, OrderStatus.REFUNDED}),
    OrderStatus.ON_HOLD: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.BACKORDERED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
}


def allowed_targets(current: OrderStatus) -> frozenset[OrderStatus]:
    """Statuses reachable in one step from *current*."""
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def is_valid_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    # Self-transitions are not in the table, so they are rejected too.
    return requested in allowed_targets(current)
