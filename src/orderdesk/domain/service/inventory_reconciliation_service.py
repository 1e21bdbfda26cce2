"""Domain service: Inventory Reconciliation.

Keeps stock counts consistent with order state.  It decides, per status
change, whether the order's line items go back on the shelf (restore),
come off it (reduce), or leave inventory untouched, and applies the
result through relative adjustments on the inventory repository.

The order's ``stock_committed`` flag records whether its stock is
currently held, which makes every call idempotent: a second reduce or
restore for the same order is a no-op.
"""

from __future__ import annotations

import logging
from collections import Counter
from enum import Enum

from orderdesk.domain.exceptions import InsufficientStockError
from orderdesk.domain.model.order import Order, OrderLineItem
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.repository.inventory_repository import InventoryRepository

logger = logging.getLogger(__name__)

_RELEASING = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})
_HOLDING = frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED})
_ALREADY_HELD = frozenset(
    {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED}
)


class StockAction(Enum):
    RESTORE = "restore"
    REDUCE = "reduce"
    NONE = "none"


def decide_stock_action(previous: OrderStatus, new: OrderStatus) -> StockAction:
    """Decision table for a single status change."""
    if new in _RELEASING and previous not in _RELEASING:
        return StockAction.RESTORE
    if new in _HOLDING and previous not in _ALREADY_HELD:
        return StockAction.REDUCE
    return StockAction.NONE


class InventoryReconciliationService:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def commit_for_order(self, order: Order) -> None:
        """Take stock for every tracked line item of a new order.

        Uses a two-phase approach:
          Phase 1, validate: every tracked product must have enough
                    available stock.  All shortfalls are reported at once.
          Phase 2, mutate: decrement available, increment sold.
        """
        needed = self._quantities_by_product(order.items)
        shortfalls: list[str] = []
        for product_id, qty in needed.items():
            inv = self._inventory_repo.get_by_product_id(product_id)
            if inv is not None and not inv.can_supply(qty):
                shortfalls.append(
                    f"{inv.product_name} (need {qty}, have {inv.available_quantity} available)"
                )
        if shortfalls:
            raise InsufficientStockError(
                "Insufficient stock for: " + "; ".join(shortfalls)
            )

        for product_id, qty in needed.items():
            inv = self._inventory_repo.get_by_product_id(product_id)
            if inv is None or not inv.tracked:
                continue
            self._inventory_repo.adjust(product_id, -qty, qty)
        order.stock_committed = True

    def reconcile(
        self,
        order: Order,
        previous_status: OrderStatus,
        new_status: OrderStatus,
    ) -> StockAction:
        """Apply the stock effect of ``previous_status -> new_status``.

        *previous_status* must be the value read inside the same unit of
        work, immediately before the transition.
        """
        action = decide_stock_action(previous_status, new_status)
        if action == StockAction.REDUCE and order.stock_committed:
            logger.debug("Stock for order %s already held", order.order_number)
            return StockAction.NONE
        if action == StockAction.RESTORE and not order.stock_committed:
            logger.debug("Stock for order %s already released", order.order_number)
            return StockAction.NONE

        if action == StockAction.REDUCE:
            self._reduce(order)
        elif action == StockAction.RESTORE:
            self._restore(order)
        return action

    # --- Internal helpers -----------------------------------------------------

    def _reduce(self, order: Order) -> None:
        for line in order.items:
            inv = self._inventory_repo.get_by_product_id(line.product_id)
            if inv is None or not inv.tracked:
                continue
            qty = line.quantity.value
            if inv.available_quantity >= qty:
                self._inventory_repo.adjust(line.product_id, -qty, qty)
                line.backordered = False
            else:
                # Implicit backorder: the order proceeds without this stock.
                line.backordered = True
                logger.warning(
                    "Insufficient stock for product %s on order %s "
                    "(need %d, have %d); item backordered",
                    line.product_id,
                    order.order_number,
                    qty,
                    inv.available_quantity,
                )
        order.stock_committed = True

    def _restore(self, order: Order) -> None:
        for line in order.items:
            if line.backordered:
                # Never taken from stock, so nothing to give back.
                line.backordered = False
                continue
            inv = self._inventory_repo.get_by_product_id(line.product_id)
            if inv is None or not inv.tracked:
                continue
            qty = line.quantity.value
            self._inventory_repo.adjust(line.product_id, qty, -qty)
        order.stock_committed = False

    @staticmethod
    def _quantities_by_product(items: list[OrderLineItem]) -> dict[str, int]:
        totals: Counter[str] = Counter()
        for line in items:
            totals[line.product_id] += line.quantity.value
        return dict(totals)
