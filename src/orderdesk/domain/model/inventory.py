"""InventoryItem: stock record per product.

Inventory is its own aggregate: orders reference products by id and the
reconciliation service turns order status changes into relative stock
adjustments on these records.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.domain.exceptions import InsufficientStockError


@dataclass
class InventoryItem:
    """Stock record for one product.

    Invariants:
    - ``available_quantity`` is always >= 0
    - ``sold_quantity`` is always >= 0

    When ``tracked`` is False the record is informational only and order
    reconciliation leaves it alone.
    """

    product_id: str
    product_name: str
    available_quantity: int = 0
    sold_quantity: int = 0
    tracked: bool = True

    def can_supply(self, quantity: int) -> bool:
        return not self.tracked or quantity <= self.available_quantity

    def adjust(self, available_delta: int, sold_delta: int = 0) -> None:
        """Apply a relative change.

        Raises InsufficientStockError if available stock would go negative;
        the sold counter is floored at zero.
        """
        new_available = self.available_quantity + available_delta
        if new_available < 0:
            raise InsufficientStockError(
                f"Insufficient stock for {self.product_name} "
                f"(need {-available_delta}, have {self.available_quantity} available)"
            )
        self.available_quantity = new_available
        self.sold_quantity = max(0, self.sold_quantity + sold_delta)
