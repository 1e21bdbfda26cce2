"""Catalog entries.

An order line copies what it needs from a ``Product`` when the order is
placed; the catalog can change afterwards without touching any order.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.value_objects import Money


@dataclass
class Product:
    """Sellable item: display name, current price, optional SKU and image."""

    id: str
    name: str
    price: Money
    sku: str | None = None
    image: str | None = None

    @classmethod
    def register(
        cls,
        product_id: str,
        name: str,
        price: Money,
        sku: str | None = None,
        image: str | None = None,
    ) -> Product:
        """Build a new catalog entry from admin input."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        _require_positive(price)
        return cls(
            id=product_id,
            name=name.strip(),
            price=price,
            sku=(sku.strip() or None) if sku else None,
            image=image or None,
        )

    def update_price(self, new_price: Money) -> None:
        # Line items keep their own unit price, so open orders are unaffected.
        _require_positive(new_price)
        self.price = new_price


def _require_positive(price: Money) -> None:
    if price.is_zero:
        raise ValidationError("Product price must be greater than zero")
