"""Application service: Restock Inventory use case (admin).

Adds units to a product's available stock as a relative increment, so a
restock never overwrites decrements committed by concurrent orders.
"""

from __future__ import annotations

import logging

from orderdesk.application.show_inventory import InventoryLineDTO
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.inventory import InventoryItem
from orderdesk.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class RestockInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, quantity: int, tracked: bool = True) -> InventoryLineDTO:
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")

        with self._uow:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product not found: '{product_id}'")

            if self._uow.inventory.get_by_product_id(product.id) is None:
                self._uow.inventory.add(
                    InventoryItem(
                        product_id=product.id,
                        product_name=product.name,
                        tracked=tracked,
                    )
                )
            item = self._uow.inventory.adjust(product.id, quantity)
            self._uow.commit()

        logger.info("Restocked %s by %d (now %d)", product.name, quantity, item.available_quantity)
        return InventoryLineDTO(
            product_id=item.product_id,
            product_name=item.product_name,
            available=item.available_quantity,
            sold=item.sold_quantity,
            tracked=item.tracked,
        )
