"""Application service: Add Product use case."""

from __future__ import annotations

from orderdesk.domain.exceptions import ConflictError, ValidationError
from orderdesk.domain.model.inventory import InventoryItem
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        price: str,
        sku: str | None = None,
        image: str | None = None,
        stock: int = 0,
        tracked: bool = True,
    ) -> Product:
        """Add a new product to the catalog along with its inventory record."""
        if stock < 0:
            raise ValidationError("Initial stock cannot be negative")

        with self._uow:
            product = Product.register(
                self._uow.products.next_id(), name, Money.of(price), sku=sku, image=image
            )
            if self._uow.products.get_by_name(product.name) is not None:
                raise ConflictError(f"Product '{product.name}' already exists")
            self._uow.products.save(product)
            self._uow.inventory.add(
                InventoryItem(
                    product_id=product.id,
                    product_name=product.name,
                    available_quantity=stock,
                    tracked=tracked,
                )
            )
            self._uow.commit()
        return product
