"""Application service: Update Product use case."""

from __future__ import annotations

from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.unit_of_work import UnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, new_price: str) -> Product:
        """Update a product's price.

        Existing orders keep the price they captured at creation time.
        """
        with self._uow:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            product.update_price(Money.of(new_price))
            self._uow.products.save(product)
            self._uow.commit()
        return product


class ListProductsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[Product]:
        with self._uow:
            return self._uow.products.list_all()
