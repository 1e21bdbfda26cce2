"""JSON-document-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal

from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.product_repository import ProductRepository


class JsonProductRepository(ProductRepository):
    """Works on the ``products`` section of a unit of work's snapshot."""

    def __init__(self, records: dict[str, dict]) -> None:
        self._records = records
        self._touched: set[str] = set()

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        raw = self._records.get(product_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_name(self, name: str) -> Product | None:
        for raw in self._records.values():
            if raw["name"] == name:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        products = [self._to_domain(raw) for raw in self._records.values()]
        return sorted(products, key=lambda p: (len(p.id), p.id))

    def save(self, product: Product) -> None:
        self._records[product.id] = self._to_raw(product)
        self._touched.add(product.id)

    # --- Commit support -------------------------------------------------------

    def merge_into(self, latest: dict[str, dict]) -> None:
        for product_id in self._touched:
            latest[product_id] = self._records[product_id]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "sku": product.sku,
            "image": product.image,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            sku=raw.get("sku"),
            image=raw.get("image"),
        )
