"""Catalog storage interface.

Order creation resolves prices through it and the admin commands
maintain it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    def next_id(self) -> str:
        """Numeric catalog ids count up from "1"; other ids are ignored."""
        numeric = [int(p.id) for p in self.list_all() if p.id.isdigit()]
        return str(max(numeric) + 1) if numeric else "1"
