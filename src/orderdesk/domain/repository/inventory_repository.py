"""Abstract repository for InventoryItem records.

Stock is only ever changed through ``adjust`` with relative deltas so
concurrent units of work compose instead of overwriting each other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.inventory import InventoryItem


class InventoryRepository(ABC):

    @abstractmethod
    def get_by_product_id(self, product_id: str) -> InventoryItem | None:
        """Return the inventory record for a product, or None."""

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        """Return every inventory record."""

    @abstractmethod
    def add(self, item: InventoryItem) -> None:
        """Register a new inventory record."""

    @abstractmethod
    def adjust(self, product_id: str, available_delta: int, sold_delta: int = 0) -> InventoryItem:
        """Apply a relative change to a record and return it."""
