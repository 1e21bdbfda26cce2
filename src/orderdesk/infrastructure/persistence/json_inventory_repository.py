"""JSON-document-backed implementation of InventoryRepository.

Besides updating its snapshot, the repository records every adjustment
as a delta so the unit of work can replay the deltas onto the latest
document at commit time instead of overwriting absolute counts.
"""

from __future__ import annotations

from orderdesk.domain.exceptions import ConflictError, EntityNotFoundError
from orderdesk.domain.model.inventory import InventoryItem
from orderdesk.domain.repository.inventory_repository import InventoryRepository


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, records: dict[str, dict]) -> None:
        self._records = records
        self._added: dict[str, dict] = {}
        self._deltas: dict[str, list[int]] = {}

    # --- InventoryRepository interface ----------------------------------------

    def get_by_product_id(self, product_id: str) -> InventoryItem | None:
        raw = self._records.get(product_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[InventoryItem]:
        return [self._to_domain(raw) for raw in self._records.values()]

    def add(self, item: InventoryItem) -> None:
        if item.product_id in self._records:
            raise ConflictError(f"Inventory for product '{item.product_id}' already exists")
        raw = self._to_raw(item)
        self._records[item.product_id] = raw
        self._added[item.product_id] = dict(raw)

    def adjust(self, product_id: str, available_delta: int, sold_delta: int = 0) -> InventoryItem:
        item = self.get_by_product_id(product_id)
        if item is None:
            raise EntityNotFoundError(f"No inventory record for product '{product_id}'")
        item.adjust(available_delta, sold_delta)
        self._records[product_id] = self._to_raw(item)
        delta = self._deltas.setdefault(product_id, [0, 0])
        delta[0] += available_delta
        delta[1] += sold_delta
        return item

    # --- Commit support -------------------------------------------------------

    def merge_into(self, latest: dict[str, dict]) -> None:
        """Replay new records and deltas onto *latest*.

        Raises InsufficientStockError when a delta no longer fits the
        latest stock level.
        """
        for product_id, raw in self._added.items():
            latest.setdefault(product_id, raw)
        for product_id, (available_delta, sold_delta) in self._deltas.items():
            raw = latest.get(product_id)
            if raw is None:
                raise EntityNotFoundError(f"No inventory record for product '{product_id}'")
            item = self._to_domain(raw)
            item.adjust(available_delta, sold_delta)
            latest[product_id] = self._to_raw(item)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: InventoryItem) -> dict:
        return {
            "product_id": item.product_id,
            "product_name": item.product_name,
            "available_quantity": item.available_quantity,
            "sold_quantity": item.sold_quantity,
            "tracked": item.tracked,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryItem:
        return InventoryItem(
            product_id=raw["product_id"],
            product_name=raw["product_name"],
            available_quantity=raw.get("available_quantity", 0),
            sold_quantity=raw.get("sold_quantity", 0),
            tracked=raw.get("tracked", True),
        )
