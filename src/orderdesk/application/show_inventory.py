"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    available: int
    sold: int
    tracked: bool


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[InventoryLineDTO]:
        with self._uow:
            items = self._uow.inventory.list_all()
        return [
            InventoryLineDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                available=item.available_quantity,
                sold=item.sold_quantity,
                tracked=item.tracked,
            )
            for item in items
        ]
