"""Application service: Check Stock use case (query).

Answers whether a prospective set of items could be ordered right now.
Unknown products are reported as out of stock rather than failing.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.application.dto import OrderItemSpec
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class StockLineDTO:
    product_id: str
    requested: int
    available: int
    in_stock: bool
    tracked: bool
    name: str | None = None
    sku: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class StockCheckDTO:
    in_stock: bool
    items: list[StockLineDTO]


class CheckStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, item_specs: list[OrderItemSpec]) -> StockCheckDTO:
        if not item_specs:
            raise ValidationError("At least one item is required")

        lines: list[StockLineDTO] = []
        with self._uow:
            for spec in item_specs:
                product = self._uow.products.get_by_id(spec.product_id)
                if product is None:
                    lines.append(
                        StockLineDTO(
                            product_id=spec.product_id,
                            requested=spec.quantity,
                            available=0,
                            in_stock=False,
                            tracked=False,
                            message="Product not found",
                        )
                    )
                    continue

                inv = self._uow.inventory.get_by_product_id(product.id)
                tracked = inv is not None and inv.tracked
                available = inv.available_quantity if inv is not None else 0
                lines.append(
                    StockLineDTO(
                        product_id=product.id,
                        requested=spec.quantity,
                        available=available,
                        in_stock=not tracked or available >= spec.quantity,
                        tracked=tracked,
                        name=product.name,
                        sku=product.sku,
                    )
                )

        return StockCheckDTO(in_stock=all(line.in_stock for line in lines), items=lines)
