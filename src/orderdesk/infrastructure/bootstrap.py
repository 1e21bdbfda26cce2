"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import threading
from pathlib import Path

from orderdesk.application.add_product import AddProductHandler
from orderdesk.application.bulk_transition import BulkTransitionHandler
from orderdesk.application.cancel_order import CancelOrderHandler
from orderdesk.application.check_stock import CheckStockHandler
from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.inventory_alerts import (
    BackorderedItemsHandler,
    LowStockAlertsHandler,
)
from orderdesk.application.list_orders import ListOrdersHandler
from orderdesk.application.list_returns import ListReturnRequestsHandler
from orderdesk.application.payment_events import PaymentEventHandler
from orderdesk.application.process_refund import ProcessRefundHandler
from orderdesk.application.request_return import RequestReturnHandler
from orderdesk.application.restock_inventory import RestockInventoryHandler
from orderdesk.application.show_inventory import ShowInventoryHandler
from orderdesk.application.show_order import ShowOrderHandler
from orderdesk.application.split_order import SplitOrderHandler
from orderdesk.application.track_order import TrackOrderHandler
from orderdesk.application.transition_order import TransitionOrderHandler
from orderdesk.application.update_product import ListProductsHandler, UpdateProductHandler
from orderdesk.application.update_return_status import UpdateReturnStatusHandler
from orderdesk.domain.service.identifiers import UuidIdGenerator
from orderdesk.infrastructure.config import Settings
from orderdesk.infrastructure.persistence.json_store import JsonStore
from orderdesk.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork

# One store per file so every handler in the process shares its locks.
_stores: dict[Path, JsonStore] = {}
_stores_guard = threading.Lock()


def settings() -> Settings:
    return Settings.from_env()


def store(path: Path | None = None) -> JsonStore:
    resolved = (path or settings().store_path).resolve()
    with _stores_guard:
        if resolved not in _stores:
            _stores[resolved] = JsonStore(resolved)
        return _stores[resolved]


def unit_of_work() -> JsonUnitOfWork:
    return JsonUnitOfWork(store())


# --- Orders -------------------------------------------------------------------


def create_order_handler() -> CreateOrderHandler:
    return CreateOrderHandler(uow=unit_of_work(), ids=UuidIdGenerator())


def show_order_handler() -> ShowOrderHandler:
    return ShowOrderHandler(uow=unit_of_work())


def list_orders_handler() -> ListOrdersHandler:
    return ListOrdersHandler(uow=unit_of_work())


def transition_order_handler() -> TransitionOrderHandler:
    return TransitionOrderHandler(uow=unit_of_work(), ids=UuidIdGenerator())


def bulk_transition_handler() -> BulkTransitionHandler:
    return BulkTransitionHandler(transition_order_handler())


def cancel_order_handler() -> CancelOrderHandler:
    return CancelOrderHandler(uow=unit_of_work())


def split_order_handler() -> SplitOrderHandler:
    return SplitOrderHandler(uow=unit_of_work(), ids=UuidIdGenerator())


def track_order_handler() -> TrackOrderHandler:
    return TrackOrderHandler(uow=unit_of_work())


def payment_event_handler() -> PaymentEventHandler:
    return PaymentEventHandler(uow=unit_of_work())


# --- Returns and refunds ------------------------------------------------------


def request_return_handler() -> RequestReturnHandler:
    return RequestReturnHandler(
        uow=unit_of_work(),
        ids=UuidIdGenerator(),
        return_window_days=settings().return_window_days,
    )


def update_return_status_handler() -> UpdateReturnStatusHandler:
    return UpdateReturnStatusHandler(uow=unit_of_work())


def list_returns_handler() -> ListReturnRequestsHandler:
    return ListReturnRequestsHandler(uow=unit_of_work())


def process_refund_handler() -> ProcessRefundHandler:
    return ProcessRefundHandler(uow=unit_of_work(), ids=UuidIdGenerator())


# --- Inventory and catalog ----------------------------------------------------


def show_inventory_handler() -> ShowInventoryHandler:
    return ShowInventoryHandler(uow=unit_of_work())


def check_stock_handler() -> CheckStockHandler:
    return CheckStockHandler(uow=unit_of_work())


def restock_inventory_handler() -> RestockInventoryHandler:
    return RestockInventoryHandler(uow=unit_of_work())


def low_stock_alerts_handler() -> LowStockAlertsHandler:
    return LowStockAlertsHandler(
        uow=unit_of_work(), default_threshold=settings().low_stock_threshold
    )


def backordered_items_handler() -> BackorderedItemsHandler:
    return BackorderedItemsHandler(uow=unit_of_work())


def add_product_handler() -> AddProductHandler:
    return AddProductHandler(uow=unit_of_work())


def update_product_handler() -> UpdateProductHandler:
    return UpdateProductHandler(uow=unit_of_work())


def list_products_handler() -> ListProductsHandler:
    return ListProductsHandler(uow=unit_of_work())
