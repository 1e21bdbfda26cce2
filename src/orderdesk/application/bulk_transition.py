"""Application service: Bulk Status Transition use case.

Applies one status change to many orders.  Each order is its own unit of
work, so a failure on one order neither rolls back nor blocks the
others.  A batch in which no order changed is reported as failed.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import BulkItemResult, BulkTransitionReport
from orderdesk.application.transition_order import TransitionOrderHandler
from orderdesk.domain.exceptions import (
    DomainException,
    NothingUpdatedError,
    ValidationError,
)
from orderdesk.domain.model.status import OrderStatus

logger = logging.getLogger(__name__)


class BulkTransitionHandler:

    def __init__(self, transition_handler: TransitionOrderHandler) -> None:
        self._transition = transition_handler

    def handle(
        self,
        order_ids: list[str],
        new_status: str | OrderStatus,
        actor: str | None,
        note: str = "",
    ) -> BulkTransitionReport:
        requested = OrderStatus.parse(new_status)
        unique_ids = list(dict.fromkeys(oid.strip() for oid in order_ids if oid and oid.strip()))
        if not unique_ids:
            raise ValidationError("Order IDs and status are required")

        results: list[BulkItemResult] = []
        for order_id in unique_ids:
            try:
                self._transition.handle(order_id, requested, actor, note=note)
            except DomainException as exc:
                logger.error("Bulk update of order %s to %s failed: %s", order_id, requested.value, exc)
                results.append(
                    BulkItemResult(
                        order_id=order_id,
                        success=False,
                        error_kind=exc.kind.value,
                        message=str(exc),
                    )
                )
            else:
                results.append(BulkItemResult(order_id=order_id, success=True))

        report = BulkTransitionReport(status=requested.value, results=results)
        if report.succeeded == 0:
            raise NothingUpdatedError(
                f"No orders were updated to {requested.value}", results=results
            )
        logger.info(
            "Bulk update to %s: %d succeeded, %d failed",
            requested.value,
            report.succeeded,
            report.failed,
        )
        return report
