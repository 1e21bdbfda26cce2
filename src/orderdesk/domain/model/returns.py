"""Return requests embedded in the Order aggregate.

A return request groups one or more return items, each pointing back at
a line item of the same order by its id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from orderdesk.domain.exceptions import ConflictError, ValidationError
from orderdesk.domain.model.status import ReturnItemStatus, ReturnStatus
from orderdesk.domain.model.value_objects import Money

# Statuses an admin may move a return request into.
UPDATABLE_RETURN_STATUSES = frozenset(
    {
        ReturnStatus.APPROVED,
        ReturnStatus.REJECTED,
        ReturnStatus.PROCESSING,
        ReturnStatus.COMPLETED,
    }
)

TERMINAL_RETURN_STATUSES = frozenset({ReturnStatus.REJECTED, ReturnStatus.COMPLETED})

# How a return request status is mirrored on items still awaiting a decision.
ITEM_STATUS_FOR_RETURN_STATUS = {
    ReturnStatus.APPROVED: ReturnItemStatus.APPROVED,
    ReturnStatus.REJECTED: ReturnItemStatus.REJECTED,
    ReturnStatus.PROCESSING: ReturnItemStatus.PENDING,
    ReturnStatus.COMPLETED: ReturnItemStatus.REFUNDED,
}

_REQUEST_LIKE_ITEM_STATUSES = frozenset({ReturnItemStatus.PENDING})


@dataclass
class ReturnItem:
    order_item_id: str
    quantity: int
    price: Money  # unit price snapshot of the line item
    reason: str = ""
    status: ReturnItemStatus = ReturnItemStatus.PENDING
    processed_at: datetime | None = None


@dataclass(frozen=True)
class ReturnNote:
    text: str
    added_by: str | None
    added_at: datetime


@dataclass
class ReturnRequest:
    return_id: str
    reason: str
    requested_at: datetime
    return_deadline: datetime
    items: list[ReturnItem]
    status: ReturnStatus = ReturnStatus.REQUESTED
    processed_by: str | None = None
    processed_at: datetime | None = None
    notes: list[ReturnNote] = field(default_factory=list)

    def is_active_for(self, order_item_id: str) -> bool:
        """True if this request still claims *order_item_id*."""
        if self.status == ReturnStatus.REJECTED:
            return False
        return any(
            item.order_item_id == order_item_id
            and item.status != ReturnItemStatus.REJECTED
            for item in self.items
        )

    def apply_status(
        self,
        new_status: ReturnStatus,
        actor: str | None,
        at: datetime,
        note: str | None = None,
    ) -> ReturnStatus:
        """Move the request to *new_status*; returns the previous status."""
        if new_status not in UPDATABLE_RETURN_STATUSES:
            allowed = ", ".join(sorted(s.value for s in UPDATABLE_RETURN_STATUSES))
            raise ValidationError(
                f"Invalid return status '{new_status.value}'. Must be one of: {allowed}"
            )
        if self.status in TERMINAL_RETURN_STATUSES:
            raise ConflictError(
                f"Return {self.return_id} is already {self.status.value}"
            )

        previous = self.status
        self.status = new_status
        self.processed_by = actor
        self.processed_at = at

        item_status = ITEM_STATUS_FOR_RETURN_STATUS[new_status]
        for item in self.items:
            if item.status in _REQUEST_LIKE_ITEM_STATUSES:
                item.status = item_status
                item.processed_at = at

        if note and note.strip():
            self.notes.append(ReturnNote(text=note.strip(), added_by=actor, added_at=at))
        return previous
