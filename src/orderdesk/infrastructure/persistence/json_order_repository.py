"""JSON-document-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from orderdesk.domain.model.order import (
    Order,
    OrderLineItem,
    RefundRecord,
    StatusChange,
)
from orderdesk.domain.model.returns import ReturnItem, ReturnNote, ReturnRequest
from orderdesk.domain.model.status import (
    OrderStatus,
    PaymentStatus,
    ReturnItemStatus,
    ReturnStatus,
)
from orderdesk.domain.model.value_objects import Money, Quantity, ShippingAddress
from orderdesk.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):
    """Works on the ``orders`` section of a unit of work's snapshot."""

    def __init__(self, records: dict[str, dict]) -> None:
        self._records = records
        self._touched: set[str] = set()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        raw = self._records.get(order_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_order_number(self, order_number: str) -> Order | None:
        return self._find(lambda raw: raw["order_number"] == order_number)

    def get_by_return_id(self, return_id: str) -> Order | None:
        return self._find(
            lambda raw: any(r["return_id"] == return_id for r in raw.get("returns", []))
        )

    def get_by_tracking_number(self, tracking_number: str) -> Order | None:
        return self._find(lambda raw: raw.get("tracking_number") == tracking_number)

    def list(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
        guest_email: str | None = None,
    ) -> list[Order]:
        email = guest_email.strip().lower() if guest_email else None
        matches = [
            raw
            for raw in self._records.values()
            if (status is None or raw["status"] == status.value)
            and (user_id is None or raw.get("user_id") == user_id)
            and (email is None or raw.get("guest_email") == email)
        ]
        matches.sort(key=lambda raw: raw["created_at"], reverse=True)
        return [self._to_domain(raw) for raw in matches]

    def save(self, order: Order) -> None:
        self._records[order.id] = self._to_raw(order)
        self._touched.add(order.id)

    def delete(self, order_id: str) -> None:
        self._records.pop(order_id, None)
        self._touched.add(order_id)

    # --- Commit support -------------------------------------------------------

    def merge_into(self, latest: dict[str, dict]) -> None:
        for order_id in self._touched:
            if order_id in self._records:
                latest[order_id] = self._records[order_id]
            else:
                latest.pop(order_id, None)

    def _find(self, predicate) -> Order | None:
        for raw in self._records.values():
            if predicate(raw):
                return self._to_domain(raw)
        return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "guest_email": order.guest_email,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "shipping_address": {
                "street": order.shipping_address.street,
                "city": order.shipping_address.city,
                "state": order.shipping_address.state,
                "postal_code": order.shipping_address.postal_code,
                "country": order.shipping_address.country,
            },
            "shipping_fee": _money_out(order.shipping_fee),
            "discount": _money_out(order.discount),
            "currency": order.shipping_fee.currency,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": _money_out(item.unit_price),
                    "sku": item.sku,
                    "variant": item.variant,
                    "image": item.image,
                    "tax": _money_out(item.tax),
                    "discount": _money_out(item.discount),
                    "backordered": item.backordered,
                }
                for item in order.items
            ],
            "status_history": [
                {
                    "status": change.status.value,
                    "previous_status": change.previous_status.value
                    if change.previous_status
                    else None,
                    "changed_by": change.changed_by,
                    "timestamp": change.timestamp.isoformat(),
                    "note": change.note,
                }
                for change in order.status_history
            ],
            "returns": [
                {
                    "return_id": request.return_id,
                    "reason": request.reason,
                    "status": request.status.value,
                    "requested_at": request.requested_at.isoformat(),
                    "return_deadline": request.return_deadline.isoformat(),
                    "processed_by": request.processed_by,
                    "processed_at": _time_out(request.processed_at),
                    "items": [
                        {
                            "order_item_id": ri.order_item_id,
                            "quantity": ri.quantity,
                            "price": _money_out(ri.price),
                            "reason": ri.reason,
                            "status": ri.status.value,
                            "processed_at": _time_out(ri.processed_at),
                        }
                        for ri in request.items
                    ],
                    "notes": [
                        {
                            "text": note.text,
                            "added_by": note.added_by,
                            "added_at": note.added_at.isoformat(),
                        }
                        for note in request.notes
                    ],
                }
                for request in order.returns
            ],
            "refunds": [
                {
                    "refund_id": refund.refund_id,
                    "amount": _money_out(refund.amount),
                    "reason": refund.reason,
                    "method": refund.method,
                    "processed_by": refund.processed_by,
                    "processed_at": refund.processed_at.isoformat(),
                }
                for refund in order.refunds
            ],
            "parent_order_id": order.parent_order_id,
            "tracking_number": order.tracking_number,
            "notes": order.notes,
            "stock_committed": order.stock_committed,
            "created_at": order.created_at.isoformat(),
            "updated_at": _time_out(order.updated_at),
            "delivered_at": _time_out(order.delivered_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        items = [
            OrderLineItem(
                id=i["id"],
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=money(i["unit_price"]),
                sku=i.get("sku"),
                variant=i.get("variant"),
                image=i.get("image"),
                tax=money(i.get("tax", "0")),
                discount=money(i.get("discount", "0")),
                backordered=i.get("backordered", False),
            )
            for i in raw["items"]
        ]
        history = [
            StatusChange(
                status=OrderStatus(h["status"]),
                previous_status=OrderStatus(h["previous_status"]) if h.get("previous_status") else None,
                changed_by=h.get("changed_by"),
                timestamp=datetime.fromisoformat(h["timestamp"]),
                note=h.get("note", ""),
            )
            for h in raw.get("status_history", [])
        ]
        returns = [
            ReturnRequest(
                return_id=r["return_id"],
                reason=r["reason"],
                status=ReturnStatus(r["status"]),
                requested_at=datetime.fromisoformat(r["requested_at"]),
                return_deadline=datetime.fromisoformat(r["return_deadline"]),
                processed_by=r.get("processed_by"),
                processed_at=_time_in(r.get("processed_at")),
                items=[
                    ReturnItem(
                        order_item_id=ri["order_item_id"],
                        quantity=ri["quantity"],
                        price=money(ri["price"]),
                        reason=ri.get("reason", ""),
                        status=ReturnItemStatus(ri["status"]),
                        processed_at=_time_in(ri.get("processed_at")),
                    )
                    for ri in r["items"]
                ],
                notes=[
                    ReturnNote(
                        text=n["text"],
                        added_by=n.get("added_by"),
                        added_at=datetime.fromisoformat(n["added_at"]),
                    )
                    for n in r.get("notes", [])
                ],
            )
            for r in raw.get("returns", [])
        ]
        refunds = [
            RefundRecord(
                refund_id=f["refund_id"],
                amount=money(f["amount"]),
                reason=f["reason"],
                method=f["method"],
                processed_by=f.get("processed_by"),
                processed_at=datetime.fromisoformat(f["processed_at"]),
            )
            for f in raw.get("refunds", [])
        ]
        address = raw["shipping_address"]
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            items=items,
            shipping_address=ShippingAddress(
                street=address["street"],
                city=address["city"],
                state=address["state"],
                postal_code=address["postal_code"],
                country=address["country"],
            ),
            user_id=raw.get("user_id"),
            guest_email=raw.get("guest_email"),
            shipping_fee=money(raw.get("shipping_fee", "0")),
            discount=money(raw.get("discount", "0")),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw.get("payment_status", "pending")),
            status_history=history,
            returns=returns,
            refunds=refunds,
            parent_order_id=raw.get("parent_order_id"),
            tracking_number=raw.get("tracking_number"),
            notes=raw.get("notes"),
            stock_committed=raw.get("stock_committed", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=_time_in(raw.get("updated_at")),
            delivered_at=_time_in(raw.get("delivered_at")),
        )


def _money_out(value: Money) -> str:
    return str(value.amount)


def _time_out(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def _time_in(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
