"""Identifier generation.

Handlers never build ids themselves; they ask an injected ``IdGenerator``
so tests can swap in a deterministic sequence.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime


class IdGenerator(ABC):

    @abstractmethod
    def order_id(self) -> str:
        """Opaque, unique order identifier."""

    @abstractmethod
    def order_number(self, at: datetime) -> str:
        """Human-readable order number, e.g. ``ORD-2610-4F9A1C``."""

    @abstractmethod
    def line_item_id(self) -> str:
        """Identifier of a line item, unique within its order."""

    @abstractmethod
    def return_id(self) -> str:
        """System-wide unique return request id."""

    @abstractmethod
    def refund_id(self) -> str:
        """System-wide unique refund id."""

    @abstractmethod
    def tracking_number(self) -> str:
        """Shipment tracking number."""


class UuidIdGenerator(IdGenerator):
    """Production generator backed by ``uuid4``."""

    def order_id(self) -> str:
        return uuid.uuid4().hex

    def order_number(self, at: datetime) -> str:
        return f"ORD-{at:%y%m}-{self._short(6)}"

    def line_item_id(self) -> str:
        return uuid.uuid4().hex[:12]

    def return_id(self) -> str:
        return f"RTN-{self._short(8)}"

    def refund_id(self) -> str:
        return f"REF-{self._short(8)}"

    def tracking_number(self) -> str:
        return f"TRK-{self._short(10)}"

    @staticmethod
    def _short(length: int) -> str:
        return uuid.uuid4().hex[:length].upper()
