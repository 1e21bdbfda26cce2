"""Unit tests for the InventoryItem aggregate."""

import pytest

from orderdesk.domain.exceptions import InsufficientStockError
from orderdesk.domain.model.inventory import InventoryItem


class TestInventoryItemAdjust:

    def test_decrement_moves_units_to_sold(self):
        inv = InventoryItem(product_id="1", product_name="Widget", available_quantity=10)
        inv.adjust(-2, 2)
        assert inv.available_quantity == 8
        assert inv.sold_quantity == 2

    def test_decrement_to_zero_allowed(self):
        inv = InventoryItem(product_id="1", product_name="Widget", available_quantity=3)
        inv.adjust(-3, 3)
        assert inv.available_quantity == 0

    def test_decrement_below_zero_rejected(self):
        inv = InventoryItem(product_id="1", product_name="Widget", available_quantity=3)
        with pytest.raises(InsufficientStockError, match="need 4, have 3"):
            inv.adjust(-4, 4)
        assert inv.available_quantity == 3
        assert inv.sold_quantity == 0

    def test_sold_counter_floors_at_zero(self):
        inv = InventoryItem(product_id="1", product_name="Widget", available_quantity=0, sold_quantity=1)
        inv.adjust(5, -5)
        assert inv.available_quantity == 5
        assert inv.sold_quantity == 0


class TestInventoryItemCanSupply:

    def test_tracked_item_checks_available(self):
        inv = InventoryItem(product_id="1", product_name="Widget", available_quantity=2)
        assert inv.can_supply(2)
        assert not inv.can_supply(3)

    def test_untracked_item_always_supplies(self):
        inv = InventoryItem(product_id="1", product_name="Widget", tracked=False)
        assert inv.can_supply(1000)
