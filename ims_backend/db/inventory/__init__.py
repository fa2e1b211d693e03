"""
Inventory table.

Models:
- InventoryItem (one row per product; quantity is the stock on hand)
"""

from .item import InventoryItem

__all__ = ["InventoryItem"]
