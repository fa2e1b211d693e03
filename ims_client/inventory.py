"""Locally cached view of the inventory collection and its edit operations."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import IMSError, ValidationError
from .models import InventoryItem
from .store import RecordStoreClient
from .validators import (
    is_blank,
    parse_amount,
    parse_int,
    parse_non_negative_int,
    require_text,
)

logger = logging.getLogger(__name__)

INVENTORY = "inventory"
DEFAULT_SUPPLIER_ID = 1

REQUIRED_FIELDS_MESSAGE = "Product name, quantity, price, and cost are required."


class InventoryView:
    """
    The client's most recently fetched copy of the inventory.

    It is only a cache: every change is sent to the backend first and the
    view is refreshed afterwards. ``stale`` is set when a refresh failed.
    """

    def __init__(self, store: RecordStoreClient):
        self.store = store
        self.items: List[InventoryItem] = []
        self.stale = True

    def refresh(self, order_by: str = "id", ascending: bool = True) -> List[InventoryItem]:
        rows = self.store.list(INVENTORY, order_by=order_by, ascending=ascending)
        self.items = [InventoryItem(**row) for row in rows]
        self.stale = False
        return self.items

    def refresh_quietly(self) -> bool:
        """Refresh after a write that already succeeded; a failure only marks the view stale."""
        try:
            self.refresh()
        except IMSError as e:
            logger.warning("Inventory refresh failed, view is stale: %s", e.message)
            self.stale = True
            return False
        return True

    def find(self, product_id: int) -> Optional[InventoryItem]:
        for item in self.items:
            if item.id == product_id:
                return item
        return None

    def add_item(
        self,
        product_name: Any,
        quantity: Any,
        price: Any,
        cost: Any,
        supplier_id: Any = None,
    ) -> InventoryItem:
        if any(is_blank(v) for v in (product_name, quantity, price, cost)):
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        record = {
            "product_name": require_text(product_name, REQUIRED_FIELDS_MESSAGE),
            "quantity": parse_non_negative_int(quantity, "Quantity must be a non-negative whole number."),
            "price": parse_amount(price, "Price must be a non-negative amount with at most two decimals."),
            "cost": parse_amount(cost, "Cost must be a non-negative amount with at most two decimals."),
            "supplier_id": DEFAULT_SUPPLIER_ID
            if is_blank(supplier_id)
            else parse_int(supplier_id, "Supplier ID must be a whole number."),
        }

        row = self.store.insert(INVENTORY, record)
        item = InventoryItem(**row)
        self.items.append(item)
        logger.info("Added inventory item %s (%s)", item.id, item.product_name)
        return item

    def update_item(self, item_id: int, **changes: Any) -> InventoryItem:
        partial = self._clean_changes(changes)
        row = self.store.update(INVENTORY, item_id, partial)
        self.refresh_quietly()
        return InventoryItem(**row)

    def adjust_item(self, item_id: int, delta: Any) -> InventoryItem:
        """Relative stock change, e.g. to reconcile a sale whose decrement failed."""
        delta = parse_int(delta, "Adjustment must be a whole number.")
        if delta == 0:
            raise ValidationError("Adjustment must not be zero.")
        row = self.store.adjust(INVENTORY, item_id, "quantity", delta)
        self.refresh_quietly()
        return InventoryItem(**row)

    def delete_item(self, item_id: int) -> None:
        self.store.delete(INVENTORY, item_id)
        self.items = [item for item in self.items if item.id != item_id]
        logger.info("Deleted inventory item %s", item_id)

    @staticmethod
    def _clean_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
        partial: Dict[str, Any] = {}
        for name, value in changes.items():
            if value is None:
                continue
            if name == "product_name":
                partial[name] = require_text(value, "Product name cannot be empty.")
            elif name == "quantity":
                partial[name] = parse_non_negative_int(value, "Quantity must be a non-negative whole number.")
            elif name in ("price", "cost"):
                partial[name] = parse_amount(
                    value, f"{name.capitalize()} must be a non-negative amount with at most two decimals."
                )
            elif name == "supplier_id":
                partial[name] = parse_int(value, "Supplier ID must be a whole number.")
            else:
                raise ValidationError(f"Unknown inventory field: {name}")
        if not partial:
            raise ValidationError("Nothing to update.")
        return partial
