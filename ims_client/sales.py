"""
Sale recording workflow.

Recording a sale touches two collections: a row is inserted into ``sales``
and the item's quantity in ``inventory`` is decremented. On the plain CRUD
path these are two independent requests, always in that order. If the
decrement fails the sale stays persisted and PartialFailureError is raised
so the caller can reconcile; nothing is rolled back or retried.

``record_sale_atomic`` uses the backend's transactional procedure instead
and cannot end half-done.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from .errors import IMSError, PartialFailureError, ValidationError
from .inventory import INVENTORY, InventoryView
from .models import InventoryItem, Sale
from .store import RecordStoreClient
from .validators import is_blank, parse_int, parse_positive_int

logger = logging.getLogger(__name__)

SALES = "sales"

MISSING_INPUT_MESSAGE = "Please select a product and enter a quantity."
BAD_QUANTITY_MESSAGE = "Quantity must be a positive whole number."
UNKNOWN_PRODUCT_MESSAGE = "Selected product not found in inventory."
EXCEEDS_STOCK_MESSAGE = "Quantity exceeds available inventory."


class SalesWorkflow:
    def __init__(self, store: RecordStoreClient, inventory: InventoryView):
        self.store = store
        self.inventory = inventory
        self.sales: List[Sale] = []

    def refresh_sales(self) -> List[Sale]:
        rows = self.store.list(SALES, order_by="id", ascending=False)
        self.sales = [Sale(**row) for row in rows]
        return self.sales

    def check_sale(self, product_id: Any, quantity: Any) -> Tuple[InventoryItem, int]:
        """Preconditions against the local inventory view (possibly stale). No requests."""
        if is_blank(product_id) or is_blank(quantity):
            raise ValidationError(MISSING_INPUT_MESSAGE)

        product_id = parse_int(product_id, UNKNOWN_PRODUCT_MESSAGE)
        quantity = parse_positive_int(quantity, BAD_QUANTITY_MESSAGE)

        item = self.inventory.find(product_id)
        if item is None:
            raise ValidationError(UNKNOWN_PRODUCT_MESSAGE)
        if quantity > item.quantity:
            raise ValidationError(EXCEEDS_STOCK_MESSAGE)
        return item, quantity

    def record_sale(self, product_id: Any, quantity: Any) -> Sale:
        item, quantity = self.check_sale(product_id, quantity)

        # 1. the sale, with the price as the view knows it right now
        row = self.store.insert(
            SALES,
            {
                "product_id": item.id,
                "quantity": quantity,
                "price": item.price,
                "sale_date": datetime.now(timezone.utc).isoformat(),
            },
        )
        sale = Sale(**row)
        logger.info("Sale %s inserted for product %s (qty=%s)", sale.id, item.id, quantity)

        # 2. the stock, only once the sale exists
        try:
            self.store.adjust(INVENTORY, item.id, "quantity", -quantity)
        except IMSError as e:
            logger.error(
                "Sale %s recorded but inventory of product %s was not decremented by %s: %s",
                sale.id, item.id, quantity, e.message,
            )
            self.sales.insert(0, sale)
            self.inventory.stale = True
            raise PartialFailureError(
                f"Sale added but failed to update inventory: {e.message}",
                sale=sale,
                product_id=item.id,
                quantity=quantity,
                cause=e,
            ) from e

        self._after_sale(sale)
        return sale

    def record_sale_atomic(self, product_id: Any, quantity: Any) -> Sale:
        item, quantity = self.check_sale(product_id, quantity)
        row = self.store.call(
            SALES,
            "record",
            {
                "product_id": item.id,
                "quantity": quantity,
                "sale_date": datetime.now(timezone.utc).isoformat(),
            },
        )
        sale = Sale(**row)
        logger.info("Sale %s recorded atomically for product %s (qty=%s)", sale.id, item.id, quantity)
        self._after_sale(sale)
        return sale

    def complete_partial_sale(self, error: PartialFailureError) -> InventoryItem:
        """Apply the decrement a PartialFailureError left out. Only ever called by the caller."""
        row = self.store.adjust(INVENTORY, error.product_id, "quantity", -error.quantity)
        logger.info(
            "Reconciled sale %s: product %s decremented by %s",
            getattr(error.sale, "id", None), error.product_id, error.quantity,
        )
        self.inventory.refresh_quietly()
        return InventoryItem(**row)

    def rows(self) -> List[Dict[str, Any]]:
        """Sales joined with the inventory view, ready for display."""
        out = []
        for sale in self.sales:
            product = self.inventory.find(sale.product_id) if sale.product_id is not None else None
            out.append(
                {
                    "id": sale.id,
                    "product_name": product.product_name if product else None,
                    "quantity": sale.quantity,
                    "price": sale.price,
                    "total": sale.total,
                    "sale_date": sale.sale_date,
                }
            )
        return out

    def _after_sale(self, sale: Sale) -> None:
        self.sales.insert(0, sale)
        # other clients may have changed the same row: re-read instead of patching locally
        self.inventory.refresh_quietly()
