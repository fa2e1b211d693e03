from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class InventoryItem(BaseModel):
    id: int
    product_name: str
    quantity: int
    price: float
    cost: Optional[float] = None
    supplier_id: Optional[int] = None


class Sale(BaseModel):
    id: int
    product_id: Optional[int] = None
    quantity: int
    price: float
    sale_date: datetime
    created_at: Optional[datetime] = None

    @property
    def total(self) -> float:
        return self.quantity * self.price
