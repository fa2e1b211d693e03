from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ims_backend.schemas.inventory import Money


class SaleCreate(BaseModel):
    product_id: int
    quantity: int
    price: Money
    sale_date: Optional[datetime] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("quantity must be > 0")
        return v


class SaleRecordRequest(BaseModel):
    """Body of the transactional sale: price is taken from the inventory row."""
    product_id: int
    quantity: int
    sale_date: Optional[datetime] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("quantity must be > 0")
        return v


class SaleRead(BaseModel):
    id: int
    product_id: Optional[int] = None
    quantity: int
    price: float
    sale_date: datetime
    created_at: Optional[datetime] = None
