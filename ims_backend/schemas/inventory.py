from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field, field_validator

# price and cost columns are Numeric(10, 2); more decimals would be rounded on insert
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class InventoryItemCreate(BaseModel):
    product_name: str
    quantity: int
    price: Money
    cost: Money
    supplier_id: int = 1

    @field_validator("product_name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("product_name is required")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v


class InventoryItemUpdate(BaseModel):
    product_name: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[Money] = None
    cost: Optional[Money] = None
    supplier_id: Optional[int] = None

    @field_validator("product_name")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_optional(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("quantity must be >= 0")
        return v


class InventoryAdjust(BaseModel):
    # only stock levels may be changed relatively
    field: Literal["quantity"] = "quantity"
    delta: int


class InventoryItemRead(BaseModel):
    id: int
    product_name: str
    quantity: int
    price: float
    cost: float
    supplier_id: int

    class Config:
        from_attributes = True
