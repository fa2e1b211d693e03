import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from ims_backend.core.auth import current_active_user
from ims_backend.core.errors import (
    CHECK_VIOLATION,
    FOREIGN_KEY_VIOLATION,
    INTERNAL_ERROR,
    api_error,
    db_error,
)
from ims_backend.core.query import order_clauses, parse_columns, project
from ims_backend.db.database import get_async_session
from ims_backend.db.inventory import InventoryItem as InventoryItemModel
from ims_backend.db.sale import Sale as SaleModel
from ims_backend.db.users import User
from ims_backend.schemas.sales import SaleCreate, SaleRead, SaleRecordRequest

logger = logging.getLogger(__name__)

router = APIRouter()

SALE_FIELDS = ("id", "product_id", "quantity", "price", "sale_date", "created_at")

SALE_MESSAGES = {
    FOREIGN_KEY_VIOLATION: "Selected product does not exist",
    CHECK_VIOLATION: "Quantity must be greater than zero",
}


def _missing_product(product_id: int) -> HTTPException:
    return api_error(FOREIGN_KEY_VIOLATION, f"Product {product_id} does not exist")


@router.get("/", response_model=List[Dict])
async def list_sales(
    order: str = Query("id"),
    ascending: bool = True,
    columns: Optional[str] = None,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    selected = parse_columns(columns, SALE_FIELDS)
    stmt = select(SaleModel).order_by(*order_clauses(SaleModel, order, ascending))
    res = await db.execute(stmt)
    return [project(sale.to_schema, selected) for sale in res.scalars().all()]


@router.post("/", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
async def create_sale(
    payload: SaleCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Insert a sale row as given. Stock is not touched here."""
    res = await db.execute(select(InventoryItemModel.id).where(InventoryItemModel.id == payload.product_id))
    if res.scalar_one_or_none() is None:
        raise _missing_product(payload.product_id)

    data = payload.model_dump(exclude_none=True)
    sale = SaleModel(**data)
    db.add(sale)
    try:
        await db.commit()
    except DBAPIError as e:
        await db.rollback()
        raise db_error(e, SALE_MESSAGES)
    await db.refresh(sale)
    logger.info("Sale %s inserted for product %s (qty=%s)", sale.id, sale.product_id, sale.quantity)
    return SaleRead(**sale.to_schema)


@router.post("/record", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
async def record_sale(
    payload: SaleRecordRequest,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Record a sale and decrement stock in one transaction.

    The item row is locked (SELECT ... FOR UPDATE where supported) so the stock
    check and the decrement see the same quantity.
    """
    try:
        res = await db.execute(
            select(InventoryItemModel)
            .where(InventoryItemModel.id == payload.product_id)
            .with_for_update()
        )
        item = res.scalar_one_or_none()
        if not item:
            raise _missing_product(payload.product_id)
        if payload.quantity > item.quantity:
            raise api_error(CHECK_VIOLATION, "Quantity exceeds available inventory.")

        sale = SaleModel(
            product_id=item.id,
            quantity=payload.quantity,
            price=item.price,
            sale_date=payload.sale_date or datetime.now(timezone.utc),
        )
        db.add(sale)
        item.quantity = item.quantity - payload.quantity

        await db.commit()
    except HTTPException:
        await db.rollback()
        raise
    except DBAPIError as e:
        await db.rollback()
        raise db_error(e, SALE_MESSAGES)
    except Exception as e:
        await db.rollback()
        logger.exception("[sales] record_sale failed")
        raise api_error(
            INTERNAL_ERROR,
            f"Failed to record sale: {e}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    await db.refresh(sale)
    logger.info(
        "Sale %s recorded for product %s (qty=%s, remaining=%s)",
        sale.id, item.id, sale.quantity, item.quantity,
    )
    return SaleRead(**sale.to_schema)
