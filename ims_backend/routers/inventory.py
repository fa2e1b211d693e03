import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from ims_backend.core.auth import current_active_user
from ims_backend.core.errors import (
    CHECK_VIOLATION,
    INTERNAL_ERROR,
    NO_DATA_FOUND,
    UNIQUE_VIOLATION,
    api_error,
    db_error,
)
from ims_backend.core.query import order_clauses, parse_columns, project
from ims_backend.db.database import get_async_session
from ims_backend.db.inventory import InventoryItem as InventoryItemModel
from ims_backend.db.users import User
from ims_backend.schemas.inventory import (
    InventoryAdjust,
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

INVENTORY_FIELDS = ("id", "product_name", "quantity", "price", "cost", "supplier_id")

INVENTORY_MESSAGES = {
    UNIQUE_VIOLATION: "An item with this name already exists. Please use a unique name.",
    CHECK_VIOLATION: "Quantity cannot be negative",
}


async def _get_item_or_404(db: AsyncSession, item_id: int) -> InventoryItemModel:
    res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id == item_id))
    item = res.scalar_one_or_none()
    if not item:
        raise api_error(NO_DATA_FOUND, f"Inventory item {item_id} not found")
    return item


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except DBAPIError as e:
        await db.rollback()
        raise db_error(e, INVENTORY_MESSAGES)
    except Exception as e:
        await db.rollback()
        logger.exception("[inventory] %s failed", action)
        raise api_error(
            INTERNAL_ERROR,
            f"Failed to {action}: {e}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


@router.get("/", response_model=List[Dict])
async def list_inventory(
    order: str = Query("id"),
    ascending: bool = True,
    columns: Optional[str] = None,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    List inventory items.

    - order/ascending choose the sort column (ties are broken by id).
    - columns is a comma separated subset of the item fields.
    """
    selected = parse_columns(columns, INVENTORY_FIELDS)
    stmt = select(InventoryItemModel).order_by(*order_clauses(InventoryItemModel, order, ascending))
    res = await db.execute(stmt)
    return [project(item.to_schema, selected) for item in res.scalars().all()]


@router.get("/{item_id}", response_model=InventoryItemRead)
async def get_inventory_item(
    item_id: int,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await _get_item_or_404(db, item_id)
    return InventoryItemRead(**item.to_schema)


@router.post("/", response_model=InventoryItemRead, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = InventoryItemModel(**payload.model_dump())
    db.add(item)
    await _commit(db, "add item")
    await db.refresh(item)
    logger.info("Inventory item %s created (%s)", item.id, item.product_name)
    return InventoryItemRead(**item.to_schema)


@router.patch("/{item_id}", response_model=InventoryItemRead)
async def update_inventory_item(
    item_id: int,
    payload: InventoryItemUpdate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await _get_item_or_404(db, item_id)

    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        if value is None:
            # every inventory column is NOT NULL
            continue
        setattr(item, field, value)

    await _commit(db, "update item")
    await db.refresh(item)
    return InventoryItemRead(**item.to_schema)


@router.post("/{item_id}/adjust", response_model=InventoryItemRead)
async def adjust_inventory_item(
    item_id: int,
    payload: InventoryAdjust,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Relative stock change computed by the database, never below zero."""
    column = getattr(InventoryItemModel, payload.field)
    res = await db.execute(
        update(InventoryItemModel)
        .where(InventoryItemModel.id == item_id)
        .where(column + payload.delta >= 0)
        .values({payload.field: column + payload.delta})
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        await db.rollback()
        await _get_item_or_404(db, item_id)
        raise api_error(CHECK_VIOLATION, "Not enough stock for this change")

    await _commit(db, "adjust item")
    item = await _get_item_or_404(db, item_id)
    await db.refresh(item)
    return InventoryItemRead(**item.to_schema)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(
    item_id: int,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await _get_item_or_404(db, item_id)
    await db.delete(item)
    await _commit(db, "delete item")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
