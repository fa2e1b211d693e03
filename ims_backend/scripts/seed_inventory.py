"""
Seed a few inventory items (skips names that already exist).

Run locally:
  python -m ims_backend.scripts.seed_inventory

It uses the same DATABASE_* env vars as the backend (dotenv supported by core.config).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from sqlalchemy import select

from ims_backend.db.database import async_session_maker, create_db_and_tables
from ims_backend.db.inventory import InventoryItem


@dataclass(frozen=True)
class SeedItem:
    product_name: str
    quantity: int
    price: float
    cost: float
    supplier_id: int = 1


SEED_ITEMS: list[SeedItem] = [
    SeedItem(product_name="Widget", quantity=10, price=5.00, cost=2.50),
    SeedItem(product_name="Gadget", quantity=25, price=12.00, cost=7.25),
    SeedItem(product_name="Sprocket", quantity=40, price=1.75, cost=0.60, supplier_id=2),
]


async def main() -> None:
    await create_db_and_tables()
    async with async_session_maker() as db:
        res = await db.execute(select(InventoryItem.product_name))
        existing = {name for name in res.scalars().all()}

        created = 0
        for seed in SEED_ITEMS:
            if seed.product_name in existing:
                continue
            db.add(
                InventoryItem(
                    product_name=seed.product_name,
                    quantity=seed.quantity,
                    price=seed.price,
                    cost=seed.cost,
                    supplier_id=seed.supplier_id,
                )
            )
            created += 1

        await db.commit()
        print(f"Seeded inventory items: {created} (skipped existing: {len(SEED_ITEMS) - created})")


if __name__ == "__main__":
    asyncio.run(main())
