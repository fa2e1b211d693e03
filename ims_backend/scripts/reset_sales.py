"""
Delete ALL sales from the database. Inventory quantities are left as they are.

Run locally:
  python -m ims_backend.scripts.reset_sales
"""

from __future__ import annotations

import asyncio

from sqlalchemy import delete

from ims_backend.db.database import async_session_maker
from ims_backend.db.sale import Sale


async def main() -> None:
    async with async_session_maker() as db:
        res = await db.execute(delete(Sale))
        await db.commit()

        sales_n = int(getattr(res, "rowcount", 0) or 0)
        print(f"Deleted sales: {sales_n}")


if __name__ == "__main__":
    asyncio.run(main())
