import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ims_backend.core.auth import auth_backend, fastapi_users
from ims_backend.core.config import settings
from ims_backend.db.database import create_db_and_tables
from ims_backend.routers.inventory import router as inventory_router
from ims_backend.routers.sales import router as sales_router
from ims_backend.schemas.users import UserCreate, UserRead, UserUpdate

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    yield


app = FastAPI(
    title="IMS Record Store API",
    description="Inventory and sales collections for the IMS client",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Authentication routes (fastapi-users)
app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"])
app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/users", tags=["users"])

# Collections
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
app.include_router(sales_router, prefix="/sales", tags=["sales"])


def run() -> None:
    uvicorn.run("ims_backend.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    uvicorn.run("ims_backend.main:app", host="0.0.0.0", port=8000, reload=True)
