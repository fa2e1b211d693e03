import os

# Must be set before ims_backend.core.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTH_SECRET", "test-secret")

import uuid
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ims_backend.core.auth import current_active_user
from ims_backend.db.database import Base, get_async_session, load_models
from ims_backend import main
from ims_backend.main import app
from ims_client.inventory import InventoryView
from ims_client.sales import SalesWorkflow
from ims_client.store import RecordStoreClient

BASE_URL = "http://testserver"


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "ims.db"
    load_models()
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


@pytest.fixture
def api(db_path, monkeypatch):
    async def _tables_exist():
        pass

    # tables live in db_path; the app must not touch its own engine
    monkeypatch.setattr(main, "create_db_and_tables", _tables_exist)
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)

    async def _get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _get_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def clerk():
    return SimpleNamespace(
        id=uuid.uuid4(),
        email="clerk@example.com",
        is_active=True,
        is_superuser=False,
        is_verified=True,
    )


@pytest.fixture
def http(api, clerk):
    """TestClient with an authenticated user."""
    api.dependency_overrides[current_active_user] = lambda: clerk
    with TestClient(api, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def anonymous_http(api):
    """TestClient going through the real fastapi-users authentication."""
    with TestClient(api, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def store(http):
    return RecordStoreClient(base_url=BASE_URL, session=http)


@pytest.fixture
def inventory(store):
    return InventoryView(store)


@pytest.fixture
def workflow(store, inventory):
    return SalesWorkflow(store, inventory)


@pytest.fixture
def widget(store):
    return store.insert(
        "inventory",
        {"product_name": "Widget", "quantity": 10, "price": 5.00, "cost": 2.50, "supplier_id": 1},
    )
