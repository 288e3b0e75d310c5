from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import firewood_ops.models  # noqa: F401
from firewood_ops.config import Settings
from firewood_ops.db import get_db
from firewood_ops.main import create_app
from firewood_ops.models.base import Base
from firewood_ops.models.customer import Customer, RecurringOrder


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        sync_api_token="",
        auto_create_tables=False,
        sync_timeout_seconds=5.0,
    )


@pytest.fixture
async def client(session_factory, settings):
    app = create_app(settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_customer(db):
    async def _make(name="Acme Lodge", address="12 Birch Rd", phone="555-0100", **kwargs):
        customer = Customer(name=name, address=address, phone=phone, **kwargs)
        db.add(customer)
        await db.commit()
        return customer
    return _make


@pytest.fixture
def make_order(db):
    async def _make(customer, frequency="weekly", preferred_day="monday",
                    created_at=datetime(2024, 1, 1, 9, 30), active_status=True, items="2 cords oak"):
        order = RecurringOrder(
            customer=customer,
            frequency=frequency,
            preferred_day=preferred_day,
            created_at=created_at,
            active_status=active_status,
            items=items,
        )
        db.add(order)
        await db.commit()
        return order
    return _make
