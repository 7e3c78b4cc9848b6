"""
Rental Service — shared test fixtures

Each test gets its own SQLite database file (aiosqlite) so sessions use
separate connections, like the production pool. Settings are forced through
the environment before anything from rental_service is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["METRICS_ENABLED"] = "false"
os.environ["IDEMPOTENCY_ENABLED"] = "false"
os.environ["NOTIFICATION_HUB_URL"] = ""
os.environ["ADMIN_SESSION_TOKEN"] = "test-admin-token"
os.environ["CONFLICT_RETRY_BASE_DELAY_MS"] = "1"
os.environ["CONFLICT_RETRY_JITTER_MS"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from rental_service.db.database import Base, get_db
from rental_service.models.catalog import Product, ProductCategory
from rental_service.models.inventory import InventoryDate
from rental_service.models.rental import Rental
from rental_service.services.availability import AvailabilityResolver
from rental_service.services.notifications import Customer, NotificationGateway, get_notifier
from rental_service.services.reservations import ReservationService

ADMIN_HEADERS = {"X-Admin-Session": "test-admin-token"}


class RecordingNotifier(NotificationGateway):
    def __init__(self, fail: bool = False):
        self.events: list[dict] = []
        self.fail = fail

    async def publish(self, payload: dict) -> None:
        if self.fail:
            raise RuntimeError("notification hub down")
        self.events.append(payload)


class Line:
    """Minimal cart line; anything with product_id and quantity will do."""

    def __init__(self, product_id: int, quantity: int):
        self.product_id = product_id
        self.quantity = quantity


CUSTOMER = Customer(name="Ada Lovelace", email="ada@example.com", phone_number="+15555550100")


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rentals.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def products(session_factory) -> dict[str, Product]:
    """Three products, 100 units each, one per category."""
    async with session_factory() as session:
        catalog = {
            "plates": Product(name="Dinner Plates", description="Ceramic", category=ProductCategory.PLATES,
                              total_stock=100, co2_saved=0.05, water_saved=0.5),
            "glasses": Product(name="Glasses", description="Glass", category=ProductCategory.GLASSES,
                               total_stock=100, co2_saved=0.05, water_saved=0.5),
            "cutlery": Product(name="Cutlery Set", description="Steel", category=ProductCategory.CUTLERY,
                               total_stock=100, co2_saved=0.1, water_saved=1.0),
        }
        session.add_all(catalog.values())
        await session.commit()
        return catalog


@pytest.fixture
def reserve(session_factory, notifier):
    """Run one reservation in its own session, like one request."""

    async def _reserve(lines, start: date, end: date, customer: Customer = CUSTOMER):
        async with session_factory() as session:
            return await ReservationService(session, notifier=notifier).reserve(lines, start, end, customer)

    return _reserve


@pytest.fixture
def availability(session_factory):

    async def _availability(product_id: int, start: date, end: date) -> int:
        async with session_factory() as session:
            return await AvailabilityResolver(session).availability(product_id, start, end)

    return _availability


@pytest.fixture
def ledger_snapshot(session_factory):
    """Every ledger row as {(date, product_id): available_stock}."""

    async def _snapshot() -> dict:
        async with session_factory() as session:
            result = await session.execute(
                select(InventoryDate.date, InventoryDate.product_id, InventoryDate.available_stock)
            )
            return {(row.date, row.product_id): row.available_stock for row in result}

    return _snapshot


@pytest.fixture
def rental_count(session_factory):

    async def _count() -> int:
        async with session_factory() as session:
            return await session.scalar(select(func.count(Rental.id)))

    return _count


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    from rental_service.main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
