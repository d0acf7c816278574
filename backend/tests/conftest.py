import os

# Settings are read at import time; point them at throwaway backends first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_URL"] = "redis://localhost:1/0"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["AUTO_SEED"] = "false"
os.environ["SECRET_KEY"] = "test-secret"

from datetime import date
from decimal import Decimal

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models.catalog import Guide, Hotel, Season, SpecialServiceRate, Tour, Vehicle
from app.models.user import User
from app.routers.auth import pwd_context
from app.services.booking_wizard import wizard_registry
from app.services.catalog_service import CatalogSnapshot
from app.services.currency_converter import RateTable, rate_cache

TEST_RATES = {"JPY": 1.0, "USD": 0.0067, "VND": 161.83, "CNY": 0.048, "KRW": 9.05, "EUR": 0.0062}

_fast_hash = pwd_context.copy(bcrypt__rounds=4)


# ── Catalog entities (JPY) ─────────────────────────────────────────────────────

def make_tour(**overrides) -> Tour:
    data = {
        "id": 1, "name": "Kyoto Classic", "code": "KYO-01", "location": "Kyoto",
        "description": "", "duration_days": 2, "base_price": Decimal("50000"),
    }
    data.update(overrides)
    return Tour(**data)


def make_vehicle(**overrides) -> Vehicle:
    data = {
        "id": 1, "name": "Small Van", "seats": 5, "luggage_capacity": 4,
        "price_per_day": Decimal("10000"), "driver_cost_per_day": Decimal("5000"),
    }
    data.update(overrides)
    return Vehicle(**data)


def make_hotel(**overrides) -> Hotel:
    data = {
        "id": 1, "name": "Kyoto Garden Hotel", "location": "Kyoto", "stars": 4,
        "single_room_price": Decimal("15000"), "double_room_price": Decimal("22000"),
        "triple_room_price": Decimal("30000"), "breakfast_price": Decimal("2000"),
        "lunch_price": Decimal("0"), "dinner_price": Decimal("4500"),
    }
    data.update(overrides)
    return Hotel(**data)


def make_guide(**overrides) -> Guide:
    data = {
        "id": 1, "name": "Tanaka Yuki", "languages": ["english", "japanese"],
        "price_per_day": Decimal("20000"), "experience": 8,
        "has_international_license": True, "age": 34,
    }
    data.update(overrides)
    return Guide(**data)


def make_seasons() -> list[Season]:
    return [
        Season(id=1, name="Cherry Blossom", start_month=3, end_month=5,
               description="", price_multiplier=Decimal("1.3")),
        Season(id=2, name="Autumn Foliage", start_month=10, end_month=11,
               description="", price_multiplier=Decimal("1.2")),
        Season(id=3, name="Winter Holidays", start_month=12, end_month=1,
               description="", price_multiplier=Decimal("1.15")),
    ]


def make_service_rates() -> list[SpecialServiceRate]:
    return [
        SpecialServiceRate(id=1, code="geishaShow", label="Geisha show",
                           surcharge=Decimal("15000"), is_active=True, sort_order=1),
        SpecialServiceRate(id=2, code="teaCeremony", label="Tea ceremony",
                           surcharge=Decimal("5000"), is_active=True, sort_order=3),
        SpecialServiceRate(id=3, code="airportTransfer", label="Airport transfer",
                           surcharge=Decimal("3000"), is_active=True, sort_order=8),
        SpecialServiceRate(id=4, code="sumoShow", label="Sumo show",
                           surcharge=Decimal("10000"), is_active=False, sort_order=5),
    ]


# Autumn (x1.2), two touring days
BASE_CONFIG = {
    "tourId": 1,
    "vehicleId": 1,
    "startDate": date(2025, 10, 1).isoformat(),
    "endDate": date(2025, 10, 3).isoformat(),
    "participants": 2,
}


@pytest.fixture
def catalog() -> CatalogSnapshot:
    return CatalogSnapshot.build(
        tours=[make_tour()],
        vehicles=[make_vehicle()],
        hotels=[make_hotel()],
        guides=[make_guide()],
        seasons=make_seasons(),
        service_rates=make_service_rates(),
    )


@pytest.fixture
def rates() -> RateTable:
    return RateTable(rates=TEST_RATES, source="live")


# ── Database + HTTP client ─────────────────────────────────────────────────────

@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db:
        db.add_all([
            User(id=1, username="admin", password_hash=_fast_hash.hash("admin-password"), role="admin"),
            User(id=2, username="alice", password_hash=_fast_hash.hash("alice-password"), role="user"),
            User(id=3, username="bob", password_hash=_fast_hash.hash("bob-password"), role="user"),
            User(id=4, username="ghost", password_hash=_fast_hash.hash("ghost-password"),
                 role="user", is_active=False),
        ])
        db.add_all([make_tour(), make_vehicle(), make_hotel(), make_guide()])
        db.add_all(make_seasons())
        db.add_all(make_service_rates())
        await db.commit()

    yield factory
    await engine.dispose()


@pytest.fixture(autouse=True)
def fresh_state():
    """Deterministic rates and an empty wizard registry for every test."""
    previous = rate_cache.table
    rate_cache.replace(RateTable(rates=TEST_RATES, source="live"))
    for client_id in list(wizard_registry._wizards):
        wizard_registry.discard(client_id)
    yield
    if previous is not None:
        rate_cache.replace(previous)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def login(client: httpx.AsyncClient, username: str, client_id: str | None = None) -> dict:
    headers = {"X-Client-Id": client_id} if client_id else {}
    resp = await client.post(
        "/api/auth/login",
        json={"username": username, "password": f"{username}-password"},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
async def admin_headers(client):
    return await login(client, "admin")


@pytest.fixture
async def user_headers(client):
    return await login(client, "alice")
