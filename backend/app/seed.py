"""Seed script for the TourPricer development database."""

import asyncio

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from app.database import Base, async_session_factory, engine
from app.models.catalog import Guide, Hotel, Season, SpecialServiceRate, Tour, Vehicle
from app.models.user import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# ── Users ──────────────────────────────────────────────────────────────────────

USERS = [
    {"username": "admin", "password": "change-me-admin", "role": "admin"},
    {"username": "customer", "password": "change-me-customer", "role": "user"},
]

# ── Catalog ────────────────────────────────────────────────────────────────────

SEASONS = [
    {
        "name": "Cherry Blossom Season",
        "start_month": 3,
        "end_month": 5,
        "description": "Cherry blossom season with higher accommodation rates.",
        "price_multiplier": 1.3,
    },
    {
        "name": "Autumn Foliage",
        "start_month": 10,
        "end_month": 11,
        "description": "Autumn colours throughout Japan, moderately higher rates.",
        "price_multiplier": 1.2,
    },
    {
        "name": "Winter Holidays",
        "start_month": 12,
        "end_month": 1,
        "description": "Year-end and New Year holidays.",
        "price_multiplier": 1.15,
    },
]

VEHICLES = [
    {"name": "Small Van (5 seats)", "seats": 5, "luggage_capacity": 4, "price_per_day": 15000, "driver_cost_per_day": 5000},
    {"name": "Medium Van (10 seats)", "seats": 10, "luggage_capacity": 8, "price_per_day": 25000, "driver_cost_per_day": 5000},
    {"name": "Large Bus (25 seats)", "seats": 25, "luggage_capacity": 25, "price_per_day": 45000, "driver_cost_per_day": 8000},
]

HOTELS = [
    {
        "name": "Shinjuku Business Hotel", "location": "Tokyo", "stars": 3,
        "single_room_price": 9000, "double_room_price": 14000, "triple_room_price": 19000,
        "breakfast_price": 1200, "lunch_price": 0, "dinner_price": 0,
    },
    {
        "name": "Kyoto Garden Hotel", "location": "Kyoto", "stars": 4,
        "single_room_price": 15000, "double_room_price": 22000, "triple_room_price": 30000,
        "breakfast_price": 2000, "lunch_price": 2500, "dinner_price": 4500,
    },
    {
        "name": "Osaka Bay Grand", "location": "Osaka", "stars": 5,
        "single_room_price": 28000, "double_room_price": 38000, "triple_room_price": 50000,
        "breakfast_price": 3500, "lunch_price": 4000, "dinner_price": 8000,
    },
]

GUIDES = [
    {"name": "Tanaka Yuki", "languages": ["english", "japanese"], "price_per_day": 20000, "experience": 8, "has_international_license": True, "gender": "Female", "age": 34},
    {"name": "Nguyen Minh", "languages": ["vietnamese", "japanese", "english"], "price_per_day": 18000, "experience": 5, "has_international_license": False, "gender": "Male", "age": 29},
]

TOURS = [
    {"name": "Tokyo Highlights", "code": "TYO-01", "location": "Tokyo", "duration_days": 3, "base_price": 50000, "description": "Asakusa, Shibuya and Odaiba in three days."},
    {"name": "Golden Route", "code": "GLD-01", "location": "Tokyo - Kyoto - Osaka", "duration_days": 6, "base_price": 120000, "description": "The classic Tokyo to Osaka route with Mt. Fuji."},
    {"name": "Hokkaido Snow", "code": "HKD-01", "location": "Sapporo", "duration_days": 5, "base_price": 95000, "description": "Sapporo, Otaru and the Niseko slopes."},
]

SPECIAL_SERVICES = [
    {"code": "geishaShow", "label": "Geisha show", "surcharge": 15000, "sort_order": 1},
    {"code": "kimonoExperience", "label": "Kimono experience", "surcharge": 8000, "sort_order": 2},
    {"code": "teaCeremony", "label": "Tea ceremony", "surcharge": 5000, "sort_order": 3},
    {"code": "wagyuDinner", "label": "Wagyu dinner", "surcharge": 12000, "sort_order": 4},
    {"code": "sumoShow", "label": "Sumo show", "surcharge": 10000, "sort_order": 5},
    {"code": "disneylandTickets", "label": "Tokyo Disneyland tickets", "surcharge": 9400, "sort_order": 6},
    {"code": "universalStudioTickets", "label": "Universal Studios Japan tickets", "surcharge": 8900, "sort_order": 7},
    {"code": "airportTransfer", "label": "Airport transfer", "surcharge": 3000, "sort_order": 8},
]


async def seed(
    session_factory: async_sessionmaker = async_session_factory,
    bind: AsyncEngine = engine,
):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as db:
        # Check if already seeded
        result = await db.execute(select(User).limit(1))
        if result.scalar_one_or_none():
            print("Database already seeded. Skipping.")
            return

        # ── Users ──
        db.add_all([
            User(username=u["username"], password_hash=pwd_context.hash(u["password"]), role=u["role"])
            for u in USERS
        ])
        print(f"Created {len(USERS)} users")

        # ── Catalog ──
        db.add_all([Season(**s) for s in SEASONS])
        db.add_all([Vehicle(**v) for v in VEHICLES])
        db.add_all([Hotel(**h) for h in HOTELS])
        db.add_all([Guide(**g) for g in GUIDES])
        db.add_all([Tour(**t) for t in TOURS])
        db.add_all([SpecialServiceRate(**s) for s in SPECIAL_SERVICES])
        print(
            f"Created {len(TOURS)} tours, {len(VEHICLES)} vehicles, {len(HOTELS)} hotels, "
            f"{len(GUIDES)} guides, {len(SEASONS)} seasons, {len(SPECIAL_SERVICES)} special services"
        )

        await db.commit()
        print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
