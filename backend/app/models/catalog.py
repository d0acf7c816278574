"""Catalog models: admin-managed priced entities. All prices are in JPY."""

from decimal import Decimal

from sqlalchemy import JSON, Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Tour(Base):
    __tablename__ = "tours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500))


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    seats: Mapped[int] = mapped_column(Integer, nullable=False)
    luggage_capacity: Mapped[int] = mapped_column(Integer, default=0)  # suitcases
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    driver_cost_per_day: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


class Hotel(Base):
    __tablename__ = "hotels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    single_room_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    double_room_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    triple_room_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    breakfast_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    lunch_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    dinner_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    image_url: Mapped[str | None] = mapped_column(String(500))


class Guide(Base):
    __tablename__ = "guides"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    languages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    experience: Mapped[int] = mapped_column(Integer, default=0)  # years
    has_international_license: Mapped[bool] = mapped_column(Boolean, default=False)
    personality: Mapped[str | None] = mapped_column(String(255))
    gender: Mapped[str | None] = mapped_column(String(20))
    age: Mapped[int] = mapped_column(Integer, default=0)


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_month: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-12
    end_month: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-12, may wrap past December
    description: Mapped[str] = mapped_column(Text, default="")
    price_multiplier: Mapped[Decimal] = mapped_column(Numeric(5, 3), nullable=False, default=1)

    def covers_month(self, month: int) -> bool:
        if self.start_month <= self.end_month:
            return self.start_month <= month <= self.end_month
        return month >= self.start_month or month <= self.end_month


class SpecialServiceRate(Base):
    """Fixed surcharge for an optional add-on, keyed by the toggle code the client sends."""

    __tablename__ = "special_service_rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    surcharge: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
