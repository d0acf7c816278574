from pydantic import Field, model_validator

from app.schemas.base import CamelModel


# Tours

class TourCreate(CamelModel):
    name: str
    code: str
    location: str
    description: str = ""
    duration_days: int = Field(ge=1)
    base_price: float = Field(ge=0)
    image_url: str | None = None


class TourUpdate(CamelModel):
    name: str | None = None
    code: str | None = None
    location: str | None = None
    description: str | None = None
    duration_days: int | None = Field(default=None, ge=1)
    base_price: float | None = Field(default=None, ge=0)
    image_url: str | None = None


class TourResponse(TourCreate):
    id: int


# Vehicles

class VehicleCreate(CamelModel):
    name: str
    seats: int = Field(ge=1)
    luggage_capacity: int = Field(default=0, ge=0)
    price_per_day: float = Field(ge=0)
    driver_cost_per_day: float = Field(ge=0)


class VehicleUpdate(CamelModel):
    name: str | None = None
    seats: int | None = Field(default=None, ge=1)
    luggage_capacity: int | None = Field(default=None, ge=0)
    price_per_day: float | None = Field(default=None, ge=0)
    driver_cost_per_day: float | None = Field(default=None, ge=0)


class VehicleResponse(VehicleCreate):
    id: int


# Hotels

class HotelCreate(CamelModel):
    name: str
    location: str
    stars: int = Field(ge=1, le=5)
    single_room_price: float = Field(ge=0)
    double_room_price: float = Field(ge=0)
    triple_room_price: float = Field(ge=0)
    breakfast_price: float = Field(ge=0)
    lunch_price: float = Field(default=0, ge=0)
    dinner_price: float = Field(default=0, ge=0)
    image_url: str | None = None


class HotelUpdate(CamelModel):
    name: str | None = None
    location: str | None = None
    stars: int | None = Field(default=None, ge=1, le=5)
    single_room_price: float | None = Field(default=None, ge=0)
    double_room_price: float | None = Field(default=None, ge=0)
    triple_room_price: float | None = Field(default=None, ge=0)
    breakfast_price: float | None = Field(default=None, ge=0)
    lunch_price: float | None = Field(default=None, ge=0)
    dinner_price: float | None = Field(default=None, ge=0)
    image_url: str | None = None


class HotelResponse(HotelCreate):
    id: int


# Guides

class GuideCreate(CamelModel):
    name: str
    languages: list[str]
    price_per_day: float = Field(ge=0)
    experience: int = Field(default=0, ge=0)
    has_international_license: bool = False
    personality: str | None = None
    gender: str | None = None
    age: int = Field(default=0, ge=0)


class GuideUpdate(CamelModel):
    name: str | None = None
    languages: list[str] | None = None
    price_per_day: float | None = Field(default=None, ge=0)
    experience: int | None = Field(default=None, ge=0)
    has_international_license: bool | None = None
    personality: str | None = None
    gender: str | None = None
    age: int | None = Field(default=None, ge=0)


class GuideResponse(GuideCreate):
    id: int


# Seasons

class SeasonCreate(CamelModel):
    name: str
    start_month: int = Field(ge=1, le=12)
    end_month: int = Field(ge=1, le=12)
    description: str = ""
    price_multiplier: float = Field(default=1.0, gt=0)


class SeasonUpdate(CamelModel):
    name: str | None = None
    start_month: int | None = Field(default=None, ge=1, le=12)
    end_month: int | None = Field(default=None, ge=1, le=12)
    description: str | None = None
    price_multiplier: float | None = Field(default=None, gt=0)


class SeasonResponse(SeasonCreate):
    id: int


# Special services

class SpecialServiceRateUpsert(CamelModel):
    label: str
    surcharge: float = Field(ge=0)
    is_active: bool = True
    sort_order: int = 0

    @model_validator(mode="after")
    def _label_not_blank(self):
        if not self.label.strip():
            raise ValueError("label must not be blank")
        return self


class SpecialServiceRateResponse(SpecialServiceRateUpsert):
    id: int
    code: str
