from datetime import date
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator, model_validator

from app.data.currency import Currency
from app.schemas.base import CamelModel

RoomType = Literal["single", "double", "triple"]


class SpecialServiceSelection(CamelModel):
    """Boolean toggles keyed by service code, plus free-text notes.

    Codes are not fixed here: any extra key is a toggle, and the surcharge for
    it is looked up in the catalog at pricing time.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    notes: str | None = None

    @model_validator(mode="after")
    def _toggles_are_boolean(self):
        for code, value in (self.model_extra or {}).items():
            if not isinstance(value, bool):
                raise ValueError(f"Special service '{code}' must be true or false")
        return self

    @property
    def enabled(self) -> frozenset[str]:
        return frozenset(code for code, on in (self.model_extra or {}).items() if on)


class BookingConfiguration(CamelModel):
    """One quote request. Range checks live in the pricing engine."""

    model_config = ConfigDict(frozen=True)

    tour_id: int
    vehicle_id: int
    start_date: date
    end_date: date
    vehicle_count: int = 1
    participants: int
    hotel_id: int | None = None
    room_type: RoomType | None = None
    single_room_count: int = Field(default=0, ge=0)
    double_room_count: int = Field(default=0, ge=0)
    triple_room_count: int = Field(default=0, ge=0)
    staying_nights: int | None = None
    include_breakfast: bool = False
    include_lunch: bool = False
    include_dinner: bool = False
    include_guide: bool = False
    guide_id: int | None = None
    currency: Currency = "JPY"
    special_services: SpecialServiceSelection = Field(default_factory=SpecialServiceSelection)

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, v: Any):
        return v.upper() if isinstance(v, str) else v

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    @property
    def room_counts(self) -> dict[str, int]:
        return {
            "single": self.single_room_count,
            "double": self.double_room_count,
            "triple": self.triple_room_count,
        }

    @property
    def has_room_selection(self) -> bool:
        return self.room_type is not None or any(self.room_counts.values())


class BookingDraft(CamelModel):
    """In-progress wizard form data; every field may still be unset."""

    model_config = ConfigDict(validate_assignment=True)

    tour_id: int = 0
    vehicle_id: int = 0
    start_date: date | None = None
    end_date: date | None = None
    vehicle_count: int = 1
    participants: int = 1
    hotel_id: int | None = None
    room_type: RoomType | None = None
    single_room_count: int = Field(default=0, ge=0)
    double_room_count: int = Field(default=0, ge=0)
    triple_room_count: int = Field(default=0, ge=0)
    staying_nights: int | None = None
    include_breakfast: bool = False
    include_lunch: bool = False
    include_dinner: bool = False
    include_guide: bool = False
    guide_id: int | None = None
    currency: Currency = "JPY"
    special_services: SpecialServiceSelection = Field(default_factory=SpecialServiceSelection)

    @field_validator("start_date", "end_date", "hotel_id", "room_type", "guide_id", mode="before")
    @classmethod
    def _blank_is_unset(cls, v: Any):
        return None if v == "" else v

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, v: Any):
        return v.upper() if isinstance(v, str) else v


class LineItem(CamelModel):
    code: str
    label: str
    unit_price: float
    quantity: int
    subtotal: float


class SeasonApplied(CamelModel):
    name: str
    multiplier: float


class TourSummary(CamelModel):
    id: int
    code: str
    name: str
    location: str


class CalculationResult(CamelModel):
    line_items: list[LineItem]
    total: float
    currency: Currency
    raw_total_jpy: float
    exchange_rate: float
    rates_source: str
    duration_days: int
    nights: int
    season: SeasonApplied | None = None
    tour: TourSummary
    notes: str | None = None
