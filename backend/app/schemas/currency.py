from datetime import datetime

from app.schemas.base import CamelModel


class RateTableResponse(CamelModel):
    base: str
    rates: dict[str, float]
    fetched_at: datetime
    source: str


class ConversionResponse(CamelModel):
    amount: float
    from_currency: str
    to_currency: str
    converted_amount: float
    formatted: str
