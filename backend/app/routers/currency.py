from fastapi import APIRouter, Query

from app.data.currency import format_price, is_supported, normalize_currency
from app.exceptions import ValidationError
from app.schemas.currency import ConversionResponse, RateTableResponse
from app.services.currency_converter import convert, rate_cache

router = APIRouter()


@router.get("/rates", response_model=RateTableResponse)
async def get_rates():
    """Current JPY-based rate table (live, cached, or fallback)."""
    table = await rate_cache.get_table()
    return RateTableResponse(
        base=table.base,
        rates=dict(table.rates),
        fetched_at=table.fetched_at,
        source=table.source,
    )


@router.get("/convert", response_model=ConversionResponse)
async def convert_amount(
    amount: float,
    from_currency: str = Query(default="JPY", alias="from"),
    to_currency: str = Query(default="USD", alias="to"),
):
    from_currency = normalize_currency(from_currency)
    to_currency = normalize_currency(to_currency)
    for code in (from_currency, to_currency):
        if not is_supported(code):
            raise ValidationError(f"Unsupported currency: {code}")

    table = await rate_cache.get_table()
    converted = convert(amount, from_currency, to_currency, table)
    return ConversionResponse(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        converted_amount=converted,
        formatted=format_price(converted, to_currency),
    )
