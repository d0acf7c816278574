"""Tour price calculator endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.calculator import BookingConfiguration, CalculationResult
from app.services.catalog_service import catalog_service
from app.services.currency_converter import rate_cache
from app.services.pricing_engine import pricing_engine

logger = logging.getLogger(__name__)

router = APIRouter()


async def quote(config: BookingConfiguration, db: AsyncSession) -> CalculationResult:
    """Resolve the catalog and rates, then price ``config``."""
    catalog = await catalog_service.load_snapshot(db)
    rates = await rate_cache.get_table()
    return pricing_engine.calculate(config, catalog, rates)


@router.post("", response_model=CalculationResult)
async def calculate_price(
    config: BookingConfiguration,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await quote(config, db)
    logger.info(
        f"Quote for user {user.id}: tour {config.tour_id}, "
        f"{result.total:.2f} {result.currency}"
    )
    return result
