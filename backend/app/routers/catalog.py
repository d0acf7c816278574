"""Catalog router: public reads and admin CRUD for tours, vehicles, hotels, guides, seasons."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base, get_db
from app.dependencies import require_admin
from app.models.catalog import Guide, Hotel, Season, SpecialServiceRate, Tour, Vehicle
from app.models.user import User
from app.schemas.catalog import (
    GuideCreate,
    GuideResponse,
    GuideUpdate,
    HotelCreate,
    HotelResponse,
    HotelUpdate,
    SeasonCreate,
    SeasonResponse,
    SeasonUpdate,
    SpecialServiceRateResponse,
    SpecialServiceRateUpsert,
    TourCreate,
    TourResponse,
    TourUpdate,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from app.services.catalog_service import CatalogSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()


async def _commit(db: AsyncSession, label: str) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail=f"{label} conflicts with an existing entry")


def _register_crud(
    path: str,
    model: type[Base],
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
    label: str,
) -> None:
    """Attach list/get/create/update/delete endpoints for one catalog table."""

    async def list_items(db: AsyncSession = Depends(get_db)):
        result = await db.execute(select(model).order_by(model.id))
        return result.scalars().all()

    async def get_item(item_id: int, db: AsyncSession = Depends(get_db)):
        item = await db.get(model, item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return item

    async def create_item(
        req: create_schema,
        db: AsyncSession = Depends(get_db),
        admin: User = Depends(require_admin),
    ):
        item = model(**req.model_dump())
        db.add(item)
        await _commit(db, label)
        await db.refresh(item)
        logger.info(f"{admin.username} created {label.lower()} {item.id}")
        return item

    async def update_item(
        item_id: int,
        req: update_schema,
        db: AsyncSession = Depends(get_db),
        admin: User = Depends(require_admin),
    ):
        item = await db.get(model, item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        for key, value in req.model_dump(exclude_unset=True).items():
            setattr(item, key, value)
        await _commit(db, label)
        await db.refresh(item)
        logger.info(f"{admin.username} updated {label.lower()} {item_id}")
        return item

    async def delete_item(
        item_id: int,
        db: AsyncSession = Depends(get_db),
        admin: User = Depends(require_admin),
    ):
        item = await db.get(model, item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        await db.delete(item)
        await db.commit()
        logger.info(f"{admin.username} deleted {label.lower()} {item_id}")
        return {"message": f"{label} deleted successfully"}

    resource = path.strip("/")
    item = label.lower()
    router.add_api_route(
        path, list_items, methods=["GET"], response_model=list[response_schema],
        name=f"list_{resource}", operation_id=f"list_{resource}",
    )
    router.add_api_route(
        f"{path}/{{item_id}}", get_item, methods=["GET"], response_model=response_schema,
        name=f"get_{item}", operation_id=f"get_{item}",
    )
    router.add_api_route(
        path, create_item, methods=["POST"], response_model=response_schema, status_code=201,
        name=f"create_{item}", operation_id=f"create_{item}",
    )
    router.add_api_route(
        f"{path}/{{item_id}}", update_item, methods=["PUT"], response_model=response_schema,
        name=f"update_{item}", operation_id=f"update_{item}",
    )
    router.add_api_route(
        f"{path}/{{item_id}}", delete_item, methods=["DELETE"],
        name=f"delete_{item}", operation_id=f"delete_{item}",
    )


@router.get("/seasons/month/{month}", response_model=SeasonResponse)
async def get_season_by_month(month: int, db: AsyncSession = Depends(get_db)):
    """Season whose month range covers ``month`` (ranges may wrap past December)."""
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Invalid month. Must be between 1 and 12.")
    seasons = (await db.execute(select(Season))).scalars().all()
    season = CatalogSnapshot.build(seasons=seasons).season_for_month(month)
    if season is None:
        raise HTTPException(status_code=404, detail="No season found for this month")
    return season


_register_crud("/tours", Tour, TourCreate, TourUpdate, TourResponse, "Tour")
_register_crud("/vehicles", Vehicle, VehicleCreate, VehicleUpdate, VehicleResponse, "Vehicle")
_register_crud("/hotels", Hotel, HotelCreate, HotelUpdate, HotelResponse, "Hotel")
_register_crud("/guides", Guide, GuideCreate, GuideUpdate, GuideResponse, "Guide")
_register_crud("/seasons", Season, SeasonCreate, SeasonUpdate, SeasonResponse, "Season")


# Special-service surcharges

@router.get("/special-services", response_model=list[SpecialServiceRateResponse])
async def list_special_services(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(SpecialServiceRate).order_by(SpecialServiceRate.sort_order, SpecialServiceRate.code)
    )
    return result.scalars().all()


@router.put("/special-services/{code}", response_model=SpecialServiceRateResponse)
async def upsert_special_service(
    code: str,
    req: SpecialServiceRateUpsert,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Create or update the surcharge for a toggle code. New toggles need no code change."""
    result = await db.execute(select(SpecialServiceRate).where(SpecialServiceRate.code == code))
    rate = result.scalar_one_or_none()
    if rate is None:
        rate = SpecialServiceRate(code=code)
        db.add(rate)
    for key, value in req.model_dump().items():
        setattr(rate, key, value)
    await _commit(db, "Special service")
    await db.refresh(rate)
    logger.info(f"{admin.username} set surcharge for {code} to {rate.surcharge}")
    return rate
