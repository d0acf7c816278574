"""Catalog lookup: a read-only snapshot of priced entities for one calculation."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import UpstreamUnavailable
from app.models.catalog import Guide, Hotel, Season, SpecialServiceRate, Tour, Vehicle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    tours: dict[int, Tour] = field(default_factory=dict)
    vehicles: dict[int, Vehicle] = field(default_factory=dict)
    hotels: dict[int, Hotel] = field(default_factory=dict)
    guides: dict[int, Guide] = field(default_factory=dict)
    seasons: tuple[Season, ...] = ()
    service_rates: tuple[SpecialServiceRate, ...] = ()

    @classmethod
    def build(
        cls,
        tours: Iterable[Tour] = (),
        vehicles: Iterable[Vehicle] = (),
        hotels: Iterable[Hotel] = (),
        guides: Iterable[Guide] = (),
        seasons: Iterable[Season] = (),
        service_rates: Iterable[SpecialServiceRate] = (),
    ) -> "CatalogSnapshot":
        return cls(
            tours={t.id: t for t in tours},
            vehicles={v.id: v for v in vehicles},
            hotels={h.id: h for h in hotels},
            guides={g.id: g for g in guides},
            seasons=tuple(sorted(seasons, key=lambda s: s.id or 0)),
            service_rates=tuple(
                sorted(service_rates, key=lambda r: (r.sort_order or 0, r.code))
            ),
        )

    def get_tour(self, tour_id: int) -> Tour | None:
        return self.tours.get(tour_id)

    def get_vehicle(self, vehicle_id: int) -> Vehicle | None:
        return self.vehicles.get(vehicle_id)

    def get_hotel(self, hotel_id: int) -> Hotel | None:
        return self.hotels.get(hotel_id)

    def get_guide(self, guide_id: int) -> Guide | None:
        return self.guides.get(guide_id)

    def season_for_month(self, month: int) -> Season | None:
        """First season (by id) whose month range covers ``month``."""
        for season in self.seasons:
            if season.covers_month(month):
                return season
        return None

    def active_service_rates(self) -> dict[str, SpecialServiceRate]:
        return {r.code: r for r in self.service_rates if r.is_active is not False}


class CatalogService:
    """Loads catalog snapshots from the database."""

    async def load_snapshot(self, db: AsyncSession) -> CatalogSnapshot:
        try:
            tours = (await db.execute(select(Tour))).scalars().all()
            vehicles = (await db.execute(select(Vehicle))).scalars().all()
            hotels = (await db.execute(select(Hotel))).scalars().all()
            guides = (await db.execute(select(Guide))).scalars().all()
            seasons = (await db.execute(select(Season))).scalars().all()
            rates = (await db.execute(select(SpecialServiceRate))).scalars().all()
        except OperationalError as e:
            logger.error(f"Catalog load failed: {e}")
            raise UpstreamUnavailable("Tour catalog is temporarily unavailable, please retry") from e

        return CatalogSnapshot.build(
            tours=tours,
            vehicles=vehicles,
            hotels=hotels,
            guides=guides,
            seasons=seasons,
            service_rates=rates,
        )


catalog_service = CatalogService()
