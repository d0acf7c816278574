"""Pricing engine: turns a booking configuration into an itemised quote.

``calculate`` is a pure function of its inputs: the configuration, a catalog
snapshot and a rate table. All catalog prices are JPY; line items are priced
in JPY first and converted to the requested currency at the end.
"""

import logging
import math
from dataclasses import dataclass

from app.data.currency import BASE_CURRENCY
from app.exceptions import ValidationError
from app.schemas.calculator import (
    BookingConfiguration,
    CalculationResult,
    LineItem,
    SeasonApplied,
    TourSummary,
)
from app.services.catalog_service import CatalogSnapshot
from app.services.currency_converter import RateTable, convert

logger = logging.getLogger(__name__)

# Guests per room
ROOM_OCCUPANCY: dict[str, int] = {"single": 1, "double": 2, "triple": 3}

# (meal, config flag, hotel price attribute)
MEALS: tuple[tuple[str, str, str], ...] = (
    ("breakfast", "include_breakfast", "breakfast_price"),
    ("lunch", "include_lunch", "lunch_price"),
    ("dinner", "include_dinner", "dinner_price"),
)


@dataclass(frozen=True)
class PricedItem:
    """A line item in the base currency, before conversion."""
    code: str
    label: str
    unit_price: float
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


def _price(value) -> float:
    return float(value) if value is not None else 0.0


class PricingEngine:
    """Computes itemised tour quotes."""

    def calculate(
        self,
        config: BookingConfiguration,
        catalog: CatalogSnapshot,
        rates: RateTable | None,
    ) -> CalculationResult:
        self._check_ranges(config)

        tour = catalog.get_tour(config.tour_id)
        if tour is None:
            raise ValidationError(f"Tour {config.tour_id} not found")
        vehicle = catalog.get_vehicle(config.vehicle_id)
        if vehicle is None:
            raise ValidationError(f"Vehicle {config.vehicle_id} not found")

        hotel = None
        if config.hotel_id is not None:
            hotel = catalog.get_hotel(config.hotel_id)
            if hotel is None:
                raise ValidationError(f"Hotel {config.hotel_id} not found")
            if not config.has_room_selection:
                raise ValidationError("Select a room type or room counts for the hotel")

        guide = None
        if config.include_guide:
            if config.guide_id is None:
                raise ValidationError("guideId is required when a guide is included")
            guide = catalog.get_guide(config.guide_id)
            if guide is None:
                raise ValidationError(f"Guide {config.guide_id} not found")

        duration_days = config.duration_days
        billable_days = max(duration_days, 1)
        nights = self._nights(config)

        # Stays crossing a season boundary are priced with the start date's season
        season = catalog.season_for_month(config.start_date.month)
        multiplier = _price(season.price_multiplier) if season else 1.0

        items: list[PricedItem] = []

        tour_label = f"Tour: {tour.name}"
        if season:
            tour_label += f" ({season.name} x{multiplier:g})"
        items.append(PricedItem("tour", tour_label, _price(tour.base_price) * multiplier, 1))

        vehicle_units = billable_days * config.vehicle_count
        items.append(PricedItem("vehicle", f"Vehicle: {vehicle.name}", _price(vehicle.price_per_day), vehicle_units))
        items.append(PricedItem("driver", "Driver", _price(vehicle.driver_cost_per_day), vehicle_units))

        if hotel is not None and nights > 0:
            items.extend(self._accommodation(config, hotel, nights))

        if guide is not None:
            items.append(PricedItem("guide", f"Guide: {guide.name}", _price(guide.price_per_day), billable_days))

        items.extend(self._special_services(config, catalog))

        raw_total = sum(item.subtotal for item in items)
        currency = config.currency

        line_items = [
            LineItem(
                code=item.code,
                label=item.label,
                unit_price=round(convert(item.unit_price, BASE_CURRENCY, currency, rates), 2),
                quantity=item.quantity,
                subtotal=round(convert(item.subtotal, BASE_CURRENCY, currency, rates), 2),
            )
            for item in items
        ]
        total = round(convert(raw_total, BASE_CURRENCY, currency, rates), 2)

        if rates is None:
            exchange_rate, rates_source = 1.0, "none"
        else:
            exchange_rate = 1.0 if currency == BASE_CURRENCY else rates.rate(currency)
            rates_source = rates.source

        logger.debug(
            f"Quoted tour {tour.code}: {len(line_items)} items, "
            f"{raw_total:.2f} {BASE_CURRENCY} -> {total:.2f} {currency}"
        )

        return CalculationResult(
            line_items=line_items,
            total=total,
            currency=currency,
            raw_total_jpy=round(raw_total, 2),
            exchange_rate=exchange_rate,
            rates_source=rates_source,
            duration_days=duration_days,
            nights=nights,
            season=SeasonApplied(name=season.name, multiplier=multiplier) if season else None,
            tour=TourSummary(id=tour.id, code=tour.code, name=tour.name, location=tour.location),
            notes=config.special_services.notes,
        )

    def _check_ranges(self, config: BookingConfiguration) -> None:
        if config.participants < 1:
            raise ValidationError("participants must be at least 1")
        if config.vehicle_count < 1:
            raise ValidationError("vehicleCount must be at least 1")
        if config.end_date < config.start_date:
            raise ValidationError("endDate must not be before startDate")
        if config.staying_nights is not None and not 0 <= config.staying_nights <= config.duration_days:
            raise ValidationError(
                f"stayingNights must be between 0 and {config.duration_days}"
            )

    def _nights(self, config: BookingConfiguration) -> int:
        if config.duration_days == 0:
            return 0
        if config.staying_nights is not None:
            return config.staying_nights
        return config.duration_days

    def _accommodation(self, config: BookingConfiguration, hotel, nights: int) -> list[PricedItem]:
        items: list[PricedItem] = []

        counts = config.room_counts
        if not any(counts.values()):
            # Room type only: enough rooms of that type for everyone
            counts = {config.room_type: math.ceil(config.participants / ROOM_OCCUPANCY[config.room_type])}

        for room_type, count in counts.items():
            if count <= 0:
                continue
            items.append(PricedItem(
                f"room_{room_type}",
                f"{hotel.name}: {room_type} room",
                _price(getattr(hotel, f"{room_type}_room_price")),
                count * nights,
            ))

        for meal, flag, price_attr in MEALS:
            if getattr(config, flag):
                items.append(PricedItem(
                    f"meal_{meal}",
                    f"{meal.capitalize()} at {hotel.name}",
                    _price(getattr(hotel, price_attr)),
                    config.participants * nights,
                ))
        return items

    def _special_services(self, config: BookingConfiguration, catalog: CatalogSnapshot) -> list[PricedItem]:
        enabled = config.special_services.enabled
        if not enabled:
            return []

        rates = catalog.active_service_rates()
        unknown = sorted(enabled - rates.keys())
        if unknown:
            raise ValidationError(f"Unknown special service: {', '.join(unknown)}")

        return [
            PricedItem(f"service_{code}", rate.label, _price(rate.surcharge), 1)
            for code, rate in rates.items()
            if code in enabled
        ]


pricing_engine = PricingEngine()
