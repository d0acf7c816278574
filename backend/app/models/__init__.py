from app.models.user import User
from app.models.catalog import Guide, Hotel, Season, SpecialServiceRate, Tour, Vehicle

__all__ = [
    "Guide",
    "Hotel",
    "Season",
    "SpecialServiceRate",
    "Tour",
    "User",
    "Vehicle",
]
