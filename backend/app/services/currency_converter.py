"""Currency conversion against a JPY-anchored rate table, with a time-stamped cache.

The rate table is owned by a ``RateCache`` instance rather than module state:
callers ask the cache for the current ``RateTable`` and hand it to ``convert``.
Refreshing replaces the table as a whole, so a reader holding a table never
observes a partial update.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType

import httpx

from app.config import settings
from app.data.currency import BASE_CURRENCY, FALLBACK_RATES, normalize_currency
from app.exceptions import NetworkError, UpstreamUnavailable, ValidationError
from app.services.cache_service import CacheService, cache_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateTable:
    """Multipliers relative to ``base`` (base itself is 1.0)."""
    rates: Mapping[str, float]
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "live"  # live | cache | fallback
    base: str = BASE_CURRENCY

    def __post_init__(self):
        frozen = MappingProxyType({normalize_currency(k): float(v) for k, v in self.rates.items()})
        object.__setattr__(self, "rates", frozen)

    def rate(self, currency: str) -> float:
        currency = normalize_currency(currency)
        try:
            return self.rates[currency]
        except KeyError:
            raise ValidationError(f"Unsupported currency: {currency}") from None

    def to_dict(self) -> dict:
        return {
            "base": self.base,
            "rates": dict(self.rates),
            "fetched_at": self.fetched_at.isoformat(),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict, source: str | None = None) -> "RateTable":
        return cls(
            rates=data["rates"],
            fetched_at=datetime.fromisoformat(data["fetched_at"]),
            source=source or data.get("source", "cache"),
            base=data.get("base", BASE_CURRENCY),
        )


def fallback_table() -> RateTable:
    return RateTable(rates=FALLBACK_RATES, source="fallback")


def _over_fallback(rates: Mapping[str, float]) -> dict[str, float]:
    """Supported currencies from ``rates`` where usable, the fallback snapshot elsewhere."""
    merged = dict(FALLBACK_RATES)
    for code in FALLBACK_RATES:
        value = rates.get(code)
        if isinstance(value, (int, float)) and value > 0:
            merged[code] = float(value)
    merged[BASE_CURRENCY] = 1.0
    return merged


def convert(
    amount: float,
    from_currency: str,
    to_currency: str,
    rate_table: RateTable | None,
) -> float:
    """Convert ``amount`` between currencies via the table's base currency.

    Same-currency conversions return ``amount`` untouched. Without a table the
    amount comes back unconverted; every real conversion rounds to 2 decimals.
    """
    from_currency = normalize_currency(from_currency)
    to_currency = normalize_currency(to_currency)

    if from_currency == to_currency:
        return amount

    if rate_table is None:
        logger.debug(f"No rate table, returning {amount} {from_currency} unconverted")
        return amount

    base = rate_table.base
    if from_currency == base:
        return round(amount * rate_table.rate(to_currency), 2)
    if to_currency == base:
        return round(amount / rate_table.rate(from_currency), 2)

    amount_in_base = amount / rate_table.rate(from_currency)
    return round(amount_in_base * rate_table.rate(to_currency), 2)


class RateCache:
    """Owns the current rate table; refreshes from the live source on a TTL."""

    def __init__(
        self,
        url: str | None = None,
        ttl: timedelta | None = None,
        cache: CacheService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url or settings.exchange_rate_api_url
        self.ttl = ttl or timedelta(minutes=settings.exchange_rate_ttl_minutes)
        self._cache = cache if cache is not None else cache_service
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._table: RateTable | None = None
        self._checked_at: datetime | None = None
        self._lock = asyncio.Lock()

    @property
    def table(self) -> RateTable | None:
        return self._table

    def replace(self, table: RateTable) -> None:
        self._table = table
        self._checked_at = datetime.now(timezone.utc)

    def use_fallback(self) -> RateTable:
        table = fallback_table()
        self.replace(table)
        return table

    def is_stale(self, now: datetime | None = None) -> bool:
        # Measured from the last refresh attempt, not from table.fetched_at
        if self._table is None or self._checked_at is None:
            return True
        return (now or datetime.now(timezone.utc)) - self._checked_at > self.ttl

    async def get_table(self) -> RateTable:
        """Return the current table, refreshing first if it is missing or stale."""
        if not self.is_stale():
            return self._table
        async with self._lock:
            # Another caller may have refreshed while we waited
            if not self.is_stale():
                return self._table
            return await self._refresh_locked()

    async def refresh(self) -> RateTable:
        """Fetch live rates, degrading to cached or fallback rates. Never raises."""
        async with self._lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> RateTable:
        try:
            table = await self._fetch()
        except (NetworkError, UpstreamUnavailable) as e:
            logger.warning(f"Exchange rate refresh failed: {e.message}")
            table = await self._degraded_table()
        else:
            await self._cache.set_rates(table.base, table.to_dict(), int(self.ttl.total_seconds()))
            logger.info(f"Exchange rates refreshed ({len(table.rates)} currencies)")
        self.replace(table)
        return table

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=settings.exchange_rate_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def _fetch(self) -> RateTable:
        client = await self._get_client()
        try:
            resp = await client.get(self.url)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TransportError as e:
            raise NetworkError(f"Rate source unreachable: {e}") from e
        except (httpx.HTTPStatusError, ValueError) as e:
            raise UpstreamUnavailable(f"Rate source returned an invalid response: {e}") from e

        fetched = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(fetched, dict) or not fetched:
            raise UpstreamUnavailable("Rate source response has no rates")
        return RateTable(rates=_over_fallback(fetched), source="live")

    async def _degraded_table(self) -> RateTable:
        cached = await self._cache.get_rates(BASE_CURRENCY)
        if cached:
            try:
                stored = RateTable.from_dict(cached, source="cache")
                return RateTable(
                    rates=_over_fallback(stored.rates),
                    fetched_at=stored.fetched_at,
                    source="cache",
                    base=stored.base,
                )
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed cached rates: {e}")
        if self._table is not None and self._table.source != "fallback":
            return self._table
        logger.warning("Using fallback exchange rates")
        return fallback_table()

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


rate_cache = RateCache()
