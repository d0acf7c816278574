"""Currency utilities: supported currencies, fallback rates, and display formatting."""

from typing import Literal

BASE_CURRENCY = "JPY"

Currency = Literal["JPY", "USD", "VND", "CNY", "KRW", "EUR"]

SUPPORTED_CURRENCIES: tuple[str, ...] = ("JPY", "USD", "VND", "CNY", "KRW", "EUR")

# Static rates relative to JPY, used when the live source is unreachable
FALLBACK_RATES: dict[str, float] = {
    "JPY": 1.0,
    "USD": 0.0067,
    "VND": 161.83,
    "CNY": 0.048,
    "KRW": 9.05,
    "EUR": 0.0062,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "JPY": "¥", "USD": "$", "VND": "₫",
    "CNY": "CN¥", "KRW": "₩", "EUR": "€",
}

# Currencies quoted without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY", "VND", "KRW"}


def normalize_currency(code: str) -> str:
    return code.strip().upper()


def is_supported(code: str) -> bool:
    return normalize_currency(code) in SUPPORTED_CURRENCIES


def format_price(amount: float, currency: str = BASE_CURRENCY) -> str:
    """Format a price with currency symbol for display."""
    currency = normalize_currency(currency)
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    if currency in ZERO_DECIMAL_CURRENCIES:
        return f"{symbol}{round(amount):,}"
    return f"{symbol}{amount:,.2f}"
