"""Exchange rate lookup and USD-pivot conversion for display."""
import logging
from dataclasses import dataclass
from datetime import datetime

import httpx
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

# Approximate USD-based rates used when the remote API is unavailable
FALLBACK_RATES = {
    "USD": 1.0,
    "BRL": 5.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 149.5,
    "ARS": 850.0,
    "CLP": 900.0,
    "MXN": 17.2,
    "CAD": 1.36,
    "AUD": 1.53,
}

COMMON_CURRENCIES = ["USD", "BRL", "EUR", "GBP", "JPY", "CAD", "AUD", "MXN", "ARS", "CLP"]


class ExchangeRateError(Exception):
    """Raised when rates cannot be fetched or parsed."""

    pass


@dataclass
class ExchangeRates:
    """Rates relative to ``base`` and when they were obtained."""

    rates: dict[str, float]
    base: str
    last_updated: datetime
    is_fallback: bool = False


class ExchangeRateService:
    """Fetches USD-based exchange rates, caching them for an hour."""

    CACHE_KEY = "exchange_rates_cache"
    BASE = "USD"

    def __init__(self):
        self.api_url = settings.EXCHANGE_RATE_API_URL
        self.cache_seconds = settings.EXCHANGE_RATE_CACHE_SECONDS
        self.timeout = settings.EXCHANGE_RATE_TIMEOUT

    def get_rates(self) -> ExchangeRates:
        """
        Return cached rates, fetching fresh ones on a cache miss.

        Never raises for network or API problems: the static fallback table
        is returned instead and is not cached, so the next call retries.
        """
        cached = cache.get(self.CACHE_KEY)
        if cached:
            return ExchangeRates(
                rates=cached["rates"],
                base=cached["base"],
                last_updated=datetime.fromisoformat(cached["last_updated"]),
            )

        try:
            rates = self._fetch_rates()
        except ExchangeRateError as e:
            logger.warning("Using fallback exchange rates: %s", e)
            return ExchangeRates(
                rates=dict(FALLBACK_RATES),
                base=self.BASE,
                last_updated=timezone.now(),
                is_fallback=True,
            )

        result = ExchangeRates(rates=rates, base=self.BASE, last_updated=timezone.now())
        cache.set(
            self.CACHE_KEY,
            {
                "rates": result.rates,
                "base": result.base,
                "last_updated": result.last_updated.isoformat(),
            },
            timeout=self.cache_seconds,
        )
        return result

    def refresh(self) -> ExchangeRates:
        """Drop cached rates and fetch again."""
        cache.delete(self.CACHE_KEY)
        return self.get_rates()

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """
        Convert through USD: ``amount / rates[from] * rates[to]``.

        Unknown currency codes leave the amount unchanged.
        """
        rates = self.get_rates().rates
        from_rate = rates.get(from_currency.upper())
        to_rate = rates.get(to_currency.upper())
        if not from_rate or not to_rate:
            return amount
        in_usd = amount / from_rate
        return in_usd * to_rate

    def available_currencies(self) -> list[str]:
        """Common currencies that have a known rate."""
        rates = self.get_rates().rates
        return [code for code in COMMON_CURRENCIES if code in rates]

    def _fetch_rates(self) -> dict[str, float]:
        try:
            response = httpx.get(self.api_url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise ExchangeRateError(f"Exchange rate request failed: {e}") from e

        if not response.is_success:
            raise ExchangeRateError(f"Exchange rate API returned {response.status_code}")

        try:
            data = response.json()
            rates = {str(code).upper(): float(value) for code, value in data["rates"].items()}
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ExchangeRateError(f"Malformed exchange rate response: {e}") from e

        if not rates:
            raise ExchangeRateError("Exchange rate response contained no rates")
        return rates
