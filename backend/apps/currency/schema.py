"""GraphQL schema for exchange rates."""
from datetime import datetime

import strawberry

from .services import ExchangeRateService


@strawberry.type
class ExchangeRatesType:
    rates: strawberry.scalars.JSON
    base: str
    last_updated: datetime
    is_fallback: bool


@strawberry.type
class CurrencyQuery:
    @strawberry.field
    def exchange_rates(self) -> ExchangeRatesType:
        """USD-based exchange rates, cached for an hour."""
        rates = ExchangeRateService().get_rates()
        return ExchangeRatesType(
            rates=rates.rates,
            base=rates.base,
            last_updated=rates.last_updated,
            is_fallback=rates.is_fallback,
        )

    @strawberry.field
    def convert_currency(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Convert an amount for display. Unknown currencies leave it unchanged."""
        return ExchangeRateService().convert(amount, from_currency, to_currency)

    @strawberry.field
    def available_currencies(self) -> list[str]:
        return ExchangeRateService().available_currencies()
