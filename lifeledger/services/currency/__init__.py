"""Currency conversion services."""

from lifeledger.services.currency.exchange_rates import (
    CURRENCIES,
    FALLBACK_RATES,
    ExchangeRateService,
    convert_amount,
    get_currency_symbol,
)

__all__ = [
    "CURRENCIES",
    "FALLBACK_RATES",
    "ExchangeRateService",
    "convert_amount",
    "get_currency_symbol",
]
