"""
Exchange Rate Service

Amounts are stored in one currency and converted for display.

DESIGN DECISION: Rates are fetched from a public API, but the feature
never blocks on it. Any failure logs a warning and returns a hardcoded
default table, so the finance page keeps working offline.
"""

from decimal import Decimal
from typing import Optional

import requests
import structlog

from lifeledger.audit import AuditLogger
from lifeledger.config import ExchangeRateSettings, get_settings


CURRENCIES = [
    {"code": "USD", "name": "US Dollar", "symbol": "$"},
    {"code": "EUR", "name": "Euro", "symbol": "€"},
    {"code": "CLP", "name": "Chilean Peso", "symbol": "$"},
    {"code": "ARS", "name": "Argentine Peso", "symbol": "$"},
]

# Relative to USD
FALLBACK_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.9,
    "CLP": 950.0,
    "ARS": 360.0,
}

logger = structlog.get_logger(__name__)


class ExchangeRateService:
    """Fetches rates for a base currency, falling back to defaults on any error."""

    def __init__(
        self,
        settings: Optional[ExchangeRateSettings] = None,
        session: Optional[requests.Session] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().exchange_rate
        self._session = session or requests.Session()
        self._audit = audit_logger or AuditLogger()

    def get_rates(self, base_currency: str = "USD") -> dict[str, float]:
        url = f"{self._settings.base_url.rstrip('/')}/{base_currency.upper()}"
        try:
            response = self._session.get(url, timeout=self._settings.timeout_seconds)
            response.raise_for_status()
            rates = response.json()["rates"]
            if not isinstance(rates, dict) or not rates:
                raise ValueError("response has no rates")
            return {code: float(rate) for code, rate in rates.items()}
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            logger.warning("exchange_rates_fallback", base=base_currency, error=str(e))
            self._audit.log_external_service_error("exchange_rates", str(e))
            return dict(FALLBACK_RATES)


def convert_amount(
    amount: Decimal | float,
    from_currency: str,
    to_currency: str,
    rates: dict[str, float],
) -> Decimal:
    """
    Convert between currencies using rates relative to USD.

    Unknown currencies count as rate 1. Without rates, or without a USD
    entry, the amount is returned unchanged.
    """
    amount = Decimal(str(amount))
    if from_currency == to_currency or not rates or "USD" not in rates:
        return amount

    amount_in_usd = amount / Decimal(str(rates.get(from_currency) or 1))
    return amount_in_usd * Decimal(str(rates.get(to_currency) or 1))


def get_currency_symbol(code: str) -> str:
    return next((c["symbol"] for c in CURRENCIES if c["code"] == code), code)
