"""Tests for the exchange-rate service and currency conversion."""

from decimal import Decimal

import requests

from lifeledger.config import ExchangeRateSettings
from lifeledger.services.currency import (
    FALLBACK_RATES,
    ExchangeRateService,
    convert_amount,
    get_currency_symbol,
)


class _FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append((url, timeout))
        if self._error:
            raise self._error
        return self._response


def _service(session):
    settings = ExchangeRateSettings(base_url="https://rates.test/latest/", timeout_seconds=3)
    return ExchangeRateService(settings=settings, session=session)


class TestGetRates:
    def test_live_rates(self):
        session = _FakeSession(_FakeResponse({"rates": {"USD": 1, "EUR": 0.92}}))
        rates = _service(session).get_rates("usd")

        assert rates == {"USD": 1.0, "EUR": 0.92}
        assert session.urls == [("https://rates.test/latest/USD", 3)]

    def test_network_error_falls_back(self):
        session = _FakeSession(error=requests.ConnectionError("offline"))
        assert _service(session).get_rates() == FALLBACK_RATES

    def test_http_error_falls_back(self):
        session = _FakeSession(_FakeResponse({}, status=500))
        assert _service(session).get_rates() == FALLBACK_RATES

    def test_malformed_payload_falls_back(self):
        session = _FakeSession(_FakeResponse({"unexpected": True}))
        assert _service(session).get_rates() == FALLBACK_RATES

    def test_fallback_is_a_copy(self):
        session = _FakeSession(error=requests.Timeout("slow"))
        rates = _service(session).get_rates()
        rates["EUR"] = 123
        assert FALLBACK_RATES["EUR"] == 0.9

    def test_fallback_keeps_real_defaults(self):
        assert FALLBACK_RATES == {"USD": 1.0, "EUR": 0.9, "CLP": 950.0, "ARS": 360.0}


class TestConvert:
    def test_same_currency(self):
        assert convert_amount(Decimal("10"), "EUR", "EUR", FALLBACK_RATES) == Decimal("10")

    def test_usd_to_clp(self):
        assert convert_amount(Decimal("2"), "USD", "CLP", FALLBACK_RATES) == Decimal("1900")

    def test_via_usd(self):
        result = convert_amount(Decimal("9"), "EUR", "USD", FALLBACK_RATES)
        assert result == Decimal("10")

    def test_without_rates_unchanged(self):
        assert convert_amount(Decimal("5"), "USD", "EUR", {}) == Decimal("5")
        assert convert_amount(Decimal("5"), "USD", "EUR", {"EUR": 0.9}) == Decimal("5")

    def test_unknown_currency_counts_as_one(self):
        assert convert_amount(Decimal("5"), "USD", "XYZ", FALLBACK_RATES) == Decimal("5")

    def test_symbols(self):
        assert get_currency_symbol("EUR") == "€"
        assert get_currency_symbol("XYZ") == "XYZ"
