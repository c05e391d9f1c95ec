"""Services package."""

from lifeledger.services.currency import (
    CURRENCIES,
    ExchangeRateService,
    convert_amount,
    get_currency_symbol,
)
from lifeledger.services.storage import (
    ConnectionError,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Currency services
    "CURRENCIES",
    "ExchangeRateService",
    "convert_amount",
    "get_currency_symbol",
    # Storage services
    "ConnectionError",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "NotFoundError",
    "StorageError",
]
