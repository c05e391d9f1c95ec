"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The JSON file backend is the default; Google Sheets is optional.
"""

from lifeledger.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    NotFoundError,
    StorageError,
)
from lifeledger.services.storage.json_file import JsonFileStore
from lifeledger.services.storage.memory import InMemoryStore

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
