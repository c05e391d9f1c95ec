"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract key-value interface for persistence.
This allows us to:
1. Keep data in a local JSON document by default
2. Use in-memory storage for testing and per-session state
3. Swap in Google Sheets without changing business logic

Each key holds one whole collection (a JSON-serializable list or dict).
Writes replace the whole value; there are no partial updates.
Filtering by user happens above this layer, never in storage itself.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Optional


class KeyValueStore(ABC):
    """
    Abstract interface for whole-value key-value storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        """
        Hold the store's lock around a read-modify-write.

        Serializes writers within this process only.
        """
        with self._lock:
            yield self

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """
        Read the decoded value stored under a key.

        Returns:
            The value, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """The configured storage location does not exist."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
