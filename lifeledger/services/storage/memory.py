"""In-memory key-value storage, for tests and per-session state."""

import copy
from typing import Any, Optional

from lifeledger.services.storage.interface import KeyValueStore


class InMemoryStore(KeyValueStore):
    """
    Dictionary-backed store.

    Values are deep-copied on the way in and out so callers can never
    mutate stored snapshots in place.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        super().__init__()
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def read(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def write(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
