"""
JSON File Storage Implementation

DESIGN DECISION: The default backend is a single JSON document on disk,
mapping each key to its whole collection. It plays the role browser
local storage played in the first version of the app:
1. No setup required
2. Human-readable, easy to back up or inspect
3. Whole-value writes, replaced atomically via a temp file

An unreadable document is renamed to `<name>.corrupt-<timestamp>` before
anything else touches it, so a truncated file never gets overwritten.

TRADEOFFS:
- Every write rewrites the whole document (fine for personal data sizes)
- Two processes writing at once can still lose an update
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from lifeledger.services.storage.interface import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)


class JsonFileStore(KeyValueStore):
    """Key-value store persisted as one JSON object."""

    def __init__(self, path: str | Path):
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._quarantine(str(e))
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not isinstance(data, dict):
            self._quarantine(f"root is {type(data).__name__}, not an object")
            return {}
        return data

    def _quarantine(self, reason: str) -> None:
        """Move an unreadable document aside and start from empty."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        try:
            os.replace(self._path, backup)
        except OSError as e:
            raise StorageError(f"Failed to move aside corrupted {self._path}: {e}")
        logger.warning(
            "json_store_corrupted",
            path=str(self._path),
            backup=str(backup),
            error=reason,
        )

    def _dump(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {self._path}: {e}")

    def read(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._load().get(key)

    def write(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)
