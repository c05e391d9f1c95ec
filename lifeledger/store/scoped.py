"""
Scoped Record Store

Generic per-collection CRUD, always filtered and stamped by the
current user.

GUARANTEES:
- Reads return only the current user's records (empty when logged out)
- Writes stamp owner_user_id with the current user, overwriting
  whatever the caller supplied
- Deletes require both a matching id and matching ownership
- Other users' records, and stored items we cannot parse, are written
  back untouched

Every mutation reads the whole collection, applies the change and writes
the whole collection back, under the key-value store's lock. The change
notification is published after the write.
"""

from contextlib import contextmanager
from typing import Any, Callable, Generic, Hashable, Iterator, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from lifeledger.audit import AuditLogger
from lifeledger.auth import IdentityResolver
from lifeledger.context import ChangeNotifier
from lifeledger.models.audit import AuditEventBuilder
from lifeledger.models.habit import Habit, HabitLog
from lifeledger.models.transaction import Transaction
from lifeledger.services.storage import KeyValueStore


RecordT = TypeVar("RecordT", bound=BaseModel)

logger = structlog.get_logger(__name__)


class Collection(Generic[RecordT]):
    """A named collection and the model its records parse into."""

    def __init__(self, key: str, model: type[RecordT]):
        self.key = key
        self.model = model

    def __repr__(self) -> str:
        return f"Collection({self.key!r})"


HABITS = Collection("habits", Habit)
HABIT_LOGS = Collection("habit_logs", HabitLog)
TRANSACTIONS = Collection("transactions", Transaction)


class ScopedRecordStore:
    """Per-user view over whole-collection snapshots in a key-value store."""

    def __init__(
        self,
        storage: KeyValueStore,
        identity: IdentityResolver,
        notifier: ChangeNotifier,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._identity = identity
        self._notifier = notifier
        self._audit = audit_logger or AuditLogger()
        self._batch_depth = 0
        self._publish_pending = False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_raw(self, collection: Collection) -> list[Any]:
        raw = self._storage.read(collection.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("collection_malformed", collection=collection.key)
            return []
        return raw

    def _parse(self, collection: Collection[RecordT], item: Any) -> Optional[RecordT]:
        try:
            return collection.model.model_validate(item)
        except ValidationError:
            logger.warning("record_skipped", collection=collection.key, reason="malformed")
            return None

    @staticmethod
    def _owned_by(item: Any, user_id: str) -> bool:
        return isinstance(item, dict) and item.get("owner_user_id") == user_id

    def _stamp(self, record: RecordT, user_id: str) -> RecordT:
        return record.model_copy(update={"owner_user_id": user_id})

    def _publish(self) -> None:
        if self._batch_depth:
            self._publish_pending = True
        else:
            self._notifier.publish()

    def _require_user(self, collection: Collection, operation: str) -> Optional[str]:
        user_id = self._identity.current_user_id()
        if user_id is None:
            self._audit.log(AuditEventBuilder.write_skipped(collection.key, operation))
        return user_id

    @contextmanager
    def batch(self) -> Iterator["ScopedRecordStore"]:
        """
        Group several mutations under one lock hold and one notification.
        """
        with self._storage.transaction():
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                pending = self._publish_pending and self._batch_depth == 0
                if pending:
                    self._publish_pending = False
        if pending:
            self._notifier.publish()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list(self, collection: Collection[RecordT]) -> list[RecordT]:
        """Records owned by the current user, in stored order."""
        user_id = self._identity.current_user_id()
        if user_id is None:
            return []

        records = []
        for item in self._read_raw(collection):
            if not self._owned_by(item, user_id):
                continue
            record = self._parse(collection, item)
            if record is not None:
                records.append(record)
        return records

    def save(self, collection: Collection[RecordT], record: RecordT) -> Optional[RecordT]:
        """
        Upsert by id for the current user. New or replaced records go first.

        Returns the stamped record, or None when no user is resolved.
        """
        user_id = self._require_user(collection, "save")
        if user_id is None:
            return None

        stamped = self._stamp(record, user_id)
        with self._storage.transaction():
            raw = self._read_raw(collection)
            others = [
                item for item in raw
                if not (self._owned_by(item, user_id) and item.get("id") == stamped.id)
            ]
            self._storage.write(collection.key, [stamped.model_dump(mode="json"), *others])

        self._audit.log(AuditEventBuilder.record_saved(collection.key, stamped.id, user_id))
        self._publish()
        return stamped

    def update(self, collection: Collection[RecordT], record: RecordT) -> bool:
        """
        Replace a record in place, keeping its position.

        Only a record with the same id owned by the current user is replaced.
        """
        user_id = self._require_user(collection, "update")
        if user_id is None:
            return False

        stamped = self._stamp(record, user_id)
        replaced = False
        with self._storage.transaction():
            raw = self._read_raw(collection)
            updated = []
            for item in raw:
                if self._owned_by(item, user_id) and item.get("id") == stamped.id:
                    updated.append(stamped.model_dump(mode="json"))
                    replaced = True
                else:
                    updated.append(item)
            if replaced:
                self._storage.write(collection.key, updated)

        if replaced:
            self._audit.log(AuditEventBuilder.record_updated(collection.key, stamped.id, user_id))
            self._publish()
        return replaced

    def delete(self, collection: Collection, record_id: str) -> bool:
        """Delete the current user's record with this id. Returns True if removed."""
        user_id = self._require_user(collection, "delete")
        if user_id is None:
            return False

        with self._storage.transaction():
            raw = self._read_raw(collection)
            kept = [
                item for item in raw
                if not (self._owned_by(item, user_id) and item.get("id") == record_id)
            ]
            removed = len(raw) - len(kept)
            if removed:
                self._storage.write(collection.key, kept)

        if removed:
            self._audit.log(
                AuditEventBuilder.record_deleted(collection.key, record_id, user_id, removed)
            )
            self._publish()
        return bool(removed)

    def delete_where(
        self,
        collection: Collection[RecordT],
        predicate: Callable[[RecordT], bool],
    ) -> int:
        """Delete the current user's records matching a predicate. Returns the count."""
        user_id = self._require_user(collection, "delete")
        if user_id is None:
            return 0

        with self._storage.transaction():
            raw = self._read_raw(collection)
            kept = []
            for item in raw:
                if self._owned_by(item, user_id):
                    record = self._parse(collection, item)
                    if record is not None and predicate(record):
                        continue
                kept.append(item)
            removed = len(raw) - len(kept)
            if removed:
                self._storage.write(collection.key, kept)

        if removed:
            self._audit.log(
                AuditEventBuilder.record_deleted(collection.key, "*", user_id, removed)
            )
            self._publish()
        return removed

    def upsert_by_key(
        self,
        collection: Collection[RecordT],
        key_fn: Callable[[RecordT], Hashable],
        record: RecordT,
    ) -> Optional[RecordT]:
        """
        Replace the current user's record with the same computed key, or insert.
        """
        user_id = self._require_user(collection, "upsert")
        if user_id is None:
            return None

        stamped = self._stamp(record, user_id)
        key = key_fn(stamped)
        with self._storage.transaction():
            raw = self._read_raw(collection)
            kept = []
            for item in raw:
                if self._owned_by(item, user_id):
                    existing = self._parse(collection, item)
                    if existing is not None and key_fn(existing) == key:
                        continue
                kept.append(item)
            self._storage.write(collection.key, [stamped.model_dump(mode="json"), *kept])

        self._audit.log(AuditEventBuilder.record_saved(collection.key, stamped.id, user_id))
        self._publish()
        return stamped
