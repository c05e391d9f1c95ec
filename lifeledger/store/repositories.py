"""Typed repositories over the scoped record store."""

from typing import Optional

from lifeledger.models.habit import Habit, HabitLog
from lifeledger.models.transaction import Transaction
from lifeledger.store.scoped import HABIT_LOGS, HABITS, TRANSACTIONS, ScopedRecordStore


class HabitRepository:
    """Habits and their daily logs."""

    def __init__(self, store: ScopedRecordStore):
        self._store = store

    def list_habits(self) -> list[Habit]:
        return self._store.list(HABITS)

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.list_habits() if h.id == habit_id), None)

    def save_habit(self, habit: Habit) -> Optional[Habit]:
        return self._store.save(HABITS, habit)

    def delete_habit(self, habit_id: str) -> bool:
        """Delete a habit together with all of its logs."""
        with self._store.batch():
            deleted = self._store.delete(HABITS, habit_id)
            self._store.delete_where(HABIT_LOGS, lambda log: log.habit_id == habit_id)
        return deleted

    def list_logs(self, habit_id: Optional[str] = None) -> list[HabitLog]:
        logs = self._store.list(HABIT_LOGS)
        if habit_id is not None:
            logs = [log for log in logs if log.habit_id == habit_id]
        return logs

    def save_log(self, log: HabitLog) -> Optional[HabitLog]:
        """At most one log per habit, day and owner; the newest write wins."""
        return self._store.upsert_by_key(HABIT_LOGS, HabitLog.storage_key, log)


class TransactionRepository:
    """Income and expense entries."""

    def __init__(self, store: ScopedRecordStore):
        self._store = store

    def list_transactions(self) -> list[Transaction]:
        return self._store.list(TRANSACTIONS)

    def save_transaction(self, transaction: Transaction) -> Optional[Transaction]:
        return self._store.save(TRANSACTIONS, transaction)

    def update_transaction(self, transaction: Transaction) -> bool:
        return self._store.update(TRANSACTIONS, transaction)

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._store.delete(TRANSACTIONS, transaction_id)
