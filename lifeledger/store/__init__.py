"""Per-user record storage."""

from lifeledger.store.repositories import HabitRepository, TransactionRepository
from lifeledger.store.scoped import (
    HABIT_LOGS,
    HABITS,
    TRANSACTIONS,
    Collection,
    ScopedRecordStore,
)

__all__ = [
    "HABIT_LOGS",
    "HABITS",
    "TRANSACTIONS",
    "Collection",
    "HabitRepository",
    "ScopedRecordStore",
    "TransactionRepository",
]
