"""
Data Models Package

This package contains all Pydantic models used in LifeLedger.
All data flowing through the system must conform to these schemas.
"""

from lifeledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from lifeledger.models.habit import Habit, HabitLog, HabitType
from lifeledger.models.stats import (
    BalancePoint,
    CategoryTotal,
    DayCell,
    FinanceCharts,
    FinancialSummary,
    HabitProgress,
    MonthlyTotals,
    Period,
)
from lifeledger.models.transaction import (
    Transaction,
    TransactionCategory,
    TransactionKind,
)
from lifeledger.models.user import (
    FEDERATED_PASSWORD_SENTINEL,
    AuthResult,
    CurrentUser,
    FederatedProfile,
    User,
)
from lifeledger.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Habit models
    "Habit",
    "HabitLog",
    "HabitType",
    # Derived statistics
    "BalancePoint",
    "CategoryTotal",
    "DayCell",
    "FinanceCharts",
    "FinancialSummary",
    "HabitProgress",
    "MonthlyTotals",
    "Period",
    # Finance models
    "Transaction",
    "TransactionCategory",
    "TransactionKind",
    # Identity models
    "FEDERATED_PASSWORD_SENTINEL",
    "AuthResult",
    "CurrentUser",
    "FederatedProfile",
    "User",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
