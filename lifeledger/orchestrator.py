"""
Main Orchestrator for LifeLedger

This module ties together all the components and defines the
end-to-end flows for:
1. Habits (validate → save → log days → dashboard → coach)
2. Finance (validate → save → filter by period → charts → coach)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written without passing validation
- Every write goes through the scoped store, so it is owned by the
  current user or skipped
- The AI coach only ever sees figures computed here

The UI calls these flows and nothing below them.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from lifeledger.agents import (
    FINANCE_COACH_PROMPT,
    HABIT_COACH_PROMPT,
    AdvisorResponse,
    MotivationAdvisor,
    build_finance_context,
    build_habit_context,
)
from lifeledger.analytics import (
    category_breakdown,
    cumulative_balance,
    filter_by_period,
    financial_summary,
    last_n_days,
    monthly_comparison,
    summarize_habits,
)
from lifeledger.audit import AuditLogger
from lifeledger.auth import IdentityResolver
from lifeledger.config import Settings, StorageSettings, get_settings
from lifeledger.context import ChangeNotifier
from lifeledger.models.habit import Habit, HabitLog, HabitType
from lifeledger.models.stats import FinanceCharts, FinancialSummary, HabitProgress, Period
from lifeledger.models.transaction import Transaction, TransactionCategory, TransactionKind
from lifeledger.models.validation import ValidationIssue, ValidationResult
from lifeledger.services.currency import ExchangeRateService
from lifeledger.services.storage import InMemoryStore, JsonFileStore, KeyValueStore
from lifeledger.store import HabitRepository, ScopedRecordStore, TransactionRepository
from lifeledger.validation import RecordValidator


logger = structlog.get_logger(__name__)


@dataclass
class AppContext:
    """
    Everything the UI needs, built once per process.

    `storage` holds the record collections and the user table;
    `session_store` holds the current-user snapshot and may be the
    same store.
    """

    settings: Settings
    storage: KeyValueStore
    session_store: KeyValueStore
    notifier: ChangeNotifier
    audit: AuditLogger
    identity: IdentityResolver
    store: ScopedRecordStore
    habits: HabitRepository
    transactions: TransactionRepository
    advisor: MotivationAdvisor
    rates: ExchangeRateService
    validator: RecordValidator


def _not_found(entity_type: str, field: str, message: str) -> ValidationResult:
    return ValidationResult(
        entity_type=entity_type,
        issues=[ValidationIssue(field=field, issue_type="missing", message=message)],
    )


class HabitFlow:
    """
    Orchestrates habit tracking.

    Flow:
    1. Create → validate title, goal and type, then save
    2. Log → one log per habit and day, replacing an earlier one
    3. Dashboard → day cells, hits, percentage and streak per habit
    4. Coach → dashboard figures sent to the advisor
    """

    def __init__(self, context: AppContext):
        self._ctx = context

    def create_habit(
        self,
        title: str,
        goal_per_week: Any = 3,
        habit_type: Any = HabitType.CHECK,
    ) -> tuple[Optional[Habit], ValidationResult]:
        """
        Validate and save a new habit.

        Returns:
            (habit, validation_result). habit is None when validation
            failed or nobody is logged in.
        """
        result = self._ctx.validator.validate_habit(title, goal_per_week, habit_type)
        if not result.is_valid:
            self._ctx.audit.log_validation_failed(
                "habit", result.issue_dicts(), self._ctx.identity.current_user_id()
            )
            return None, result

        habit = Habit(title=title, goal_per_week=int(goal_per_week), type=HabitType(habit_type))
        return self._ctx.habits.save_habit(habit), result

    def delete_habit(self, habit_id: str) -> bool:
        """Delete a habit and all of its logs."""
        return self._ctx.habits.delete_habit(habit_id)

    def log_today(
        self,
        habit_id: str,
        value: Optional[float] = None,
        today: Optional[date] = None,
    ) -> tuple[Optional[HabitLog], ValidationResult]:
        """Record today's outcome for a habit, replacing any earlier log for today."""
        habit = self._ctx.habits.get_habit(habit_id)
        if habit is None:
            return None, _not_found("habit_log", "habit_id", "Habit not found")

        result = self._ctx.validator.validate_log(habit, value)
        if not result.is_valid:
            self._ctx.audit.log_validation_failed(
                "habit_log", result.issue_dicts(), self._ctx.identity.current_user_id()
            )
            return None, result

        log = HabitLog.for_habit(habit, today or date.today(), value)
        return self._ctx.habits.save_log(log), result

    def dashboard(
        self,
        days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[HabitProgress]:
        window = last_n_days(days or self._ctx.settings.app.dashboard_days, today)
        return summarize_habits(
            self._ctx.habits.list_habits(),
            self._ctx.habits.list_logs(),
            window,
        )

    async def ask_coach(
        self,
        progress: Optional[list[HabitProgress]] = None,
        days: Optional[int] = None,
    ) -> AdvisorResponse:
        """Ask the habit coach about the current dashboard."""
        days = days or self._ctx.settings.app.dashboard_days
        if progress is None:
            progress = self.dashboard(days)
        context = build_habit_context(progress, days)
        return await self._ctx.advisor.ask(context, HABIT_COACH_PROMPT)


class FinanceFlow:
    """
    Orchestrates income and expense tracking.

    All figures are computed in the currency amounts were entered in;
    conversion is a display concern handled by the UI.
    """

    def __init__(self, context: AppContext):
        self._ctx = context

    def _validate(
        self,
        kind: Any,
        category: Any,
        amount: Any,
        on_date: Optional[date],
    ) -> ValidationResult:
        result = self._ctx.validator.validate_transaction(kind, category, amount, on_date)
        if not result.is_valid:
            self._ctx.audit.log_validation_failed(
                "transaction", result.issue_dicts(), self._ctx.identity.current_user_id()
            )
        return result

    def add_transaction(
        self,
        kind: Any,
        category: Any,
        amount: Any,
        on_date: Optional[date],
        description: str = "",
    ) -> tuple[Optional[Transaction], ValidationResult]:
        result = self._validate(kind, category, amount, on_date)
        if not result.is_valid:
            return None, result

        transaction = Transaction(
            kind=TransactionKind(kind),
            category=TransactionCategory(category),
            amount=Decimal(str(amount)).quantize(Decimal("0.01")),
            description=description or "",
            date=on_date,
        )
        return self._ctx.transactions.save_transaction(transaction), result

    def update_transaction(
        self,
        transaction_id: str,
        kind: Any,
        category: Any,
        amount: Any,
        on_date: Optional[date],
        description: str = "",
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """Edit a transaction in place, keeping its id and position."""
        existing = next(
            (t for t in self._ctx.transactions.list_transactions() if t.id == transaction_id),
            None,
        )
        if existing is None:
            return None, _not_found("transaction", "id", "Transaction not found")

        result = self._validate(kind, category, amount, on_date)
        if not result.is_valid:
            return None, result

        updated = existing.model_copy(update={
            "kind": TransactionKind(kind),
            "category": TransactionCategory(category),
            "amount": Decimal(str(amount)).quantize(Decimal("0.01")),
            "description": description or "",
            "date": on_date,
        })
        if not self._ctx.transactions.update_transaction(updated):
            return None, _not_found("transaction", "id", "Transaction not found")
        return updated, result

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._ctx.transactions.delete_transaction(transaction_id)

    def _in_period(self, period: Period, now: Optional[datetime]) -> list[Transaction]:
        return filter_by_period(self._ctx.transactions.list_transactions(), period, now)

    def summary(
        self,
        period: Period = Period.ALL,
        now: Optional[datetime] = None,
    ) -> FinancialSummary:
        return financial_summary(self._in_period(period, now))

    def charts(
        self,
        period: Period = Period.ALL,
        now: Optional[datetime] = None,
    ) -> FinanceCharts:
        transactions = self._in_period(period, now)
        return FinanceCharts(
            breakdown=category_breakdown(transactions),
            cumulative=cumulative_balance(transactions),
            monthly=monthly_comparison(transactions),
        )

    async def ask_coach(
        self,
        period: Period = Period.MONTH,
        currency: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AdvisorResponse:
        """Ask the finance coach about the selected period."""
        transactions = self._in_period(period, now)
        context = build_finance_context(
            financial_summary(transactions),
            category_breakdown(transactions),
            period,
            currency or self._ctx.settings.app.default_currency,
        )
        return await self._ctx.advisor.ask(context, FINANCE_COACH_PROMPT)


def create_storage(storage_settings: StorageSettings) -> KeyValueStore:
    """Build the key-value backend named in the storage settings."""
    if storage_settings.backend == "memory":
        return InMemoryStore()
    if storage_settings.backend == "google_sheets":
        # Imported here so gspread is only loaded when the backend is used
        from lifeledger.services.storage.google_sheets import (
            GoogleSheetsClient,
            GoogleSheetsStore,
        )
        return GoogleSheetsStore(GoogleSheetsClient())
    return JsonFileStore(storage_settings.json_path)


def create_app_context(
    settings: Optional[Settings] = None,
    session_store: Optional[KeyValueStore] = None,
    storage: Optional[KeyValueStore] = None,
) -> AppContext:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to the cached global settings)
        session_store: Where the current-user snapshot lives. Defaults to
                       the record store itself.
        storage: Record store to use instead of building the configured
                 backend. The web UI shares one across sessions.

    Returns:
        A fully wired AppContext
    """
    settings = settings or get_settings()
    audit = AuditLogger()
    notifier = ChangeNotifier()

    if storage is None:
        storage = create_storage(settings.storage)
    if session_store is None:
        session_store = storage

    identity = IdentityResolver(
        storage,
        session_store,
        notifier,
        audit_logger=audit,
        settings=settings.auth,
    )
    store = ScopedRecordStore(storage, identity, notifier, audit_logger=audit)

    try:
        gemini = settings.gemini
    except ValidationError:
        logger.warning("gemini_not_configured")
        gemini = None
    advisor = MotivationAdvisor(settings=gemini, audit_logger=audit)

    return AppContext(
        settings=settings,
        storage=storage,
        session_store=session_store,
        notifier=notifier,
        audit=audit,
        identity=identity,
        store=store,
        habits=HabitRepository(store),
        transactions=TransactionRepository(store),
        advisor=advisor,
        rates=ExchangeRateService(settings.exchange_rate, audit_logger=audit),
        validator=RecordValidator(),
    )
