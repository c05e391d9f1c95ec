"""
Finance Statistics

Pure functions over transaction sequences: period filtering, totals,
category breakdown, cumulative balance and month-by-month comparison.
"""

import calendar
from collections import defaultdict
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from lifeledger.models.stats import (
    BalancePoint,
    CategoryTotal,
    FinancialSummary,
    MonthlyTotals,
    Period,
)
from lifeledger.models.transaction import Transaction, TransactionKind


_PERIOD_MONTHS = {
    Period.MONTH: 1,
    Period.THREE_MONTHS: 3,
    Period.YEAR: 12,
}


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    if months == 0:
        return moment
    m0 = (moment.month - 1) + months
    year = moment.year + (m0 // 12)
    month = (m0 % 12) + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_cutoff(period: Period, now: Optional[datetime] = None) -> Optional[datetime]:
    """The earliest instant included in a period, or None for all time."""
    if period is Period.ALL:
        return None
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return add_months(now, -_PERIOD_MONTHS[period])


def _transaction_instant(transaction: Transaction) -> datetime:
    # A bare date counts as midnight UTC on that day
    return datetime.combine(transaction.date, time.min, tzinfo=timezone.utc)


def filter_by_period(
    transactions: Iterable[Transaction],
    period: Period,
    now: Optional[datetime] = None,
) -> list[Transaction]:
    """Transactions on or after the period's cutoff instant."""
    cutoff = period_cutoff(period, now)
    if cutoff is None:
        return list(transactions)
    return [t for t in transactions if _transaction_instant(t) >= cutoff]


def financial_summary(transactions: Iterable[Transaction]) -> FinancialSummary:
    income = Decimal("0")
    expense = Decimal("0")
    for t in transactions:
        if t.kind is TransactionKind.INCOME:
            income += t.amount
        elif t.kind is TransactionKind.EXPENSE:
            expense += t.amount
        else:
            raise ValueError(f"Unhandled transaction kind: {t.kind}")
    return FinancialSummary(income=income, expense=expense, balance=income - expense)


def category_breakdown(transactions: Iterable[Transaction]) -> list[CategoryTotal]:
    """
    Expense totals per category, largest first.

    Equal totals are ordered by category value so the result is deterministic.
    """
    totals: dict = defaultdict(Decimal)
    for t in transactions:
        if t.kind is TransactionKind.EXPENSE:
            totals[t.category] += t.amount

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0].value))
    return [CategoryTotal(category=category, total=total) for category, total in ordered]


def cumulative_balance(transactions: Sequence[Transaction]) -> list[BalancePoint]:
    """
    Running balance, one point per transaction in date order.

    Same-day transactions keep their input order.
    """
    balance = Decimal("0")
    points = []
    for t in sorted(transactions, key=lambda t: t.date):
        balance += t.signed_amount
        points.append(BalancePoint(date=t.date, balance=balance))
    return points


def monthly_comparison(transactions: Iterable[Transaction]) -> list[MonthlyTotals]:
    """Income and expense per calendar month (YYYY-MM), oldest first."""
    months: dict[str, MonthlyTotals] = {}
    for t in transactions:
        key = t.date.strftime("%Y-%m")
        row = months.setdefault(key, MonthlyTotals(month=key))
        if t.kind is TransactionKind.INCOME:
            row.income += t.amount
        else:
            row.expense += t.amount
    return [months[key] for key in sorted(months)]

