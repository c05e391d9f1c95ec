"""
Derived Statistics Models

These are the outputs of the aggregation layer. They are never stored;
they are recomputed from the raw records on every refresh.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from lifeledger.models.habit import Habit
from lifeledger.models.transaction import TransactionCategory


class Period(str, Enum):
    """Time windows offered on the finance page."""
    MONTH = "month"
    THREE_MONTHS = "3months"
    YEAR = "year"
    ALL = "all"

    @property
    def label(self) -> str:
        return {
            Period.MONTH: "Last month",
            Period.THREE_MONTHS: "Last 3 months",
            Period.YEAR: "Last year",
            Period.ALL: "All time",
        }[self]


class DayCell(BaseModel):
    """Whether a habit was completed on one calendar day."""

    date: date
    completed: bool
    value: Optional[float] = None


class HabitProgress(BaseModel):
    """Dashboard row for one habit over the selected day range."""

    habit: Habit
    cells: list[DayCell]
    hits: int = Field(ge=0, description="Completed days in range")
    percentage: int = Field(ge=0, le=100, description="Progress toward the weekly goal")
    period_sum: float = Field(description="Sum of logged values (number habits)")
    streak: int = Field(ge=0, description="Consecutive completed days ending today")


class FinancialSummary(BaseModel):
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


class CategoryTotal(BaseModel):
    category: TransactionCategory
    total: Decimal


class BalancePoint(BaseModel):
    date: date
    balance: Decimal


class MonthlyTotals(BaseModel):
    month: str = Field(description="YYYY-MM")
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


class FinanceCharts(BaseModel):
    """Everything the finance page plots for one period."""

    breakdown: list[CategoryTotal] = Field(default_factory=list)
    cumulative: list[BalancePoint] = Field(default_factory=list)
    monthly: list[MonthlyTotals] = Field(default_factory=list)
