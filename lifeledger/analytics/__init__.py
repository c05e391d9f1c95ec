"""Aggregation layer: pure statistics over record sequences."""

from lifeledger.analytics.finance import (
    add_months,
    category_breakdown,
    cumulative_balance,
    filter_by_period,
    financial_summary,
    monthly_comparison,
    period_cutoff,
)
from lifeledger.analytics.habits import (
    build_day_cells,
    calc_streak,
    completion_percentage,
    is_completed,
    last_n_days,
    period_sum,
    summarize_habit,
    summarize_habits,
)

__all__ = [
    # Finance
    "add_months",
    "category_breakdown",
    "cumulative_balance",
    "filter_by_period",
    "financial_summary",
    "monthly_comparison",
    "period_cutoff",
    # Habits
    "build_day_cells",
    "calc_streak",
    "completion_percentage",
    "is_completed",
    "last_n_days",
    "period_sum",
    "summarize_habit",
    "summarize_habits",
]
