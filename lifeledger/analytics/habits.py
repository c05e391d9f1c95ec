"""
Habit Statistics

Pure functions deriving dashboard figures from habits and their logs.
No storage access and no hidden state: the same inputs always give
the same outputs.
"""

import math
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from lifeledger.models.habit import Habit, HabitLog, HabitType
from lifeledger.models.stats import DayCell, HabitProgress


def last_n_days(n: int, today: Optional[date] = None) -> list[date]:
    """N consecutive calendar days in ascending order, ending today."""
    today = today or date.today()
    return [today - timedelta(days=offset) for offset in range(n - 1, -1, -1)]


def is_completed(habit: Habit, log: Optional[HabitLog]) -> bool:
    """Check habits use the done flag; number habits need a value above zero."""
    if log is None:
        return False
    if habit.type is HabitType.CHECK:
        return bool(log.done)
    if habit.type is HabitType.NUMBER:
        return log.value is not None and log.value > 0
    raise ValueError(f"Unhandled habit type: {habit.type}")


def build_day_cells(
    habit: Habit,
    logs: Iterable[HabitLog],
    days: Sequence[date],
) -> list[DayCell]:
    """One cell per day, in the order of `days`."""
    by_date: dict[date, HabitLog] = {}
    for log in logs:
        if log.habit_id == habit.id:
            by_date.setdefault(log.date, log)

    cells = []
    for day in days:
        log = by_date.get(day)
        cells.append(DayCell(
            date=day,
            completed=is_completed(habit, log),
            value=log.value if log is not None else None,
        ))
    return cells


def calc_streak(cells: Sequence[DayCell]) -> int:
    """Consecutive completed days counted back from the most recent cell."""
    streak = 0
    for cell in reversed(cells):
        if not cell.completed:
            break
        streak += 1
    return streak


def completion_percentage(hits: int, goal_per_week: int) -> int:
    """
    Progress toward the weekly goal, clamped to 100.

    Rounds half up. A zero or negative goal counts as 1.
    """
    ratio = hits / max(1, goal_per_week)
    return min(100, math.floor(ratio * 100 + 0.5))


def period_sum(cells: Iterable[DayCell]) -> float:
    """Sum of logged values in the range (meaningful for number habits)."""
    return sum(cell.value or 0 for cell in cells)


def summarize_habit(habit: Habit, logs: Iterable[HabitLog], days: Sequence[date]) -> HabitProgress:
    cells = build_day_cells(habit, logs, days)
    hits = sum(1 for cell in cells if cell.completed)
    return HabitProgress(
        habit=habit,
        cells=cells,
        hits=hits,
        percentage=completion_percentage(hits, habit.goal_per_week),
        period_sum=period_sum(cells),
        streak=calc_streak(cells),
    )


def summarize_habits(
    habits: Iterable[Habit],
    logs: Sequence[HabitLog],
    days: Sequence[date],
) -> list[HabitProgress]:
    """Dashboard rows for every habit over the same day range."""
    return [summarize_habit(habit, logs, days) for habit in habits]
