"""AI Agents package."""

from lifeledger.agents.advisor import (
    FINANCE_COACH_PROMPT,
    HABIT_COACH_PROMPT,
    AdvisorResponse,
    MotivationAdvisor,
    build_finance_context,
    build_habit_context,
)

__all__ = [
    "FINANCE_COACH_PROMPT",
    "HABIT_COACH_PROMPT",
    "AdvisorResponse",
    "MotivationAdvisor",
    "build_finance_context",
    "build_habit_context",
]
