"""Tests for the AI advisor boundary (no network: fake Gemini models)."""

import asyncio
from datetime import date
from decimal import Decimal

from lifeledger.agents import (
    FINANCE_COACH_PROMPT,
    HABIT_COACH_PROMPT,
    MotivationAdvisor,
    build_finance_context,
    build_habit_context,
)
from lifeledger.agents.advisor import (
    MISSING_PARAMETERS,
    NO_CONTENT,
    NOT_CONFIGURED,
    UPSTREAM_FAILURE,
)
from lifeledger.analytics import last_n_days, summarize_habit
from lifeledger.audit import AuditLogger
from lifeledger.models.audit import AuditEventType
from lifeledger.models.habit import Habit, HabitLog
from lifeledger.models.stats import CategoryTotal, FinancialSummary, Period
from lifeledger.models.transaction import TransactionCategory


class _FakeResponse:
    def __init__(self, text):
        self.text = text


class _FakeModel:
    def __init__(self, text=None, error=None):
        self._text = text
        self._error = error
        self.prompts = []

    async def generate_content_async(self, context):
        self.prompts.append(context)
        if self._error:
            raise self._error
        return _FakeResponse(self._text)


def _advisor(model, audit=None):
    seen = {}

    def factory(system_prompt):
        seen["system_prompt"] = system_prompt
        return model

    return MotivationAdvisor(model_factory=factory, audit_logger=audit or AuditLogger()), seen


class TestAsk:
    def test_returns_text(self):
        model = _FakeModel(text="  Keep going!  ")
        advisor, seen = _advisor(model)

        answer = asyncio.run(advisor.ask("I read 3 days", HABIT_COACH_PROMPT))

        assert answer.ok
        assert answer.response == "Keep going!"
        assert seen["system_prompt"] == HABIT_COACH_PROMPT
        assert model.prompts == ["I read 3 days"]

    def test_missing_parameters(self):
        advisor, _ = _advisor(_FakeModel(text="hi"))
        answer = asyncio.run(advisor.ask("", HABIT_COACH_PROMPT))
        assert answer.error == MISSING_PARAMETERS
        assert answer.response is None

    def test_upstream_failure_becomes_error(self):
        audit = AuditLogger()
        advisor, _ = _advisor(_FakeModel(error=RuntimeError("403 API key invalid")), audit)

        answer = asyncio.run(advisor.ask("context", FINANCE_COACH_PROMPT))

        assert not answer.ok
        assert answer.error == UPSTREAM_FAILURE
        event = audit.recent_events(1)[0]
        assert event.event_type is AuditEventType.EXTERNAL_SERVICE_ERROR
        assert "403" in event.error_message

    def test_empty_text_is_no_content(self):
        advisor, _ = _advisor(_FakeModel(text="   "))
        answer = asyncio.run(advisor.ask("context", FINANCE_COACH_PROMPT))
        assert answer.error == NO_CONTENT

    def test_unconfigured(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        advisor = MotivationAdvisor()
        assert not advisor.is_configured
        answer = asyncio.run(advisor.ask("context", HABIT_COACH_PROMPT))
        assert answer.error == NOT_CONFIGURED


class TestContextBuilders:
    def test_habit_context_mentions_figures(self):
        today = date(2024, 3, 10)
        habit = Habit(title="Read", goal_per_week=2)
        logs = [HabitLog(habit_id=habit.id, date=today, done=True)]
        progress = summarize_habit(habit, logs, last_n_days(7, today))

        text = build_habit_context([progress], 7)

        assert "'Read'" in text
        assert "1 of my goal of 2" in text
        assert "(50%)" in text
        assert "streak 1" in text

    def test_habit_context_without_habits(self):
        assert "not created any habits" in build_habit_context([])

    def test_finance_context(self):
        summary = FinancialSummary(
            income=Decimal("1000"), expense=Decimal("250.5"), balance=Decimal("749.5")
        )
        breakdown = [CategoryTotal(category=TransactionCategory.FOOD, total=Decimal("200"))]

        text = build_finance_context(summary, breakdown, Period.MONTH, "EUR")

        assert "1,000.00 EUR" in text
        assert "749.50 EUR" in text
        assert "Food (200.00)" in text
