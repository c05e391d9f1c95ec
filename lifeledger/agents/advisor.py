"""
Motivation Advisor

DESIGN DECISION: The advisor is a boundary to Google Gemini, nothing more.
It receives a context sentence built from the aggregation layer's output
and a persona instruction, and returns a single text message.

CRITICAL BOUNDARIES:
- CAN: Phrase encouragement and advice around the figures it is given
- CANNOT: Read or write any records
- MUST: Return an error message instead of raising when the service is
  unconfigured, unreachable, unauthorized, or returns nothing

There is no retry. One failure is shown to the user as an error state.
"""

from typing import Any, Callable, Optional, Sequence

import google.generativeai as genai
from pydantic import BaseModel

from lifeledger.audit import AuditLogger
from lifeledger.config import GeminiSettings
from lifeledger.models.audit import AuditEventBuilder
from lifeledger.models.stats import CategoryTotal, FinancialSummary, HabitProgress, Period


HABIT_COACH_PROMPT = (
    "You are a warm, upbeat habit coach. Using only the progress data the user "
    "shares, write a short motivational message (at most 120 words). Celebrate "
    "streaks, acknowledge missed days without judgement, and suggest one concrete "
    "next step."
)

FINANCE_COACH_PROMPT = (
    "You are a practical personal finance coach. Using only the figures the user "
    "shares, give brief, encouraging advice (at most 150 words). Point out the "
    "largest expense category and suggest one realistic saving action. Never "
    "invent figures."
)

MISSING_PARAMETERS = "Missing parameters: context or system prompt"
NOT_CONFIGURED = "Gemini API key not configured. Set GEMINI_API_KEY in your .env file."
UPSTREAM_FAILURE = (
    "Could not reach the AI assistant. This may be an API key, quota, "
    "or network problem."
)
NO_CONTENT = "The AI assistant returned an empty response."


ModelFactory = Callable[[str], Any]


class AdvisorResponse(BaseModel):
    """Either a message or an error, never both."""

    response: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MotivationAdvisor:
    """
    Sends (context, persona) to Gemini and returns its text.

    `model_factory` builds a model for a given system instruction;
    tests pass a fake one. With neither settings nor a factory the
    advisor is unconfigured and every ask() returns NOT_CONFIGURED.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model_factory: Optional[ModelFactory] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit = audit_logger or AuditLogger()

        self._settings = settings
        if model_factory is not None:
            self._model_factory: Optional[ModelFactory] = model_factory
        elif settings is not None:
            genai.configure(api_key=settings.api_key)
            self._model_factory = self._build_model
        else:
            self._model_factory = None

    @property
    def is_configured(self) -> bool:
        return self._model_factory is not None

    def _build_model(self, system_prompt: str) -> genai.GenerativeModel:
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            system_instruction=system_prompt,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )

    async def ask(self, context: str, system_prompt: str) -> AdvisorResponse:
        """Return the model's single text response, or a user-visible error."""
        if not context or not system_prompt:
            return AdvisorResponse(error=MISSING_PARAMETERS)

        if self._model_factory is None:
            self._audit.log_external_service_error("gemini", "API key not configured")
            return AdvisorResponse(error=NOT_CONFIGURED)

        try:
            model = self._model_factory(system_prompt)
            response = await model.generate_content_async(context)
            text = (response.text or "").strip()
        except Exception as e:
            self._audit.log_external_service_error("gemini", str(e))
            return AdvisorResponse(error=UPSTREAM_FAILURE)

        if not text:
            self._audit.log_external_service_error("gemini", "empty response")
            return AdvisorResponse(error=NO_CONTENT)

        self._audit.log(AuditEventBuilder.advisor_responded(len(text)))
        return AdvisorResponse(response=text)


def build_habit_context(progress: Sequence[HabitProgress], days: int = 7) -> str:
    """Describe dashboard rows in one paragraph for the habit coach."""
    if not progress:
        return "I have not created any habits yet and would like help getting started."

    parts = [f"I am tracking {len(progress)} habit(s) over the last {days} days."]
    for row in progress:
        habit = row.habit
        sentence = (
            f"'{habit.title}': completed {row.hits} of my goal of "
            f"{habit.goal_per_week} per week ({row.percentage}%), "
            f"current streak {row.streak} day(s)"
        )
        if row.period_sum:
            sentence += f", total logged {row.period_sum:g}"
        parts.append(sentence + ".")
    return " ".join(parts)


def build_finance_context(
    summary: FinancialSummary,
    breakdown: Sequence[CategoryTotal],
    period: Period = Period.MONTH,
    currency: str = "USD",
) -> str:
    """Describe the finance summary in one paragraph for the finance coach."""
    sentence = (
        f"Period: {period.label.lower()}. My income was {summary.income:,.2f} {currency}, "
        f"my expenses were {summary.expense:,.2f} {currency} "
        f"and my balance is {summary.balance:,.2f} {currency}."
    )
    if breakdown:
        top = ", ".join(
            f"{item.category.label} ({item.total:,.2f})" for item in breakdown[:3]
        )
        sentence += f" My largest expense categories are: {top}."
    else:
        sentence += " I have not recorded any expenses in this period."
    return sentence
