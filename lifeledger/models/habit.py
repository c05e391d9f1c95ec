"""
Habit Models for LifeLedger

A habit is tracked either as done / not done per day, or as a daily
quantity. Each (habit, day, owner) has at most one log.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HabitType(str, Enum):
    """How progress on a habit is recorded."""
    CHECK = "check"    # binary completion
    NUMBER = "number"  # numeric quantity

    @property
    def label(self) -> str:
        return {
            HabitType.CHECK: "Habit (done / not done)",
            HabitType.NUMBER: "Quantity (number)",
        }[self]


def new_record_id() -> str:
    return uuid4().hex


class Habit(BaseModel):
    """A user-defined recurring activity with a weekly target."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_record_id)
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the user wants to do"
    )
    goal_per_week: int = Field(
        default=3,
        ge=1,
        description="Target number of completed days per week"
    )
    type: HabitType = Field(
        default=HabitType.CHECK,
        description="Tracking mode"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
    owner_user_id: str = Field(
        default="",
        description="Stamped by the scoped store on save"
    )


class HabitLog(BaseModel):
    """
    One day's recorded outcome for a habit.

    Exactly one of `done` (check habits) or `value` (number habits) is set.
    """

    id: str = Field(default_factory=new_record_id)
    habit_id: str
    date: date
    value: Optional[float] = None
    done: Optional[bool] = None
    owner_user_id: str = ""

    @model_validator(mode='after')
    def validate_single_measure(self) -> 'HabitLog':
        if (self.value is None) == (self.done is None):
            raise ValueError("A habit log needs exactly one of 'done' or 'value'")
        return self

    @staticmethod
    def for_habit(habit: Habit, day: date, value: Optional[float] = None) -> "HabitLog":
        """Build a log whose shape matches the habit's type."""
        if habit.type is HabitType.CHECK:
            return HabitLog(habit_id=habit.id, date=day, done=True)
        return HabitLog(habit_id=habit.id, date=day, value=value)

    def storage_key(self) -> tuple[str, str, str]:
        """Upsert key: one log per habit, day and owner."""
        return (self.habit_id, self.date.isoformat(), self.owner_user_id)
